"""Shared fixtures: catalogs, configurations and particle factories."""

import numpy as np
import pytest

from scatter_mc.config import CollisionTermConfig
from scatter_mc.core.catalog import ParticleCatalog
from scatter_mc.core.particle import Particle
from scatter_mc.physics.cross_sections import CrossSections


@pytest.fixture(scope="session")
def catalog():
    return ParticleCatalog.default()


@pytest.fixture(scope="session")
def toy_catalog():
    """Resonance R -> AB (70%) | CD (30%), heavy H that can never decay."""
    return ParticleCatalog.from_dict({
        'particles': {
            'A': {'mass': 0.4},
            'B': {'mass': 0.4},
            'C': {'mass': 0.3},
            'D': {'mass': 0.3},
            'X': {'mass': 0.5},
            'R': {'mass': 1.2, 'width': 0.1,
                  'decays': [{'ratio': 0.7, 'products': ['A', 'B']},
                             {'ratio': 0.3, 'products': ['C', 'D']}]},
            'H': {'mass': 1.0, 'width': 0.1,
                  'decays': [{'ratio': 1.0, 'products': ['X', 'X', 'X', 'X']}]},
        },
    })


@pytest.fixture
def make_config():
    """Config factory; constant 40 mb elastic only unless overridden."""
    def factory(**overrides):
        kwargs = dict(collision_criterion='Geometric',
                      elastic_cross_section=40.0,
                      two_to_one=False,
                      included_2to2=['Elastic'],
                      strings=False)
        kwargs.update(overrides)
        return CollisionTermConfig(**kwargs)
    return factory


@pytest.fixture
def make_xs(catalog):
    def factory(config):
        return CrossSections(catalog, config)
    return factory


@pytest.fixture
def make_particle():
    """Particle factory with an on-shell momentum from a three-momentum."""
    def factory(pid, ptype, x=(0.0, 0.0, 0.0), p=(0.0, 0.0, 0.0), t=0.0, **kwargs):
        p = np.asarray(p, dtype=np.float64)
        energy = np.sqrt(ptype.mass**2 + p @ p)
        return Particle(pid, ptype, (t, *x), (energy, *p), **kwargs)
    return factory


@pytest.fixture
def head_on_pair(catalog, make_particle):
    """
    Two protons at x = -1 and x = +1 fm moving towards each other with
    |p| = 1 GeV; the second is offset by b in y.
    """
    def factory(b=0.0, ids=(0, 1), **kwargs):
        proton = catalog['p']
        first = make_particle(ids[0], proton, (-1.0, 0.0, 0.0), (1.0, 0.0, 0.0), **kwargs)
        second = make_particle(ids[1], proton, (1.0, b, 0.0), (-1.0, 0.0, 0.0), **kwargs)
        return first, second
    return factory
