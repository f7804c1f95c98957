"""Acceptance rules of the collision criteria."""

import pickle

import numpy as np
import pytest

from scatter_mc.errors import ConfigurationError, ProbabilityOverflowError, TestparticleError
from scatter_mc.physics import criterion as crit
from scatter_mc.physics.criterion import CollisionCriterion


def test_from_string_case_insensitive():
    assert CollisionCriterion.from_string('stochastic') is CollisionCriterion.STOCHASTIC
    assert CollisionCriterion.from_string('Covariant') is CollisionCriterion.COVARIANT


def test_from_string_unknown():
    with pytest.raises(ConfigurationError, match="Unknown collision criterion"):
        CollisionCriterion.from_string('Sphere')


def test_uses_distance():
    assert CollisionCriterion.GEOMETRIC.uses_distance
    assert CollisionCriterion.COVARIANT.uses_distance
    assert not CollisionCriterion.STOCHASTIC.uses_distance


def test_max_transverse_distance():
    assert crit.max_transverse_distance_sqr(1) == pytest.approx(20.0 / np.pi)
    assert crit.max_transverse_distance_sqr(4) == pytest.approx(5.0 / np.pi)
    assert crit.max_transverse_distance_sqr(1, constant_elastic=30.0) == pytest.approx(3.0 / np.pi)


def test_geometric_accepts_strictly_below():
    xs_fm2 = 4.0
    assert crit.geometric_accepts(1.0, xs_fm2)
    assert not crit.geometric_accepts(xs_fm2 / np.pi, xs_fm2)
    assert not crit.geometric_accepts(2.0, xs_fm2)


def test_probability_of_exactly_one_is_accepted():
    crit.check_probability(1.0)
    rng = np.random.default_rng(3)
    assert all(crit.stochastic_accepts(1.0, rng) for _ in range(1000))


def test_probability_above_one_raises():
    with pytest.raises(ProbabilityOverflowError) as excinfo:
        crit.check_probability(1.0 + 1e-12, 'P_nm')
    assert excinfo.value.quantity == 'P_nm'
    assert "Use smaller timesteps." in str(excinfo.value)


def test_errors_survive_pickling():
    # Worker processes send exceptions back pickled
    error = pickle.loads(pickle.dumps(ProbabilityOverflowError(1.5, 'P_nm')))
    assert (error.probability, error.quantity) == (1.5, 'P_nm')
    assert str(error) == str(ProbabilityOverflowError(1.5, 'P_nm'))

    error = pickle.loads(pickle.dumps(TestparticleError(3)))
    assert error.testparticles == 3
    assert str(error) == str(TestparticleError(3))


def test_stochastic_probability():
    p = crit.stochastic_probability(2.0, 0.5, 0.1, 10.0)
    assert p == pytest.approx(0.01)
    with pytest.raises(ProbabilityOverflowError):
        crit.stochastic_probability(2.0, 0.5, 0.1, 0.05)


def test_repeated_process():
    class Stub:
        def __init__(self, id_process):
            self.id_process = id_process

    assert crit.is_repeated_process(Stub(7), Stub(7))
    assert not crit.is_repeated_process(Stub(7), Stub(8))
    assert not crit.is_repeated_process(Stub(0), Stub(0))
