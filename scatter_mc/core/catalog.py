"""
Read-only particle-type and decay-table catalog.

Types, decay branches and tabulated 2->2 reactions are loaded once from YAML
and never modified afterwards. Particle types compare by identity; there is
exactly one ParticleType object per name in a catalog.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

import yaml

from scatter_mc.errors import CatalogError

logger = logging.getLogger(__name__)

DEFAULT_CATALOG = Path(__file__).parent.parent / 'data' / 'particles.yaml'

# Types narrower than this are treated as stable [GeV]
WIDTH_CUTOFF = 1e-5


class DecayBranch:
    """One decay channel of a resonance."""

    __slots__ = ('weight', 'particle_types')

    def __init__(self, weight: float, particle_types: Tuple["ParticleType", ...]):
        """
        Parameters:
            weight: Branching ratio (normalized per parent type)
            particle_types: Decay products
        """
        self.weight = float(weight)
        self.particle_types = tuple(particle_types)

    @property
    def final_state_mass(self) -> float:
        """Sum of product pole masses [GeV]."""
        return sum(p.mass for p in self.particle_types)

    def __repr__(self) -> str:
        products = ''.join(p.name for p in self.particle_types)
        return f"DecayBranch({self.weight:.4f}, {products})"


class ParticleType:
    """Immutable particle-type descriptor."""

    __slots__ = ('name', 'mass', 'width', 'spin', 'charge', 'baryon_number',
                 'decay_modes')

    def __init__(self, name: str, mass: float, width: float = 0.0,
                 spin: float = 0.0, charge: int = 0, baryon_number: int = 0):
        """
        Parameters:
            name: Unique name (e.g. 'p', 'pi+', 'Delta++')
            mass: Pole mass [GeV]
            width: Pole width [GeV]
            spin: Spin J
            charge: Electric charge [e]
            baryon_number: Baryon number
        """
        if mass < 0 or width < 0:
            raise CatalogError(f"Negative mass or width for '{name}'")
        self.name = name
        self.mass = float(mass)
        self.width = float(width)
        self.spin = float(spin)
        self.charge = int(charge)
        self.baryon_number = int(baryon_number)
        self.decay_modes: Tuple[DecayBranch, ...] = ()

    @property
    def is_stable(self) -> bool:
        return self.width < WIDTH_CUTOFF or not self.decay_modes

    @property
    def is_meson(self) -> bool:
        return self.baryon_number == 0 and self.name != 'gamma'

    @property
    def is_nucleon(self) -> bool:
        return self.name in ('p', 'n')

    @property
    def spin_degeneracy(self) -> int:
        return int(round(2 * self.spin)) + 1

    def __repr__(self) -> str:
        return f"ParticleType({self.name}, m={self.mass:.3f} GeV, Γ={self.width:.3f} GeV)"


class Reaction:
    """Tabulated 2->2 inelastic reaction with a constant cross section."""

    __slots__ = ('family', 'incoming', 'outgoing', 'cross_section')

    def __init__(self, family: str, incoming: Tuple[ParticleType, ParticleType],
                 outgoing: Tuple[ParticleType, ParticleType], cross_section: float):
        self.family = family
        self.incoming = tuple(incoming)
        self.outgoing = tuple(outgoing)
        self.cross_section = float(cross_section)

    @property
    def threshold(self) -> float:
        """Minimum sqrt(s) at pole masses [GeV]."""
        return sum(p.mass for p in self.outgoing)

    def __repr__(self) -> str:
        inc = ''.join(p.name for p in self.incoming)
        out = ''.join(p.name for p in self.outgoing)
        return f"Reaction({self.family}: {inc}->{out}, {self.cross_section} mb)"


def _multiset_key(types: Iterable[ParticleType]) -> Tuple[str, ...]:
    return tuple(sorted(t.name for t in types))


class ParticleCatalog:
    """
    Name -> ParticleType lookup plus reaction table.

    Usage:
        catalog = ParticleCatalog.default()
        delta = catalog['Delta++']
        for branch in delta.decay_modes:
            print(branch.weight, [p.name for p in branch.particle_types])
    """

    def __init__(self, types: Iterable[ParticleType],
                 reactions: Iterable[Reaction] = ()):
        self._types: Dict[str, ParticleType] = {}
        for ptype in types:
            if ptype.name in self._types:
                raise CatalogError(f"Duplicate particle type '{ptype.name}'")
            self._types[ptype.name] = ptype
        self.reactions: Tuple[Reaction, ...] = tuple(reactions)

        # Index resonances by the sorted names of their decay products
        self._formation_index: Dict[Tuple[str, ...], List[Tuple[ParticleType, DecayBranch]]] = {}
        for ptype in self._types.values():
            for branch in ptype.decay_modes:
                key = _multiset_key(branch.particle_types)
                self._formation_index.setdefault(key, []).append((ptype, branch))

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def __getitem__(self, name: str) -> ParticleType:
        try:
            return self._types[name]
        except KeyError:
            raise ValueError(f"Unknown particle type '{name}'. "
                             f"Available: {sorted(self._types)}") from None

    def __contains__(self, name: str) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[ParticleType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def list_all(self) -> List[ParticleType]:
        """All types sorted by mass, then name."""
        return sorted(self._types.values(), key=lambda t: (t.mass, t.name))

    def resonances_decaying_to(self, types: Iterable[ParticleType]) -> List[Tuple[ParticleType, DecayBranch]]:
        """Unstable types with a decay branch into exactly this multiset."""
        return list(self._formation_index.get(_multiset_key(types), []))

    def reactions_for(self, type_a: ParticleType, type_b: ParticleType) -> List[Reaction]:
        key = _multiset_key((type_a, type_b))
        return [r for r in self.reactions if _multiset_key(r.incoming) == key]

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ParticleCatalog":
        """
        Build from a mapping with 'particles' and optional 'reactions'.

        Format:
            particles:
                Delta++:
                    mass: 1.232
                    width: 0.117
                    spin: 1.5
                    charge: 2
                    baryon_number: 1
                    decays:
                        - {ratio: 1.0, products: [p, pi+]}
            reactions:
                - {family: NN_to_DR, incoming: [p, p],
                   outgoing: [n, Delta++], cross_section: 20.0}
        """
        particles = data.get('particles')
        if not particles:
            raise CatalogError("Catalog contains no particles")

        types = {}
        for name, entry in particles.items():
            entry = entry or {}
            if 'mass' not in entry:
                raise CatalogError(f"Particle '{name}' has no mass")
            types[name] = ParticleType(
                name, entry['mass'],
                width=entry.get('width', 0.0),
                spin=entry.get('spin', 0.0),
                charge=entry.get('charge', 0),
                baryon_number=entry.get('baryon_number', 0),
            )

        # Second pass: decay products refer to other types
        for name, entry in particles.items():
            decays = (entry or {}).get('decays') or []
            total = sum(float(d['ratio']) for d in decays)
            branches = []
            for decay in decays:
                try:
                    products = tuple(types[p] for p in decay['products'])
                except KeyError as e:
                    raise CatalogError(
                        f"Decay of '{name}' names unknown product {e}") from None
                if len(products) < 2:
                    raise CatalogError(f"Decay of '{name}' needs >= 2 products")
                ratio = float(decay['ratio'])
                if ratio < 0:
                    raise CatalogError(f"Negative branching ratio for '{name}'")
                branches.append(DecayBranch(ratio / total, products))
            types[name].decay_modes = tuple(branches)

        reactions = []
        for entry in data.get('reactions') or []:
            try:
                incoming = tuple(types[p] for p in entry['incoming'])
                outgoing = tuple(types[p] for p in entry['outgoing'])
            except KeyError as e:
                raise CatalogError(f"Reaction names unknown particle {e}") from None
            if len(incoming) != 2 or len(outgoing) != 2:
                raise CatalogError(f"Reaction {entry} is not 2->2")
            reactions.append(Reaction(entry['family'], incoming, outgoing,
                                      entry['cross_section']))

        return cls(types.values(), reactions)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "ParticleCatalog":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Particle catalog not found: {path}")
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
        catalog = cls.from_dict(data)
        logger.info("Loaded %d particle types and %d reactions from %s",
                    len(catalog), len(catalog.reactions), path.name)
        return catalog

    @classmethod
    def default(cls) -> "ParticleCatalog":
        """Catalog shipped with the package (cached)."""
        return _load_default(str(DEFAULT_CATALOG))

    def __repr__(self) -> str:
        return f"ParticleCatalog({len(self)} types, {len(self.reactions)} reactions)"


@lru_cache(maxsize=None)
def _load_default(path: str) -> ParticleCatalog:
    return ParticleCatalog.from_yaml(path)
