"""
Process enumeration and partial cross sections.

This is the black box the finder consults: for a pair of types at a given
sqrt(s) it lists every open channel with its partial cross section. The
parametrizations are deliberately simple; the finder only relies on the
channel list and the total.

    Elastic           constant override or 10 mb (2/3)^n_mesons
    2->1 formation    Breit-Wigner into every resonance decaying to the pair
    2->2 tabulated    catalog reactions above threshold
    String            remainder of the AQM total 40 mb (2/3)^n_mesons
"""

import enum
from math import factorial
from collections import Counter
from typing import List, Sequence, Tuple

import numpy as np

from scatter_mc.core.catalog import ParticleCatalog, ParticleType
from scatter_mc.physics.kinematics import FM2_MB, HBARC, pcm_from_s

# Additive quark model total for baryon-baryon [mb]
AQM_TOTAL = 40.0
AQM_ELASTIC = 10.0


class ProcessType(enum.Enum):
    NONE = 0
    ELASTIC = 1
    TWO_TO_ONE = 2
    TWO_TO_TWO = 3
    STRING_SOFT = 4
    THREE_TO_ONE = 5


class CollisionBranch:
    """One outgoing channel of an interaction."""

    __slots__ = ('particle_types', 'weight', 'process_type')

    def __init__(self, particle_types: Sequence[ParticleType], weight: float,
                 process_type: ProcessType):
        """
        Parameters:
            particle_types: Outgoing types (empty for unresolved strings)
            weight: Partial cross section [mb], or probability for
                multi-particle channels
            process_type: Process classification
        """
        self.particle_types = tuple(particle_types)
        self.weight = float(weight)
        self.process_type = process_type

    @property
    def description(self) -> str:
        if self.process_type is ProcessType.STRING_SOFT:
            return 'string'
        return ''.join(p.name for p in self.particle_types)

    @property
    def final_state_mass(self) -> float:
        return sum(p.mass for p in self.particle_types)

    def __repr__(self) -> str:
        return (f"CollisionBranch({self.description}, {self.weight:.4g}, "
                f"{self.process_type.name})")


def n_mesons(*types: ParticleType) -> int:
    return sum(1 for t in types if t.is_meson)


class CrossSections:
    """
    Channel enumeration for pairs and triples.

    Usage:
        xs = CrossSections(ParticleCatalog.default(), config)
        channels = xs.collision_channels(catalog['p'], catalog['pi+'], 1.23)
        total = sum(c.weight for c in channels)
    """

    def __init__(self, catalog: ParticleCatalog, config):
        """
        Parameters:
            catalog: Particle types, decay tables and reaction table
            config: CollisionTermConfig (elastic override, 2->1 switch,
                included 2->2 families, NN cutoff, string switch)
        """
        self.catalog = catalog
        self.config = config

    # ------------------------------------------------------------------
    # Two-body channels
    # ------------------------------------------------------------------

    def collision_channels(self, type_a: ParticleType, type_b: ParticleType,
                           sqrts: float) -> List[CollisionBranch]:
        """All open channels with non-zero cross section at sqrt(s) [GeV]."""
        channels = []
        elastic = self.elastic(type_a, type_b, sqrts)
        if elastic > 0.0:
            channels.append(CollisionBranch((type_a, type_b), elastic,
                                            ProcessType.ELASTIC))
        if self.config.two_to_one:
            channels.extend(self.two_to_one(type_a, type_b, sqrts))
        channels.extend(self.two_to_two(type_a, type_b, sqrts))
        if self.config.strings:
            string = self.string_excitation(type_a, type_b, sqrts, channels)
            if string > 0.0:
                channels.append(CollisionBranch((), string, ProcessType.STRING_SOFT))
        return channels

    def elastic(self, type_a: ParticleType, type_b: ParticleType,
                sqrts: float) -> float:
        """Elastic cross section [mb]."""
        if 'Elastic' not in self.config.included_2to2:
            return 0.0
        if (type_a.is_nucleon and type_b.is_nucleon
                and sqrts < self.config.elastic_nn_cutoff_sqrts):
            return 0.0
        if self.config.elastic_cross_section >= 0.0:
            return self.config.elastic_cross_section
        if sqrts <= type_a.mass + type_b.mass:
            return 0.0
        return AQM_ELASTIC * (2.0 / 3.0) ** n_mesons(type_a, type_b)

    def two_to_one(self, type_a: ParticleType, type_b: ParticleType,
                   sqrts: float) -> List[CollisionBranch]:
        """
        Resonance formation a + b -> R.

            σ = (2J_R+1) / ((2J_a+1)(2J_b+1)) · sym · 4π/p_cm² · BR ·
                (Γ²/4) / ((√s - M)² + Γ²/4) · (ħc)²

        with sym = 2 for identical incoming types.
        """
        s = sqrts * sqrts
        p_cm = pcm_from_s(s, type_a.mass, type_b.mass)
        if p_cm <= 0.0:
            return []

        symmetry = 2.0 if type_a.name == type_b.name else 1.0
        spin_factor = 1.0 / (type_a.spin_degeneracy * type_b.spin_degeneracy)
        channels = []
        for resonance, branch in self.catalog.resonances_decaying_to((type_a, type_b)):
            if resonance.is_stable:
                continue
            half_width_sqr = 0.25 * resonance.width**2
            bw = half_width_sqr / ((sqrts - resonance.mass) ** 2 + half_width_sqr)
            xs_fm2 = (resonance.spin_degeneracy * spin_factor * symmetry
                      * 4.0 * np.pi / p_cm**2 * branch.weight * bw * HBARC**2)
            xs = xs_fm2 / FM2_MB
            if xs > 0.0:
                channels.append(CollisionBranch((resonance,), xs,
                                                ProcessType.TWO_TO_ONE))
        return channels

    def two_to_two(self, type_a: ParticleType, type_b: ParticleType,
                   sqrts: float) -> List[CollisionBranch]:
        """Tabulated inelastic reactions above their pole-mass threshold."""
        channels = []
        for reaction in self.catalog.reactions_for(type_a, type_b):
            if reaction.family not in self.config.included_2to2:
                continue
            if sqrts <= reaction.threshold:
                continue
            channels.append(CollisionBranch(reaction.outgoing,
                                            reaction.cross_section,
                                            ProcessType.TWO_TO_TWO))
        return channels

    def string_excitation(self, type_a: ParticleType, type_b: ParticleType,
                          sqrts: float, other: Sequence[CollisionBranch]) -> float:
        """Part of the AQM total not covered by the other channels [mb]."""
        if sqrts < self.config.string_threshold_sqrts:
            return 0.0
        total = AQM_TOTAL * (2.0 / 3.0) ** n_mesons(type_a, type_b)
        return max(0.0, total - sum(c.weight for c in other))

    # ------------------------------------------------------------------
    # Three-body channels
    # ------------------------------------------------------------------

    def three_to_one_channels(self, types: Sequence[ParticleType],
                              sqrts: float) -> List[Tuple[ParticleType, float]]:
        """
        Resonances the triple can fuse into.

        Returns:
            List of (resonance, branching ratio into exactly these types)
        """
        if sqrts <= sum(t.mass for t in types):
            return []
        return [(resonance, branch.weight)
                for resonance, branch in self.catalog.resonances_decaying_to(types)
                if not resonance.is_stable and len(branch.particle_types) == 3]

    @staticmethod
    def degeneracy_factor(resonance: ParticleType,
                          types: Sequence[ParticleType]) -> float:
        """
        Spin degeneracy ratio times k! for k identical incoming types.

        The k! undoes the identical-particle symmetrisation of the decay
        phase space when inverting R -> 123.
        """
        spin = resonance.spin_degeneracy / float(np.prod([t.spin_degeneracy for t in types]))
        identical = 1
        for count in Counter(t.name for t in types).values():
            identical *= factorial(count)
        return spin * identical
