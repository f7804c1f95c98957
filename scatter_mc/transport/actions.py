"""
Interaction candidates produced by the finder.

Two kinds exist and are handled by matching on the type rather than through
a common base class:

    PairwiseInteraction        2 -> n scattering found by any criterion
    MultiParticleInteraction   3 -> 1 fusion found by the stochastic criterion

Each candidate is consumed once by the execution stage, which either applies
it or drops it because another accepted interaction already used one of its
particles.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

import numpy as np

from scatter_mc.core.particle import Particle
from scatter_mc.physics import kinematics
from scatter_mc.physics.cross_sections import CollisionBranch, ProcessType


def _dominant_process(channels: List[CollisionBranch]) -> ProcessType:
    if not channels:
        return ProcessType.NONE
    return max(channels, key=lambda c: c.weight).process_type


@dataclass
class PairwiseInteraction:
    """Candidate two-body interaction."""

    incoming: Tuple[Particle, Particle]
    time_until_collision: float  # fm, within [0, dt)
    isotropic: bool = False
    string_formation_time: float = 1.0  # fm
    collision_channels: List[CollisionBranch] = field(default_factory=list)
    cross_section: float = 0.0  # mb, total of all channels
    probability: Optional[float] = None  # only set by the stochastic criterion

    def __post_init__(self):
        if self.time_until_collision < 0.0:
            raise ValueError(
                f"Negative collision time {self.time_until_collision} fm")

    def add_collision_channels(self, channels: List[CollisionBranch]):
        self.collision_channels.extend(channels)
        self.cross_section += sum(c.weight for c in channels)

    @property
    def process_type(self) -> ProcessType:
        return _dominant_process(self.collision_channels)

    @property
    def time_of_execution(self) -> float:
        return self.incoming[0].position[0] + self.time_until_collision

    def sqrt_s(self) -> float:
        a, b = self.incoming
        return float(np.sqrt(kinematics.mandelstam_s(a.momentum, b.momentum)))

    def relative_velocity(self) -> float:
        a, b = self.incoming
        return kinematics.relative_velocity(a.momentum, b.momentum)

    def transverse_distance_sqr(self) -> float:
        """Squared transverse distance in the pair CM frame [fm²]."""
        a, b = self.incoming
        return kinematics.transverse_distance_sqr(a.position, a.momentum,
                                                  b.position, b.momentum)

    def cov_transverse_distance_sqr(self) -> float:
        """Lorentz-invariant squared transverse distance [fm²]."""
        a, b = self.incoming
        return kinematics.cov_transverse_distance_sqr(a.position, a.momentum,
                                                      b.position, b.momentum)


@dataclass
class MultiParticleInteraction:
    """Candidate three-body fusion into a single resonance."""

    incoming: Tuple[Particle, ...]
    time_until_collision: float  # fm, drawn uniformly in [0, dt)
    collision_channels: List[CollisionBranch] = field(default_factory=list)
    probability: float = 0.0

    def __post_init__(self):
        if self.time_until_collision < 0.0:
            raise ValueError(
                f"Negative collision time {self.time_until_collision} fm")

    @property
    def process_type(self) -> ProcessType:
        return _dominant_process(self.collision_channels)

    @property
    def time_of_execution(self) -> float:
        return self.incoming[0].position[0] + self.time_until_collision

    def total_momentum(self) -> np.ndarray:
        return np.sum([p.momentum for p in self.incoming], axis=0)

    def sqrt_s(self) -> float:
        total = self.total_momentum()
        s = kinematics.minkowski_sqr(total)
        return float(np.sqrt(s)) if s > 0.0 else 0.0


Interaction = Union[PairwiseInteraction, MultiParticleInteraction]


def incoming_particles(action: Interaction) -> Tuple[Particle, ...]:
    match action:
        case PairwiseInteraction(incoming=incoming) | MultiParticleInteraction(incoming=incoming):
            return tuple(incoming)
    raise TypeError(f"Not an interaction: {action!r}")


def describe(action: Interaction) -> str:
    """One-line summary for logs."""
    match action:
        case PairwiseInteraction():
            a, b = action.incoming
            return (f"{a.name}({a.id}) + {b.name}({b.id}) at "
                    f"t+{action.time_until_collision:.4f} fm, "
                    f"σ = {action.cross_section:.3f} mb, "
                    f"{len(action.collision_channels)} channels")
        case MultiParticleInteraction():
            names = ' + '.join(f"{p.name}({p.id})" for p in action.incoming)
            return (f"{names} at t+{action.time_until_collision:.4f} fm, "
                    f"P = {action.probability:.3e}")
    raise TypeError(f"Not an interaction: {action!r}")
