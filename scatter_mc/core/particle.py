"""
Particle state as seen by the interaction finder.

The finder only reads particles; they are owned and advanced by the
simulation. Four-vectors are float64 arrays ordered (t, x, y, z) and
(E, px, py, pz) so they can be handed straight to the numba kernels.
"""

import numpy as np
from typing import Optional, Sequence

from scatter_mc.core.catalog import ParticleType


class Particle:
    """Single simulation particle."""

    __slots__ = ('id', 'type', 'position', 'momentum', 'id_process',
                 'collisions_per_particle', 'formation_time',
                 'begin_formation_time', 'initial_xsec_scaling_factor',
                 'formation_power')

    def __init__(self, particle_id: int, ptype: ParticleType,
                 position: Sequence[float] = (0.0, 0.0, 0.0, 0.0),
                 momentum: Optional[Sequence[float]] = None,
                 id_process: int = 0,
                 collisions_per_particle: int = 0,
                 formation_time: float = 0.0,
                 begin_formation_time: float = 0.0,
                 initial_xsec_scaling_factor: float = 1.0,
                 formation_power: float = 0.0):
        """
        Initialize a particle.

        Parameters:
            particle_id: Unique id, increasing with creation order (>= 0)
            ptype: Particle type from the catalog
            position: (t, x, y, z) [fm]
            momentum: (E, px, py, pz) [GeV]; at rest with pole mass if None
            id_process: Id of the last process the particle took part in
                (0 = none)
            collisions_per_particle: Number of interactions so far
            formation_time: Time at which the particle is fully formed [fm]
            begin_formation_time: Time at which formation started [fm]
            initial_xsec_scaling_factor: Cross-section scaling before
                formation
            formation_power: Growth power of the scaling factor; <= 0 means
                a step at the formation time
        """
        if particle_id < 0:
            raise ValueError(f"Particle id must be non-negative, got {particle_id}")

        self.id = int(particle_id)
        self.type = ptype
        self.position = np.array(position, dtype=np.float64)
        if momentum is None:
            momentum = (ptype.mass, 0.0, 0.0, 0.0)
        self.momentum = np.array(momentum, dtype=np.float64)
        if self.position.shape != (4,) or self.momentum.shape != (4,):
            raise ValueError("Position and momentum must be four-vectors")

        self.id_process = int(id_process)
        self.collisions_per_particle = int(collisions_per_particle)
        self.formation_time = float(formation_time)
        self.begin_formation_time = float(begin_formation_time)
        self.initial_xsec_scaling_factor = float(initial_xsec_scaling_factor)
        self.formation_power = float(formation_power)

    @property
    def name(self) -> str:
        return self.type.name

    @property
    def pole_mass(self) -> float:
        return self.type.mass

    def set_4momentum(self, mass: float, px: float, py: float, pz: float):
        """Set on-shell momentum for the given mass [GeV]."""
        energy = np.sqrt(mass**2 + px**2 + py**2 + pz**2)
        self.momentum = np.array([energy, px, py, pz], dtype=np.float64)

    def effective_mass(self) -> float:
        """Invariant mass sqrt(p^2) [GeV]; zero for space-like round-off."""
        m_sqr = self.momentum[0]**2 - np.dot(self.momentum[1:], self.momentum[1:])
        return float(np.sqrt(m_sqr)) if m_sqr > 0.0 else 0.0

    def velocity(self) -> np.ndarray:
        """Three-velocity p/E."""
        return self.momentum[1:] / self.momentum[0]

    def xsec_scaling_factor(self, delta_time: float = 0.0) -> float:
        """
        Cross-section scaling factor at position time + delta_time.

        Before formation the factor either stays at its initial value
        (formation_power <= 0) or grows as a power law from the initial
        value towards 1 between begin_formation_time and formation_time.
        Formed particles always scale with 1.
        """
        time_of_interest = self.position[0] + delta_time
        if time_of_interest >= self.formation_time:
            return 1.0
        if self.formation_power <= 0.0:
            return self.initial_xsec_scaling_factor

        span = self.formation_time - self.begin_formation_time
        if span <= 0.0:
            return self.initial_xsec_scaling_factor
        fraction = max(0.0, (time_of_interest - self.begin_formation_time) / span)
        return (self.initial_xsec_scaling_factor
                + (1.0 - self.initial_xsec_scaling_factor)
                * fraction**self.formation_power)

    def __repr__(self) -> str:
        return (f"Particle(id={self.id}, {self.type.name}, "
                f"x={np.round(self.position, 4).tolist()}, "
                f"p={np.round(self.momentum, 4).tolist()})")
