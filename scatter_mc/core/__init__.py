"""Core module: Particle state and the read-only type catalog."""

from scatter_mc.core.catalog import DecayBranch, ParticleCatalog, ParticleType, Reaction
from scatter_mc.core.particle import Particle

__all__ = ["DecayBranch", "ParticleCatalog", "ParticleType", "Reaction", "Particle"]
