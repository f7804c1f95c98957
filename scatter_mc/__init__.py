"""
SCATTER_MC: Interaction finder for hadronic transport

Finds the two-body and three-body interactions of a timestep in a
particle-transport simulation and tabulates partial and exclusive
final-state cross sections.

Modules:
    core: Particle state, particle type catalog
    physics: Kinematics, collision criteria, cross sections, decay trees
    transport: Interaction evaluators, search orchestrator, table dumps
    config: Collision-term configuration (YAML)
    errors: Exception types
"""

__version__ = "0.1.0"

from scatter_mc.config import CollisionTermConfig, StringParameters
from scatter_mc.core.catalog import ParticleCatalog, ParticleType
from scatter_mc.core.particle import Particle
from scatter_mc.physics.criterion import CollisionCriterion
from scatter_mc.physics.cross_sections import CrossSections
from scatter_mc.physics.decaytree import DecayTree
from scatter_mc.transport.finder import ScatterActionsFinder

__all__ = [
    "CollisionTermConfig",
    "StringParameters",
    "ParticleCatalog",
    "ParticleType",
    "Particle",
    "CollisionCriterion",
    "CrossSections",
    "DecayTree",
    "ScatterActionsFinder",
]
