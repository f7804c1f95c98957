"""Physics module: Kinematics, collision criteria, cross sections, decay trees."""

from scatter_mc.physics.criterion import CollisionCriterion
from scatter_mc.physics.cross_sections import CollisionBranch, CrossSections, ProcessType
from scatter_mc.physics.decaytree import DecayTree, FinalStateCrossSection, deduplicate

__all__ = [
    "CollisionCriterion",
    "CollisionBranch",
    "CrossSections",
    "ProcessType",
    "DecayTree",
    "FinalStateCrossSection",
    "deduplicate",
]
