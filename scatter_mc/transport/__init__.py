"""Transport module: Interaction candidates, evaluators and the search orchestrator."""

from scatter_mc.transport.actions import MultiParticleInteraction, PairwiseInteraction
from scatter_mc.transport.evaluator import ColliderSetup, MultiParticleEvaluator, PairwiseEvaluator
from scatter_mc.transport.finder import ScatterActionsFinder

__all__ = [
    "MultiParticleInteraction",
    "PairwiseInteraction",
    "ColliderSetup",
    "MultiParticleEvaluator",
    "PairwiseEvaluator",
    "ScatterActionsFinder",
]
