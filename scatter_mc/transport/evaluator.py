"""
Pairwise and multi-particle interaction evaluators.

Given a candidate pair (or triple) and the timestep, decide whether it
interacts during this step and build the corresponding candidate. Both
evaluators are side-effect free apart from the draws they take from the
random generator they are handed.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from scatter_mc.core.particle import Particle
from scatter_mc.errors import TestparticleError
from scatter_mc.physics import criterion as crit
from scatter_mc.physics import kinematics
from scatter_mc.physics.criterion import CollisionCriterion
from scatter_mc.physics.cross_sections import CollisionBranch, CrossSections, ProcessType
from scatter_mc.physics.kinematics import FM2_MB, HBARC, REALLY_SMALL
from scatter_mc.transport.actions import MultiParticleInteraction, PairwiseInteraction

logger = logging.getLogger(__name__)


class ColliderSetup:
    """
    Nucleus membership of the initial nucleons in a collider run.

    Particles with id < n_projectile belong to the projectile, ids in
    [n_projectile, n_total) to the target. Two nucleons of the same nucleus
    that have both never interacted cannot collide with each other.
    """

    def __init__(self, n_total: int, n_projectile: int,
                 nucleon_has_interacted: Sequence[bool]):
        """
        Parameters:
            n_total: Number of initial nucleons in both nuclei
            n_projectile: Number of projectile nucleons
            nucleon_has_interacted: Interaction flag per initial nucleon
                (read-only view owned by the simulation)
        """
        if not 0 <= n_projectile <= n_total:
            raise ValueError(f"Need 0 <= n_projectile <= n_total, "
                             f"got {n_projectile}, {n_total}")
        if len(nucleon_has_interacted) < n_total:
            raise ValueError("nucleon_has_interacted shorter than n_total")
        self.n_total = n_total
        self.n_projectile = n_projectile
        self.nucleon_has_interacted = nucleon_has_interacted

    def same_nucleus_spectators(self, a: Particle, b: Particle) -> bool:
        if a.id >= self.n_total or b.id >= self.n_total:
            return False
        same_nucleus = ((a.id < self.n_projectile) == (b.id < self.n_projectile))
        return same_nucleus and not (self.nucleon_has_interacted[a.id]
                                     or self.nucleon_has_interacted[b.id])


def _momentum_for_search(p: Particle, beam_momentum) -> np.ndarray:
    """
    Beam momentum for initial nucleons without collisions, else the real one.

    Nucleons of a collider run move with the beam until they first interact
    (frozen Fermi motion), so that is what the finder must extrapolate.
    """
    if p.id < len(beam_momentum) and p.collisions_per_particle == 0:
        return np.asarray(beam_momentum[p.id], dtype=np.float64)
    return p.momentum


class PairwiseEvaluator:
    """
    Decides whether two particles interact within a timestep.

    Usage:
        evaluator = PairwiseEvaluator(config, cross_sections)
        action = evaluator.evaluate(p1, p2, dt=0.1)
        if action is not None:
            print(describe(action))
    """

    def __init__(self, config, cross_sections: CrossSections,
                 collider: Optional[ColliderSetup] = None):
        """
        Parameters:
            config: CollisionTermConfig
            cross_sections: Channel enumeration
            collider: Nucleus membership (collider runs only)
        """
        self.criterion: CollisionCriterion = config.collision_criterion
        self.testparticles = config.testparticles
        self.isotropic = config.isotropic
        self.string_formation_time = config.string_parameters.formation_time
        self.cross_sections = cross_sections
        self.collider = collider

        constant_elastic = (config.elastic_cross_section
                            if config.is_constant_elastic_isotropic else None)
        self.max_distance_sqr = crit.max_transverse_distance_sqr(
            self.testparticles, constant_elastic)

    def collision_time(self, a: Particle, b: Particle, beam_momentum=()) -> float:
        """Time until closest approach [fm]; negative if there is none."""
        p_a = _momentum_for_search(a, beam_momentum)
        p_b = _momentum_for_search(b, beam_momentum)
        if self.criterion is CollisionCriterion.COVARIANT:
            return kinematics.collision_time_covariant(a.position, p_a,
                                                       b.position, p_b)
        return kinematics.collision_time_geometric(a.position, p_a,
                                                   b.position, p_b)

    def evaluate(self, a: Particle, b: Particle, dt: float, beam_momentum=(),
                 cell_volume: float = 0.0,
                 rng: Optional[np.random.Generator] = None) -> Optional[PairwiseInteraction]:
        """
        Check a pair for an interaction in [0, dt).

        Parameters:
            a, b: Candidate particles
            dt: Timestep [fm]
            beam_momentum: Beam four-momenta indexed by particle id
                (collider runs only)
            cell_volume: Search cell volume [fm³], stochastic criterion only
            rng: Random generator, required by the stochastic criterion

        Returns:
            The accepted interaction or None

        Raises:
            ProbabilityOverflowError: Stochastic probability above one
        """
        stochastic = self.criterion is CollisionCriterion.STOCHASTIC

        if self.collider is not None and self.collider.same_nucleus_spectators(a, b):
            return None

        # No grid or search in cell means no collision for stochastic criterion
        if stochastic and cell_volume < REALLY_SMALL:
            return None
        if stochastic and rng is None:
            raise ValueError("Stochastic criterion needs a random generator")

        if self.criterion is CollisionCriterion.COVARIANT:
            for p in (a, b):
                momentum = _momentum_for_search(p, beam_momentum)
                if kinematics.minkowski_sqr(momentum) < REALLY_SMALL:
                    logger.warning("Covariant criterion is undefined for "
                                   "near-massless momentum %s of %r; skipping",
                                   momentum, p)
                    return None

        time_until_collision = self.collision_time(a, b, beam_momentum)
        if time_until_collision < 0.0 or time_until_collision >= dt:
            return None

        act = PairwiseInteraction((a, b), time_until_collision,
                                  isotropic=self.isotropic,
                                  string_formation_time=self.string_formation_time)

        distance_sqr = 0.0
        if self.criterion is CollisionCriterion.GEOMETRIC:
            distance_sqr = act.transverse_distance_sqr()
        elif self.criterion is CollisionCriterion.COVARIANT:
            distance_sqr = act.cov_transverse_distance_sqr()

        # Skip the cross sections if no process can reach this far
        if not stochastic and distance_sqr >= self.max_distance_sqr:
            return None

        act.add_collision_channels(
            self.cross_sections.collision_channels(a.type, b.type, act.sqrt_s()))

        xs = act.cross_section * FM2_MB / self.testparticles
        xs *= a.xsec_scaling_factor(time_until_collision)
        xs *= b.xsec_scaling_factor(time_until_collision)

        if stochastic:
            v_rel = act.relative_velocity()
            probability = crit.stochastic_probability(xs, v_rel, dt, cell_volume)
            logger.debug("Stochastic collision criterion parameters: "
                         "prob = %g, xs = %g, v_rel = %g, dt = %g, "
                         "cell_vol = %g, testparticles = %d",
                         probability, xs, v_rel, dt, cell_volume,
                         self.testparticles)
            if not crit.stochastic_accepts(probability, rng):
                return None
            act.probability = probability
        else:
            if crit.is_repeated_process(a, b):
                logger.debug("Skipping collided particles at time %g due to "
                             "process %d: %r <-> %r", a.position[0],
                             a.id_process, a, b)
                return None
            if not crit.geometric_accepts(distance_sqr, xs):
                return None
            logger.debug("Particle distance squared: %g, %r <-> %r",
                         distance_sqr, a, b)

        return act


class MultiParticleEvaluator:
    """
    Stochastic 3 -> 1 fusion test for a triple inside one cell.

    The rate follows from detailed balance with the 1 -> 3 decay:

        P = Δt/ΔV² · π/(4 E1 E2 E3) · Γ_{R->123}/Φ₃ · A_R(√s) · (ħc)⁵ · g
    """

    def __init__(self, config, cross_sections: CrossSections):
        self.testparticles = config.testparticles
        self.cross_sections = cross_sections

    def add_final_state(self, act: MultiParticleInteraction):
        """Attach every open 3 -> 1 channel (probability filled in later)."""
        types = [p.type for p in act.incoming]
        for resonance, _ in self.cross_sections.three_to_one_channels(types, act.sqrt_s()):
            act.collision_channels.append(
                CollisionBranch((resonance,), 0.0, ProcessType.THREE_TO_ONE))

    def probability(self, act: MultiParticleInteraction, dt: float,
                    cell_volume: float) -> float:
        """Sum of the channel probabilities; also stored on each channel."""
        sqrts = act.sqrt_s()
        types = [p.type for p in act.incoming]
        energies = np.prod([p.momentum[0] for p in act.incoming])
        phase_space = kinematics.three_body_phase_space(
            sqrts, *(t.mass for t in types))
        if phase_space <= 0.0:
            return 0.0

        ratios = dict(self.cross_sections.three_to_one_channels(types, sqrts))
        total = 0.0
        for channel in act.collision_channels:
            resonance = channel.particle_types[0]
            partial_width = ratios[resonance] * resonance.width
            spectral = kinematics.breit_wigner(sqrts, resonance.mass, resonance.width)
            degeneracy = self.cross_sections.degeneracy_factor(resonance, types)
            channel.weight = (dt / (cell_volume * cell_volume)
                              * np.pi / (4.0 * energies)
                              * partial_width / phase_space
                              * spectral * HBARC**5 * degeneracy)
            total += channel.weight
        return total

    def evaluate(self, particles: Sequence[Particle], dt: float, cell_volume: float,
                 rng: Optional[np.random.Generator]) -> Optional[MultiParticleInteraction]:
        """
        Check a triple for fusion within [0, dt).

        Raises:
            TestparticleError: testparticles != 1
            ProbabilityOverflowError: P_nm above one
        """
        if cell_volume < REALLY_SMALL:
            return None
        if self.testparticles != 1:
            raise TestparticleError(self.testparticles)
        if rng is None:
            raise ValueError("Stochastic criterion needs a random generator")

        time_until_collision = dt * rng.random()
        act = MultiParticleInteraction(tuple(particles), time_until_collision)

        self.add_final_state(act)
        if act.process_type is ProcessType.NONE:
            return None

        probability = self.probability(act, dt, cell_volume)
        crit.check_probability(probability, 'P_nm')
        if not crit.stochastic_accepts(probability, rng):
            return None

        act.probability = probability
        return act
