"""
Search orchestrator: enumerates candidate pairs and triples.

The grid hands the finder three kinds of particle groups:

    in-cell       all particles of one cell (pairs, plus triples for the
                  stochastic criterion)
    neighbors     particles of a cell against those of an adjacent cell
    surrounding   particles of the current search against everything else

Pairs are always passed to the evaluator with the lower id first so that
floating-point round-off cannot make the result depend on the order in which
the grid lists the particles.
"""

import logging
import multiprocessing as mp
from typing import List, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from scatter_mc.core.particle import Particle
from scatter_mc.physics.criterion import CollisionCriterion
from scatter_mc.physics.cross_sections import CrossSections
from scatter_mc.transport.actions import Interaction, PairwiseInteraction
from scatter_mc.transport.evaluator import ColliderSetup, MultiParticleEvaluator, PairwiseEvaluator

logger = logging.getLogger(__name__)


def _ordered(a: Particle, b: Particle) -> Tuple[Particle, Particle]:
    return (a, b) if a.id <= b.id else (b, a)


class ScatterActionsFinder:
    """
    Finds the interactions of a timestep.

    Usage:
        config = CollisionTermConfig.from_yaml('config.yaml')
        finder = ScatterActionsFinder(config, CrossSections(catalog, config))
        actions = finder.find_actions_in_cell(cell_particles, dt=0.1,
                                              cell_volume=8.0, rng=rng)
    """

    def __init__(self, config, cross_sections: CrossSections,
                 collider: Optional[ColliderSetup] = None):
        """
        Parameters:
            config: CollisionTermConfig
            cross_sections: Channel enumeration
            collider: Nucleus membership (collider runs only)
        """
        self.config = config
        self.cross_sections = cross_sections
        self.criterion: CollisionCriterion = config.collision_criterion
        self.pairwise = PairwiseEvaluator(config, cross_sections, collider)
        self.multi_particle = MultiParticleEvaluator(config, cross_sections)

        if config.is_constant_elastic_isotropic:
            logger.info("Constant elastic isotropic cross-section mode: "
                        "using %g mb as maximal cross-section.",
                        config.elastic_cross_section)

    @property
    def stochastic(self) -> bool:
        return self.criterion is CollisionCriterion.STOCHASTIC

    def _check_pair(self, a: Particle, b: Particle, dt: float, beam_momentum,
                    cell_volume: float, rng) -> Optional[PairwiseInteraction]:
        first, second = _ordered(a, b)
        return self.pairwise.evaluate(first, second, dt, beam_momentum,
                                      cell_volume, rng)

    def find_actions_in_cell(self, search_list: Sequence[Particle], dt: float,
                             cell_volume: float, beam_momentum=(),
                             rng: Optional[np.random.Generator] = None) -> List[Interaction]:
        """
        All pairs (and triples under the stochastic criterion) of one cell.

        Parameters:
            search_list: Particles in the cell
            dt: Timestep [fm]
            cell_volume: Cell volume [fm³]
            beam_momentum: Beam four-momenta indexed by particle id
            rng: Random generator (stochastic criterion only)

        Returns:
            Accepted interactions, unordered and unresolved
        """
        actions: List[Interaction] = []
        for p1 in search_list:
            for p2 in search_list:
                if p1.id < p2.id:
                    act = self._check_pair(p1, p2, dt, beam_momentum,
                                           cell_volume, rng)
                    if act is not None:
                        actions.append(act)

        if self.stochastic:
            for p1 in search_list:
                for p2 in search_list:
                    if p1.id >= p2.id:
                        continue
                    for p3 in search_list:
                        if p2.id < p3.id:
                            act = self.multi_particle.evaluate(
                                (p1, p2, p3), dt, cell_volume, rng)
                            if act is not None:
                                actions.append(act)
        return actions

    def find_actions_with_neighbors(self, search_list: Sequence[Particle],
                                    neighbors_list: Sequence[Particle], dt: float,
                                    beam_momentum=(),
                                    rng: Optional[np.random.Generator] = None) -> List[Interaction]:
        """Pairs across two adjacent cells; none under the stochastic criterion."""
        actions: List[Interaction] = []
        if self.stochastic:
            return actions
        for p1 in search_list:
            for p2 in neighbors_list:
                act = self._check_pair(p1, p2, dt, beam_momentum, 0.0, rng)
                if act is not None:
                    actions.append(act)
        return actions

    def find_actions_with_surrounding_particles(self, search_list: Sequence[Particle],
                                                surrounding_list: Sequence[Particle],
                                                dt: float, beam_momentum=(),
                                                rng: Optional[np.random.Generator] = None
                                                ) -> List[Interaction]:
        """
        Pairs between the search list and particles outside it.

        Surrounding particles that are also in the search list are skipped,
        those pairs were found by the in-cell search already. Nothing is
        returned under the stochastic criterion.
        """
        actions: List[Interaction] = []
        if self.stochastic:
            return actions
        searched = {p.id for p in search_list}
        for p2 in surrounding_list:
            if p2.id in searched:
                continue
            for p1 in search_list:
                act = self._check_pair(p1, p2, dt, beam_momentum, 0.0, rng)
                if act is not None:
                    actions.append(act)
        return actions

    def find_actions_in_cells(self, cells: Sequence[Tuple[Sequence[Particle], float]],
                              dt: float, beam_momentum=(), seed=None,
                              n_processes: int = 1, verbose: bool = False) -> List[Interaction]:
        """
        In-cell search over many cells, optionally in parallel.

        Every cell gets its own generator spawned from one SeedSequence, so
        the candidates of a cell only depend on the seed and the cell index,
        not on the number of processes.

        Parameters:
            cells: (particles, cell_volume) per cell
            dt: Timestep [fm]
            beam_momentum: Beam four-momenta indexed by particle id
            seed: Entropy for numpy.random.SeedSequence
            n_processes: Worker processes (1 runs in this process)
            verbose: Show a progress bar

        Returns:
            Interactions of all cells, in cell order
        """
        children = np.random.SeedSequence(seed).spawn(len(cells))
        work_items = [(list(particles), volume, dt, beam_momentum, child)
                      for (particles, volume), child in zip(cells, children)]

        if n_processes <= 1:
            results = [self._search_cell(item)
                       for item in tqdm(work_items, desc="Searching cells",
                                        unit="cell", disable=not verbose)]
        else:
            with mp.Pool(n_processes, initializer=_init_worker,
                         initargs=(self.config, self.cross_sections.catalog)) as pool:
                results = list(tqdm(pool.imap(_search_cell_worker, work_items),
                                    total=len(work_items), desc="Searching cells",
                                    unit="cell", disable=not verbose))
            # Workers return copies; point the actions back at our particles
            for (particles, *_), actions in zip(work_items, results):
                by_id = {p.id: p for p in particles}
                for act in actions:
                    act.incoming = tuple(by_id[p.id] for p in act.incoming)

        actions = [act for cell_actions in results for act in cell_actions]
        logger.debug("Found %d actions in %d cells", len(actions), len(cells))
        return actions

    def _search_cell(self, work_item) -> List[Interaction]:
        particles, volume, dt, beam_momentum, seed_sequence = work_item
        rng = np.random.default_rng(seed_sequence)
        return self.find_actions_in_cell(particles, dt, volume, beam_momentum, rng)


# Finder instance for each worker process
_worker_finder = None


def _init_worker(config, catalog):
    """Initialize worker process with its own finder."""
    global _worker_finder
    _worker_finder = ScatterActionsFinder(config, CrossSections(catalog, config))


def _search_cell_worker(work_item):
    global _worker_finder
    return _worker_finder._search_cell(work_item)


if __name__ == "__main__":
    from scatter_mc.config import CollisionTermConfig
    from scatter_mc.core.catalog import ParticleCatalog
    from scatter_mc.transport.actions import describe

    print("\n" + "="*70)
    print("Scatter Actions Finder Test")
    print("="*70)

    catalog = ParticleCatalog.default()
    rng = np.random.default_rng(42)

    # Thermal-ish pion/nucleon box, 4 fm cells
    particles = []
    for i in range(40):
        ptype = catalog['p'] if i % 4 == 0 else catalog[('pi+', 'pi0', 'pi-')[i % 3]]
        p3 = rng.normal(0.0, 0.4, 3)
        position = np.concatenate(([0.0], rng.uniform(0.0, 4.0, 3)))
        particles.append(Particle(i, ptype, position,
                                  (np.sqrt(ptype.mass**2 + p3 @ p3), *p3)))

    for criterion in ('Geometric', 'Covariant', 'Stochastic'):
        config = CollisionTermConfig(collision_criterion=criterion)
        finder = ScatterActionsFinder(config, CrossSections(catalog, config))
        actions = finder.find_actions_in_cells([(particles, 64.0)], dt=0.5, seed=1)
        print(f"\n{criterion}: {len(actions)} actions")
        for act in actions[:5]:
            print(f"  {describe(act)}")

    print("\n" + "="*70)
    print("Test complete!")
    print("="*70 + "\n")
