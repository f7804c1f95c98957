"""
Diagnostic dumps of the cross-section tables.

    dump_cross_sections   partial (or exclusive final-state) cross sections
                          of one pair over a range of energies
    dump_reactions        every reaction each pair of types can undergo

Both return the text so callers decide where it goes.
"""

from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from scatter_mc.core.catalog import ParticleType
from scatter_mc.physics.cross_sections import CrossSections, ProcessType
from scatter_mc.physics.decaytree import DecayTree, deduplicate
from scatter_mc.physics.kinematics import REALLY_SMALL, pcm_from_s, s_from_plab

N_MOMENTUM_POINTS = 200
MOMENTUM_STEP = 0.02  # GeV
COLUMN_WIDTH = 16

MOMENTUM_SCAN_LIST = (0.1, 0.3, 0.5, 1.0, 2.0, 3.0, 5.0, 10.0)  # GeV


def cm_momenta(m_a: float, m_b: float, plab: Optional[Sequence[float]] = None) -> np.ndarray:
    """
    CM momenta [GeV] at which to tabulate.

    Parameters:
        m_a, m_b: Masses [GeV]
        plab: Lab momenta of a on b at rest [GeV]; 200 CM momenta in
            0.02 GeV steps if empty

    Returns:
        Array of CM momenta, ascending
    """
    if plab is None or len(plab) == 0:
        return MOMENTUM_STEP * np.arange(1, N_MOMENTUM_POINTS + 1)
    return np.array([pcm_from_s(s_from_plab(p, m_a, m_b), m_a, m_b)
                     for p in sorted(set(plab))])


def _sqrt_s(m_a: float, m_b: float, momentum: float) -> float:
    return float(np.sqrt(m_a**2 + momentum**2) + np.sqrt(m_b**2 + momentum**2))


def dump_cross_sections(cross_sections: CrossSections, type_a: ParticleType,
                        type_b: ParticleType, m_a: float, m_b: float,
                        final_state: bool = False,
                        plab: Optional[Sequence[float]] = None,
                        verbose: bool = False) -> str:
    """
    Tabulate partial cross sections of a + b against sqrt(s).

    With final_state the collision channels are cascaded through all open
    decays and the exclusive stable final states are listed instead.

    Parameters:
        cross_sections: Channel enumeration
        type_a, type_b: Incoming types
        m_a, m_b: Masses to use for a and b [GeV]
        final_state: Tabulate exclusive final states
        plab: Optional list of lab momenta [GeV]
        verbose: Show a progress bar

    Returns:
        Table text; one column per channel, 'total' first, then by summed
        pole mass of the products
    """
    xs_dump: Dict[str, List[Tuple[float, float]]] = {}
    outgoing_mass: Dict[str, float] = {}

    def record(name: str, sqrts: float, xs: float):
        values = xs_dump.setdefault(name, [])
        if values and abs(values[-1][0] - sqrts) < REALLY_SMALL:
            values[-1] = (sqrts, values[-1][1] + xs)
        else:
            values.append((sqrts, xs))

    momenta = cm_momenta(m_a, m_b, plab)
    energies = [_sqrt_s(m_a, m_b, k) for k in momenta]

    for sqrts in tqdm(energies, desc=f"{type_a.name}{type_b.name}",
                      unit="point", disable=not verbose):
        channels = cross_sections.collision_channels(type_a, type_b, sqrts)
        total = sum(c.weight for c in channels)

        if final_state:
            tree = DecayTree.from_channels(type_a, type_b, total, channels, sqrts)
            for fs in deduplicate(tree.final_state_cross_sections()):
                # Unresolved strings leave an empty state
                if not fs.name:
                    continue
                outgoing_mass[fs.name] = fs.mass
                record(fs.name, sqrts, fs.cross_section)
        else:
            for channel in channels:
                if channel.weight <= 0.0:
                    continue
                outgoing_mass[channel.description] = channel.final_state_mass
                record(channel.description, sqrts, channel.weight)

        record('total', sqrts, total)
        outgoing_mass['total'] = -1.0

    # Resonances that cannot decay at the pole mass leave zero columns
    columns = [name for name in sorted(xs_dump)
               if sum(xs for _, xs in xs_dump[name]) != 0.0]
    columns.sort(key=lambda name: outgoing_mass[name])

    lines = [f"# Dumping partial {type_a.name}{type_b.name} "
             f"cross-sections in mb, energies in GeV",
             "   sqrt_s" + ''.join(name.rjust(COLUMN_WIDTH) for name in columns)]
    for sqrts in energies:
        row = "%9.6f" % sqrts
        for name in columns:
            xs = 0.0
            for energy, value in xs_dump[name]:
                if abs(energy - sqrts) < REALLY_SMALL:
                    xs = value
                    break
            row += "%16.6f" % xs
        lines.append(row)
    return '\n'.join(lines) + '\n'


def _reaction_string(type_a: ParticleType, type_b: ParticleType, channel) -> str:
    incoming = type_a.name + type_b.name
    if channel.process_type is ProcessType.STRING_SOFT:
        return incoming + " → strings"
    suffix = {ProcessType.ELASTIC: " (el)",
              ProcessType.TWO_TO_TWO: " (inel)"}.get(channel.process_type, " (?)")
    return incoming + " → " + channel.description + suffix


def dump_reactions(cross_sections: CrossSections,
                   momenta: Sequence[float] = MOMENTUM_SCAN_LIST) -> str:
    """
    List the reactions of every type pair with a non-zero cross section.

    Each pair is evaluated back to back at the given CM momenta [GeV]. One
    line per pair, reactions sorted and unique.
    """
    types = cross_sections.catalog.list_all()
    n_types = len(types)
    lines = [f"{n_types} particle types.",
             f"They can make {n_types * (n_types + 1) // 2} pairs."]

    for i, type_a in enumerate(types):
        for type_b in types[i:]:
            reactions = set()
            for momentum in momenta:
                sqrts = _sqrt_s(type_a.mass, type_b.mass, momentum)
                channels = cross_sections.collision_channels(type_a, type_b, sqrts)
                if sum(c.weight for c in channels) <= 0.0:
                    continue
                reactions.update(_reaction_string(type_a, type_b, c) for c in channels)
            if reactions:
                lines.append(', '.join(sorted(reactions)))
    return '\n'.join(lines) + '\n'


if __name__ == "__main__":
    from scatter_mc.config import CollisionTermConfig
    from scatter_mc.core.catalog import ParticleCatalog

    catalog = ParticleCatalog.default()
    config = CollisionTermConfig()
    xs = CrossSections(catalog, config)
    p, pi = catalog['p'], catalog['pi+']

    print(dump_cross_sections(xs, pi, p, pi.mass, p.mass,
                              plab=[0.2, 0.3, 0.5, 1.0, 2.0]))
    print(dump_cross_sections(xs, pi, p, pi.mass, p.mass, final_state=True,
                              plab=[0.2, 0.3, 0.5, 1.0, 2.0]))
