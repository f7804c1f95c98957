"""
Decay trees and exclusive final-state cross sections.

Toy catalog: R (1.2 GeV) -> AB 70% | CD 30%, H (1.0 GeV) -> XXXX which is
never open at the energies used here.
"""

import pytest

from scatter_mc.physics.cross_sections import CollisionBranch, ProcessType
from scatter_mc.physics.decaytree import DecayTree, FinalStateCrossSection, deduplicate


def _branch(types, weight, process=ProcessType.TWO_TO_TWO):
    return CollisionBranch(types, weight, process)


def _by_name(records):
    return {r.name: r.cross_section for r in records}


def test_single_resonance_branches(toy_catalog):
    a, b, r, x = (toy_catalog[n] for n in ('A', 'B', 'R', 'X'))
    sigma = 12.0
    tree = DecayTree.from_channels(a, b, sigma, [_branch((r, x), sigma)], 2.0)

    final = tree.final_state_cross_sections()
    assert len(final) == 2
    assert _by_name(final) == pytest.approx({'ABX': 0.7 * sigma, 'CDX': 0.3 * sigma})


def test_state_is_sorted(toy_catalog):
    a, b, x = (toy_catalog[n] for n in ('A', 'B', 'X'))
    tree = DecayTree('AB', 1.0, (a, b), (a, b), (a, b))
    child = tree.add_action(DecayTree.ROOT, 'XA', 1.0, (a, b), (x, a))
    assert [p.name for p in tree[child].state] == ['A', 'X']
    assert tree.root.children == [child]


def test_partition_sums_to_total(toy_catalog):
    a, b, r, x = (toy_catalog[n] for n in ('A', 'B', 'R', 'X'))
    channels = [_branch((r, x), 3.0), _branch((a, b), 2.0, ProcessType.ELASTIC),
                _branch((r, r), 4.0)]
    total = sum(c.weight for c in channels)
    tree = DecayTree.from_channels(a, b, total, channels, 3.0)

    final = deduplicate(tree.final_state_cross_sections())
    assert sum(fs.cross_section for fs in final) == pytest.approx(total)


def test_two_unstable_normalisation(toy_catalog):
    a, b, r = (toy_catalog[n] for n in ('A', 'B', 'R'))
    sigma = 10.0
    tree = DecayTree.from_channels(a, b, sigma, [_branch((r, r), sigma)], 3.0)

    final = _by_name(deduplicate(tree.final_state_cross_sections()))
    assert final == pytest.approx({'AABB': 0.49 * sigma,
                                   'ABCD': 0.42 * sigma,
                                   'CCDD': 0.09 * sigma})


def test_closed_resonance_is_zeroed(toy_catalog):
    a, b, h, r, x = (toy_catalog[n] for n in ('A', 'B', 'H', 'R', 'X'))
    channels = [_branch((h, x), 5.0), _branch((r, x), 1.0)]
    tree = DecayTree.from_channels(a, b, 6.0, channels, 2.0)

    closed = tree[tree.root.children[0]]
    assert closed.weight == 0.0
    assert closed.children == []

    final = deduplicate(tree.final_state_cross_sections())
    assert _by_name(final) == pytest.approx({'ABX': 0.7, 'CDX': 0.3})


def test_intermediate_state_names(toy_catalog):
    a, b, r, x = (toy_catalog[n] for n in ('A', 'B', 'R', 'X'))
    tree = DecayTree.from_channels(a, b, 1.0, [_branch((r, x), 1.0)], 2.0)
    names = {fs.name for fs in tree.final_state_cross_sections(show_intermediate_states=True)}
    assert names == {'AB{AB}->RX{RX}->[R->AB]{ABX}',
                     'AB{AB}->RX{RX}->[R->CD]{CDX}'}


def test_string_channel_leaves_empty_state(toy_catalog):
    a, b = toy_catalog['A'], toy_catalog['B']
    tree = DecayTree.from_channels(a, b, 3.0, [_branch((), 3.0, ProcessType.STRING_SOFT)], 5.0)
    final = tree.final_state_cross_sections()
    assert [(fs.name, fs.cross_section) for fs in final] == [('', 3.0)]
    assert tree[tree.root.children[0]].name == 'string'


def test_format(toy_catalog):
    a, b, r, x = (toy_catalog[n] for n in ('A', 'B', 'R', 'X'))
    tree = DecayTree.from_channels(a, b, 2.0, [_branch((r, x), 2.0)], 2.0)
    lines = tree.format().splitlines()
    assert lines[0] == 'AB 2'
    assert lines[1] == ' RX 2'
    assert lines[2] == '  [R->AB] 0.7'


def test_deduplicate():
    records = [FinalStateCrossSection('pp', 1.0, 1.876),
               FinalStateCrossSection('np', 2.0, 1.876),
               FinalStateCrossSection('pp', 0.5, 1.876),
               FinalStateCrossSection('nn', 0.0, 1.876)]
    merged = deduplicate(records)
    assert [(r.name, r.cross_section) for r in merged] == [('np', 2.0), ('pp', 1.5)]
    assert records[0].cross_section == 1.0
