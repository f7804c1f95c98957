"""Interaction candidates."""

import pytest

from scatter_mc.physics.cross_sections import CollisionBranch, ProcessType
from scatter_mc.transport.actions import (MultiParticleInteraction, PairwiseInteraction,
                                          describe, incoming_particles)


def test_negative_time_rejected(head_on_pair):
    with pytest.raises(ValueError):
        PairwiseInteraction(head_on_pair(), -0.1)


def test_channels_accumulate(catalog, head_on_pair):
    act = PairwiseInteraction(head_on_pair(), 0.5)
    assert act.process_type is ProcessType.NONE
    p, n, delta = catalog['p'], catalog['n'], catalog['Delta++']
    act.add_collision_channels([CollisionBranch((p, p), 10.0, ProcessType.ELASTIC),
                                CollisionBranch((n, delta), 15.0, ProcessType.TWO_TO_TWO)])
    assert act.cross_section == pytest.approx(25.0)
    assert act.process_type is ProcessType.TWO_TO_TWO
    assert act.time_of_execution == pytest.approx(0.5)


def test_pair_kinematics(head_on_pair):
    act = PairwiseInteraction(head_on_pair(b=0.5), 0.0)
    assert act.sqrt_s() == pytest.approx(2.0 * (0.938**2 + 1.0) ** 0.5)
    assert act.transverse_distance_sqr() == pytest.approx(0.25, abs=1e-9)


def test_incoming_and_describe(catalog, make_particle, head_on_pair):
    pair = PairwiseInteraction(head_on_pair(), 0.25)
    triple = MultiParticleInteraction(
        tuple(make_particle(i, catalog['pi0']) for i in range(3)), 0.1, probability=0.02)

    assert [p.id for p in incoming_particles(pair)] == [0, 1]
    assert len(incoming_particles(triple)) == 3
    assert describe(pair).startswith("p(0) + p(1) at t+0.2500 fm")
    assert describe(triple).startswith("pi0(0) + pi0(1) + pi0(2)")
    with pytest.raises(TypeError):
        describe("not an action")
