"""
Kinematics kernels.

Tests:
    1. Head-on closest-approach time matches d / v
    2. Covariant time and transverse distance agree with the CM-frame ones
    3. Relative velocity and CM momentum of a symmetric pair
    4. Three-body phase space vanishes below threshold
"""

import numpy as np
import pytest

from scatter_mc.physics import kinematics


M = 0.938
K = 1.0
E = np.sqrt(M**2 + K**2)


def _pair(b=0.0):
    x1 = np.array([0.0, -1.0, 0.0, 0.0])
    x2 = np.array([0.0, 1.0, b, 0.0])
    p1 = np.array([E, K, 0.0, 0.0])
    p2 = np.array([E, -K, 0.0, 0.0])
    return x1, p1, x2, p2


def test_geometric_time_head_on():
    """Each particle travels 1 fm at v = k/E."""
    t = kinematics.collision_time_geometric(*_pair())
    assert t == pytest.approx(E / K, rel=1e-12)


def test_geometric_time_symmetric():
    x1, p1, x2, p2 = _pair(b=0.3)
    p2 = np.array([np.sqrt(M**2 + 0.7**2 + 0.2**2), -0.7, 0.2, 0.0])
    t12 = kinematics.collision_time_geometric(x1, p1, x2, p2)
    t21 = kinematics.collision_time_geometric(x2, p2, x1, p1)
    assert t12 == pytest.approx(t21, rel=1e-12)


def test_parallel_motion_has_no_collision_time():
    x1, p1, x2, _ = _pair()
    assert kinematics.collision_time_geometric(x1, p1, x2, p1.copy()) < 0.0


def test_covariant_time_matches_geometric_in_cm_frame():
    t_cov = kinematics.collision_time_covariant(*_pair(b=0.5))
    t_geo = kinematics.collision_time_geometric(*_pair(b=0.5))
    assert t_cov == pytest.approx(t_geo, rel=1e-9)


@pytest.mark.parametrize("b", [0.0, 0.5, 1.3])
def test_transverse_distances(b):
    """Offset perpendicular to the motion is the impact parameter."""
    assert kinematics.transverse_distance_sqr(*_pair(b)) == pytest.approx(b * b, abs=1e-9)
    assert kinematics.cov_transverse_distance_sqr(*_pair(b)) == pytest.approx(b * b, abs=1e-9)


def test_relative_velocity_symmetric_pair():
    _, p1, _, p2 = _pair()
    assert kinematics.relative_velocity(p1, p2) == pytest.approx(2.0 * K / E, rel=1e-12)


def test_pcm_of_symmetric_pair():
    _, p1, _, p2 = _pair()
    s = kinematics.mandelstam_s(p1, p2)
    assert s == pytest.approx(4.0 * E**2)
    assert kinematics.pcm_from_s(s, M, M) == pytest.approx(K, rel=1e-12)


def test_s_from_plab_target_at_rest():
    plab = 2.0
    s = kinematics.s_from_plab(plab, M, M)
    assert s == pytest.approx(2.0 * M**2 + 2.0 * M * np.sqrt(M**2 + plab**2))


def test_lorentz_boost_to_rest_frame():
    p = np.array([E, K, 0.0, 0.0])
    rest = kinematics.lorentz_boost(p, p[1:] / p[0])
    assert rest[0] == pytest.approx(M, rel=1e-12)
    assert np.allclose(rest[1:], 0.0, atol=1e-12)


def test_three_body_phase_space():
    m = 0.138
    assert kinematics.three_body_phase_space(3 * m - 0.01, m, m, m) == 0.0
    low = kinematics.three_body_phase_space(0.6, m, m, m)
    high = kinematics.three_body_phase_space(0.9, m, m, m)
    assert 0.0 < low < high


def test_breit_wigner_peaks_at_pole():
    at_pole = kinematics.breit_wigner(0.783, 0.783, 0.00849)
    assert at_pole > kinematics.breit_wigner(0.79, 0.783, 0.00849)
    assert at_pole > kinematics.breit_wigner(0.77, 0.783, 0.00849)
