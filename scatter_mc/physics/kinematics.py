"""
Relativistic two-body kinematics for the interaction finder.

Four-vectors are float64 arrays (x0, x1, x2, x3) with metric (+, -, -, -).
The pair kernels are numba-compiled; they run once per candidate pair and
dominate the cost of the O(n²) cell search.

References:
    - Bass et al., Prog. Part. Nucl. Phys. 41, 255 (1998) (UrQMD
      geometric criterion)
    - Hirano and Nara, PTEP 2012, 01A203 (covariant criterion)
    - PDG Review of Particle Physics (Kinematics)
"""

import numpy as np
import numba
from scipy import integrate

# Generic numerical zero for kinematic quantities
REALLY_SMALL = 1.0e-6

# hbar * c [GeV fm]
HBARC = 0.197327053

# Conversion factor fm² -> mb is 10, mb -> fm² is 0.1
FM2_MB = 0.1


@numba.njit(fastmath=True, cache=True)
def minkowski_dot(a: np.ndarray, b: np.ndarray) -> float:
    """Minkowski product a·b with metric (+, -, -, -)."""
    return a[0] * b[0] - a[1] * b[1] - a[2] * b[2] - a[3] * b[3]


@numba.njit(fastmath=True, cache=True)
def minkowski_sqr(a: np.ndarray) -> float:
    """Invariant square a·a."""
    return a[0] * a[0] - a[1] * a[1] - a[2] * a[2] - a[3] * a[3]


@numba.njit(fastmath=True, cache=True)
def lorentz_boost(v: np.ndarray, beta: np.ndarray) -> np.ndarray:
    """
    Boost four-vector v into the frame moving with three-velocity beta.

        x0' = γ (x0 - x·β)
        x'  = x - β γ/(γ+1) (x0' + x0)

    Parameters:
        v: Four-vector (x0, x1, x2, x3)
        beta: Velocity of the new frame (|beta| < 1)

    Returns:
        Boosted four-vector
    """
    beta_sqr = beta[0] * beta[0] + beta[1] * beta[1] + beta[2] * beta[2]
    result = np.empty(4, dtype=np.float64)
    if beta_sqr < 1e-20:
        result[:] = v
        return result

    gamma = 1.0 / np.sqrt(1.0 - beta_sqr)
    x_dot_beta = v[1] * beta[0] + v[2] * beta[1] + v[3] * beta[2]
    x0_prime = gamma * (v[0] - x_dot_beta)
    constant = gamma / (gamma + 1.0) * (x0_prime + v[0])

    result[0] = x0_prime
    result[1] = v[1] - beta[0] * constant
    result[2] = v[2] - beta[1] * constant
    result[3] = v[3] - beta[2] * constant
    return result


@numba.njit(fastmath=True, cache=True)
def collision_time_geometric(x1: np.ndarray, p1: np.ndarray,
                             x2: np.ndarray, p2: np.ndarray) -> float:
    """
    Lab-frame time until closest approach of two straight trajectories.

        t = -(Δx · Δv) / |Δv|²

    Computed with Δv scaled by E1·E2 to avoid two divisions.

    Returns:
        Time until closest approach [fm]; -1 for (anti)parallel-at-rest
        motion where no closest approach exists
    """
    e1 = p1[0]
    e2 = p2[0]
    dvx = p1[1] * e2 - p2[1] * e1
    dvy = p1[2] * e2 - p2[2] * e1
    dvz = p1[3] * e2 - p2[3] * e1
    dv_sqr = dvx * dvx + dvy * dvy + dvz * dvz
    if dv_sqr < REALLY_SMALL:
        return -1.0

    drx = x1[1] - x2[1]
    dry = x1[2] - x2[2]
    drz = x1[3] - x2[3]
    return -(drx * dvx + dry * dvy + drz * dvz) * (e1 * e2 / dv_sqr)


@numba.njit(fastmath=True, cache=True)
def collision_time_covariant(x1: np.ndarray, p1: np.ndarray,
                             x2: np.ndarray, p2: np.ndarray) -> float:
    """
    Collision time from the Lorentz-invariant closest approach.

    The proper times of both particles at closest approach in the pair
    rest frame are converted to lab time with their energies and averaged.

    Returns:
        Time until collision [fm]; -1 if the pair has no relative motion
    """
    dx = np.empty(4, dtype=np.float64)
    for i in range(4):
        dx[i] = x1[i] - x2[i]

    p1_sqr = minkowski_sqr(p1)
    p2_sqr = minkowski_sqr(p2)
    p1_dot_p2 = minkowski_dot(p1, p2)
    p1_dot_x = minkowski_dot(p1, dx)
    p2_dot_x = minkowski_dot(p2, dx)

    denominator = p1_dot_p2 * p1_dot_p2 - p1_sqr * p2_sqr
    if abs(denominator) < REALLY_SMALL * REALLY_SMALL:
        return -1.0

    time_1 = (p2_sqr * p1_dot_x - p1_dot_p2 * p2_dot_x) * p1[0] / denominator
    time_2 = -(p1_sqr * p2_dot_x - p1_dot_p2 * p1_dot_x) * p2[0] / denominator
    return 0.5 * (time_1 + time_2)


@numba.njit(fastmath=True, cache=True)
def transverse_distance_sqr(x1: np.ndarray, p1: np.ndarray,
                            x2: np.ndarray, p2: np.ndarray) -> float:
    """
    Squared transverse distance in the pair centre-of-momentum frame.

    UrQMD criterion:
        d² = Δr² - (Δr · Δp)² / Δp²

    Returns:
        Squared transverse distance [fm²]
    """
    total = np.empty(4, dtype=np.float64)
    for i in range(4):
        total[i] = p1[i] + p2[i]
    beta = total[1:] / total[0]

    x1_cm = lorentz_boost(x1, beta)
    x2_cm = lorentz_boost(x2, beta)
    p1_cm = lorentz_boost(p1, beta)
    p2_cm = lorentz_boost(p2, beta)

    dr_sqr = 0.0
    dp_sqr = 0.0
    dr_dp = 0.0
    for i in range(1, 4):
        dr = x1_cm[i] - x2_cm[i]
        dp = p1_cm[i] - p2_cm[i]
        dr_sqr += dr * dr
        dp_sqr += dp * dp
        dr_dp += dr * dp

    if dp_sqr < REALLY_SMALL:
        return dr_sqr
    return dr_sqr - dr_dp * dr_dp / dp_sqr


@numba.njit(fastmath=True, cache=True)
def cov_transverse_distance_sqr(x1: np.ndarray, p1: np.ndarray,
                                x2: np.ndarray, p2: np.ndarray) -> float:
    """
    Lorentz-invariant squared transverse distance (Hirano and Nara).

        b² = -Δx² - (p1² (p2·Δx)² + p2² (p1·Δx)² - 2 (p1·p2)(p1·Δx)(p2·Δx))
                    / ((p1·p2)² - p1² p2²)

    Returns:
        Squared transverse distance [fm²]
    """
    dx = np.empty(4, dtype=np.float64)
    dp_sqr = 0.0
    for i in range(4):
        dx[i] = x1[i] - x2[i]
    for i in range(1, 4):
        dp = p1[i] - p2[i]
        dp_sqr += dp * dp

    x_sqr = minkowski_sqr(dx)
    if dp_sqr < REALLY_SMALL:
        return -x_sqr

    p1_sqr = minkowski_sqr(p1)
    p2_sqr = minkowski_sqr(p2)
    p1_dot_x = minkowski_dot(p1, dx)
    p2_dot_x = minkowski_dot(p2, dx)
    p1_dot_p2 = minkowski_dot(p1, p2)

    denominator = p1_dot_p2 * p1_dot_p2 - p1_sqr * p2_sqr
    if abs(denominator) < REALLY_SMALL * REALLY_SMALL:
        return -x_sqr

    return -x_sqr - (p1_sqr * p2_dot_x * p2_dot_x
                     + p2_sqr * p1_dot_x * p1_dot_x
                     - 2.0 * p1_dot_p2 * p1_dot_x * p2_dot_x) / denominator


@numba.njit(fastmath=True, cache=True)
def mandelstam_s(p1: np.ndarray, p2: np.ndarray) -> float:
    """s = (p1 + p2)² [GeV²]."""
    e = p1[0] + p2[0]
    px = p1[1] + p2[1]
    py = p1[2] + p2[2]
    pz = p1[3] + p2[3]
    return e * e - px * px - py * py - pz * pz


@numba.njit(fastmath=True, cache=True)
def relative_velocity(p1: np.ndarray, p2: np.ndarray) -> float:
    """
    Relative velocity of the pair (Møller velocity).

        v_rel = sqrt((s - (m1+m2)²)(s - (m1-m2)²)) / (2 E1 E2)
    """
    m1_sqr = max(minkowski_sqr(p1), 0.0)
    m2_sqr = max(minkowski_sqr(p2), 0.0)
    m1 = np.sqrt(m1_sqr)
    m2 = np.sqrt(m2_sqr)
    s = mandelstam_s(p1, p2)
    lam = (s - (m1 + m2) ** 2) * (s - (m1 - m2) ** 2)
    if lam <= 0.0:
        return 0.0
    return np.sqrt(lam) / (2.0 * p1[0] * p2[0])


@numba.njit(fastmath=True, cache=True)
def pcm_from_s(s: float, mass_a: float, mass_b: float) -> float:
    """Centre-of-mass momentum [GeV] for given s and masses."""
    psqr = (s - (mass_a + mass_b) ** 2) * (s - (mass_a - mass_b) ** 2) / (4.0 * s)
    if psqr <= 0.0:
        return 0.0
    return np.sqrt(psqr)


@numba.njit(fastmath=True, cache=True)
def s_from_plab(plab: float, mass_a: float, mass_b: float) -> float:
    """Mandelstam s [GeV²] for a beam of momentum plab on a fixed target."""
    e_lab = np.sqrt(mass_a * mass_a + plab * plab)
    return mass_a * mass_a + mass_b * mass_b + 2.0 * e_lab * mass_b


def three_body_phase_space(sqrts: float, m1: float, m2: float, m3: float) -> float:
    """
    Lorentz-invariant three-body phase space Φ₃ [GeV²].

        Φ₃ = 1/(128 π³ s) ∫ dm12² (m23²_max - m23²_min)

    The Dalitz area is integrated numerically over m12².

    Returns:
        Phase-space volume; 0 below threshold
    """
    if sqrts <= m1 + m2 + m3:
        return 0.0
    s = sqrts * sqrts

    def m23_range(m12_sqr):
        m12 = np.sqrt(m12_sqr)
        e2 = (m12_sqr - m1 * m1 + m2 * m2) / (2.0 * m12)
        e3 = (s - m12_sqr - m3 * m3) / (2.0 * m12)
        p2 = np.sqrt(max(e2 * e2 - m2 * m2, 0.0))
        p3 = np.sqrt(max(e3 * e3 - m3 * m3, 0.0))
        return 4.0 * p2 * p3

    lower = (m1 + m2) ** 2
    upper = (sqrts - m3) ** 2
    area, _ = integrate.quad(m23_range, lower, upper, limit=200)
    return area / (128.0 * np.pi**3 * s)


def breit_wigner(sqrts: float, pole_mass: float, width: float) -> float:
    """Relativistic Breit-Wigner spectral function [1/GeV], normalized in m."""
    m_sqr = sqrts * sqrts
    numerator = 2.0 / np.pi * m_sqr * width
    denominator = (m_sqr - pole_mass**2) ** 2 + m_sqr * width**2
    return numerator / denominator
