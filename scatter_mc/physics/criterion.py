"""
Collision criteria.

Three mutually exclusive acceptance rules for a candidate pair:

    Geometric   accept if d_T² < σ/π, d_T measured in the pair CM frame
    Covariant   same test, d_T from the Lorentz-invariant closest approach
    Stochastic  accept with probability P = σ v_rel Δt / ΔV

The criterion is fixed for the whole run. Nothing here holds state; the
random stream is always passed in.

References:
    - Lang et al., J. Comp. Phys. 106, 391 (1993) (stochastic rates)
    - Xu and Greiner, Phys. Rev. C 71, 064901 (2005), eq. (11)
    - Hirano and Nara, PTEP 2012, 01A203 (covariant criterion)
"""

import enum

import numpy as np

from scatter_mc.errors import ConfigurationError, ProbabilityOverflowError
from scatter_mc.physics.kinematics import FM2_MB

# Largest cross section any process can have [mb]
MAXIMUM_CROSS_SECTION = 200.0


class CollisionCriterion(enum.Enum):
    GEOMETRIC = 'Geometric'
    STOCHASTIC = 'Stochastic'
    COVARIANT = 'Covariant'

    @classmethod
    def from_string(cls, name: str) -> "CollisionCriterion":
        """Parse the configuration value (case-insensitive)."""
        for criterion in cls:
            if str(name).lower() == criterion.value.lower():
                return criterion
        raise ConfigurationError(
            f"Unknown collision criterion '{name}'. "
            f"Available: {[c.value for c in cls]}")

    @property
    def uses_distance(self) -> bool:
        """Geometric and Covariant test a transverse distance."""
        return self is not CollisionCriterion.STOCHASTIC


def max_transverse_distance_sqr(testparticles: int,
                                constant_elastic: float = None) -> float:
    """
    Squared transverse distance beyond which no process can occur [fm²].

    Parameters:
        testparticles: Oversampling factor
        constant_elastic: Constant elastic cross section [mb] used as the
            maximum in constant-elastic-isotropic mode

    Returns:
        σ_max / N_test / π in fm²
    """
    sigma_max = MAXIMUM_CROSS_SECTION if constant_elastic is None else constant_elastic
    return sigma_max / testparticles * FM2_MB / np.pi


def geometric_accepts(distance_sqr: float, cross_section_fm2: float) -> bool:
    """Geometric test d_T² < σ/π (σ already scaled by testparticles)."""
    return distance_sqr < cross_section_fm2 / np.pi


def is_repeated_process(a, b) -> bool:
    """True if both particles just left the same elementary process."""
    return a.id_process > 0 and a.id_process == b.id_process


def stochastic_probability(cross_section_fm2: float, v_rel: float, dt: float,
                           cell_volume: float) -> float:
    """
    Collision probability of a pair within one timestep.

    Parameters:
        cross_section_fm2: Cross section [fm²], testparticle-scaled
        v_rel: Relative velocity [c]
        dt: Timestep [fm]
        cell_volume: Volume of the search cell [fm³] (> 0)

    Returns:
        P = σ v_rel Δt / ΔV

    Raises:
        ProbabilityOverflowError: P > 1 (timestep too large)
    """
    probability = cross_section_fm2 * v_rel * dt / cell_volume
    check_probability(probability, 'P')
    return probability


def check_probability(probability: float, quantity: str = 'P') -> None:
    """Raise if a probability exceeds one; exactly one is allowed."""
    if probability > 1.0:
        raise ProbabilityOverflowError(probability, quantity)


def stochastic_accepts(probability: float, rng: np.random.Generator) -> bool:
    """Draw u in [0, 1) and accept if u <= P."""
    return rng.random() <= probability
