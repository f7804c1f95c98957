"""
Exception hierarchy for scatter_mc.

Fatal conditions (timestep too coarse, unsupported oversampling) are raised
and left for the timestep driver to handle. Nothing in the package retries
them.
"""


class ScatterFinderError(Exception):
    """Base class for all scatter_mc errors."""


class ConfigurationError(ScatterFinderError, ValueError):
    """Invalid or inconsistent collision-term configuration."""


class CatalogError(ScatterFinderError):
    """Particle catalog could not be built (unknown decay product, bad entry)."""


class ProbabilityOverflowError(ScatterFinderError):
    """
    A stochastic interaction probability exceeded one.

    Attributes:
        probability: The offending probability value
        quantity: Name of the quantity (e.g. 'P' or 'P_nm')
    """

    def __init__(self, probability: float, quantity: str = "P"):
        self.probability = probability
        self.quantity = quantity
        super().__init__(
            f"Probability larger than 1 for stochastic rates. "
            f"( {quantity} = {probability} )\nUse smaller timesteps."
        )

    def __reduce__(self):
        # Rebuild from the fields, not the formatted message (worker processes)
        return (type(self), (self.probability, self.quantity))


class TestparticleError(ScatterFinderError):
    """Multi-particle reactions requested with a testparticle multiplier != 1."""

    __test__ = False  # keep pytest from collecting this class

    def __init__(self, testparticles: int):
        self.testparticles = testparticles
        super().__init__(
            f"Multi-body reactions do not scale with testparticles yet "
            f"(testparticles = {testparticles}). Use 1."
        )

    def __reduce__(self):
        return (type(self), (self.testparticles,))
