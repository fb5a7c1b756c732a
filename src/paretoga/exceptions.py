"""
Exceptions raised by the genetic algorithm engine.
"""


class ConfigurationError(ValueError):
    """Raised synchronously when an option, selector or box is configured with an invalid value."""


class InvariantViolation(AssertionError):
    """
    Raised when an internal invariant of the engine no longer holds.

    Examples are an empty Pareto front on a non-empty population or a rank-0 gene
    that is dominated by some other gene. These indicate a defect either in the
    caller-supplied functions or in the engine itself and are never repaired.
    """
