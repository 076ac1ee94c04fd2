"""Errors raised by the integration engine."""


class IntegrationError(Exception):
    """Base class for every fatal condition raised during a run."""


class DimensionMismatchError(IntegrationError, ValueError):
    """State or derivative length disagrees with the equation dimension."""

    def __init__(self, expected: int, got: int, what: str = "state"):
        super().__init__(
            f"Dimension mismatch for {what}: expected {expected}, got {got}"
        )
        self.expected = expected
        self.got = got


class DegenerateStepError(IntegrationError, ValueError):
    """Step size is zero, non-finite or points against the run direction."""


class BracketingError(IntegrationError, RuntimeError):
    """
    A sign change was detected but the root could not be isolated.

    Attributes:
        lower: Best root estimate when the search gave up.
        upper: Opposite bound of the last bracket.
        iterations: Number of iterations spent.
    """

    def __init__(self, lower: float, upper: float, iterations: int):
        super().__init__(
            f"Root not isolated within {iterations} iterations; "
            f"last bracket [{lower!r}, {upper!r}]"
        )
        self.lower = lower
        self.upper = upper
        self.iterations = iterations


class StepExhaustionError(IntegrationError, RuntimeError):
    """The accepted-step budget ran out before the target time."""

    def __init__(self, max_steps: int, t: float, t_final: float):
        super().__init__(
            f"Maximal number of steps ({max_steps}) exceeded at t={t!r} "
            f"before reaching t={t_final!r}"
        )
        self.max_steps = max_steps
        self.t = t
        self.t_final = t_final


class InterpolationRangeError(IntegrationError, ValueError):
    """Dense output queried outside the bounds of its step."""
