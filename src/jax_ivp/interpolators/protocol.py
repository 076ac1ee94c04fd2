"""Protocol for step interpolators."""

from typing import Protocol, runtime_checkable

from jax import Array


@runtime_checkable
class InterpolatorProtocol(Protocol):
    """
    Protocol for dense output over one accepted step.

    Step observers receive objects implementing this interface. They must
    not keep them past the callback unless they copy what they need.
    """

    t_start: float
    t_end: float
    y_start: Array
    y_end: Array

    def state_at(self, t: float) -> Array:
        """Approximate state at time t inside [t_start, t_end]."""
        ...

    def truncate(self, new_end: float) -> "InterpolatorProtocol":
        """Same reconstruction restricted to [t_start, new_end]."""
        ...
