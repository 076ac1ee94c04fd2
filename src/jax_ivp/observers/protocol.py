"""Protocol for step observers."""

from typing import Protocol, runtime_checkable

from jax import Array

from ..interpolators import InterpolatorProtocol


@runtime_checkable
class StepObserver(Protocol):
    """
    Receives every accepted step of a run.

    The interpolator passed to `on_step_accepted` is only guaranteed to be
    meaningful during the callback; copy what is needed.
    """

    def on_init(self, t0: float, y0: Array, t_final: float) -> None:
        """Called once before the first step."""
        ...

    def on_step_accepted(self, interpolator: InterpolatorProtocol, is_last: bool) -> None:
        """Called after each accepted (possibly truncated) step."""
        ...
