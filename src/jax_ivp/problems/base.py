"""Base class for problems with known closed-form solutions."""

from abc import ABC, abstractmethod
from typing import List, Sequence

from jax import Array
import jax.numpy as jnp

from ..events import EventHandler
from ..interpolators import InterpolatorProtocol


class ReferenceProblem(ABC):
    """
    An initial value problem with a closed-form solution.

    Implements the `Equation` protocol, so instances can be handed to the
    integrator directly.

    Attributes:
        t0: Initial time.
        y0: Initial state.
        t_final: Nominal final time.
    """

    t0: float = 0.0
    t_final: float = 1.0

    def __init__(self, y0: Sequence[float]):
        self.y0 = jnp.asarray(y0, dtype=jnp.result_type(float))
        self.calls = 0

    @property
    def dimension(self) -> int:
        return self.y0.shape[0]

    def derivatives(self, t: float, y: Array) -> Array:
        self.calls += 1
        return self.rhs(t, y)

    @abstractmethod
    def rhs(self, t: float, y: Array) -> Array:
        """Right-hand side f(t, y)."""

    @abstractmethod
    def exact(self, t: float) -> Array:
        """Closed-form solution at time t."""

    def event_handlers(self) -> List[EventHandler]:
        """Event handlers the problem needs, if any."""
        return []

    def theoretical_event_times(self) -> List[float]:
        """Times at which the event handlers are expected to trigger."""
        return []


class ErrorTracker:
    """
    Step observer measuring the error of a run against the exact solution.

    Attributes:
        max_value_error: Largest state error seen at step midpoints, where
            the dense output is sampled away from event discontinuities.
        max_time_error: Largest distance between a theoretical event time and
            the nearest step boundary.
        last_error: State error at the end of the last step.
        last_time: Time at the end of the last step.
    """

    def __init__(self, problem: ReferenceProblem):
        self.problem = problem
        self.max_value_error = 0.0
        self.max_time_error = 0.0
        self.last_error = 0.0
        self.last_time = problem.t0
        self._boundaries: List[float] = []

    def on_init(self, t0: float, y0: Array, t_final: float) -> None:
        self.max_value_error = 0.0
        self.max_time_error = 0.0
        self.last_error = 0.0
        self.last_time = t0
        self._boundaries = [t0]

    def _error(self, t: float, y: Array) -> float:
        return float(jnp.max(jnp.abs(y - self.problem.exact(t))))

    def on_step_accepted(self, interpolator: InterpolatorProtocol, is_last: bool) -> None:
        t = interpolator.t_end
        t_mid = 0.5 * (interpolator.t_start + t)
        error = self._error(t_mid, interpolator.state_at(t_mid))
        self.max_value_error = max(self.max_value_error, error)
        self._boundaries.append(t)

        if is_last:
            self.last_error = self._error(t, interpolator.y_end)
            self.last_time = t
            for event_time in self.problem.theoretical_event_times():
                nearest = min(abs(event_time - b) for b in self._boundaries)
                self.max_time_error = max(self.max_time_error, nearest)
