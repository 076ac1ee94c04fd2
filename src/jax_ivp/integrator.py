"""
Fixed-step integration driver with dense output and event handling.

The driver repeatedly advances the state with a stepper, wraps each step in
a dense-output interpolator, lets the event detector truncate the step at
the first switching-function root, applies the handler's action and hands
the accepted (possibly truncated) steps to the step observers.
"""

from enum import Enum
import logging
import math
from typing import List, Optional, Tuple

from jax import Array
import jax.numpy as jnp

from .equations import Equation
from .events import Action, EventDetector, EventHandler, EventSettings
from .exceptions import DegenerateStepError, DimensionMismatchError, StepExhaustionError
from .interpolators import HermiteInterpolator
from .observers import StepObserver
from .timesteppers import StepperProtocol

logger = logging.getLogger(__name__)

# A step ending this close to the final time (relative to |h|) is stretched to it.
LAST_STEP_SLACK = 1e-12


class RunStatus(Enum):
    """State of the integration loop."""

    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


class Integrator:
    """
    Fixed-step integrator for y' = f(t, y) with event detection.

    Args:
        method: Time-stepping scheme (e.g. Midpoint(), RK4()).
        step_size: Step size. A positive value is used as a magnitude in
            either direction; a negative value is only valid for backward
            runs.
        max_steps: Maximum number of accepted steps per run. Each piece of
            a step split by events counts as one accepted step.

    Example usage:
    ```python
    import jax.numpy as jnp
    from jax_ivp import Integrator, Midpoint, FunctionEquation, SwitchingFunction

    # dy/dt = 1, stop when y reaches 2.5
    equation = FunctionEquation(lambda t, y: jnp.ones_like(y), dimension=1)

    integrator = Integrator(Midpoint(), step_size=1.23456)
    integrator.add_event_handler(
        SwitchingFunction(lambda t, y: y[0] - 2.5), convergence=1e-12
    )
    t, y = integrator.integrate(equation, 0.0, jnp.array([0.0]), 5.0)
    ```
    """

    def __init__(
        self,
        method: StepperProtocol,
        step_size: float,
        max_steps: int = 100_000,
    ):
        step_size = float(step_size)
        if step_size == 0.0 or not math.isfinite(step_size):
            raise DegenerateStepError(
                f"Step size must be finite and non-zero, got {step_size!r}"
            )
        if max_steps < 1:
            raise ValueError(f"max_steps must be at least 1, got {max_steps!r}")
        self.method = method
        self.step_size = step_size
        self.max_steps = int(max_steps)
        self._observers: List[StepObserver] = []
        self._handlers: List[Tuple[EventHandler, EventSettings]] = []
        self.status: Optional[RunStatus] = None
        self.evaluations = 0
        self.accepted_steps = 0
        self._t_final = math.nan

    @property
    def name(self) -> str:
        return self.method.name

    # ---- observers and handlers ------------------------------------------

    def add_step_observer(self, observer: StepObserver) -> None:
        self._observers.append(observer)

    @property
    def step_observers(self) -> List[StepObserver]:
        return list(self._observers)

    def clear_step_observers(self) -> None:
        self._observers.clear()

    def add_event_handler(
        self,
        handler: EventHandler,
        settings: Optional[EventSettings] = None,
        **kwargs,
    ) -> int:
        """
        Watch a switching function during subsequent runs.

        Args:
            handler: The event handler.
            settings: Detection settings; keyword arguments build one
                otherwise (max_check_interval, convergence, max_iterations,
                proximity).

        Returns:
            The handler index, which decides ties between simultaneous events.
        """
        if settings is None:
            settings = EventSettings(**kwargs)
        elif kwargs:
            raise ValueError("Pass either settings or keyword arguments, not both")
        self._handlers.append((handler, settings))
        return len(self._handlers) - 1

    @property
    def event_handlers(self) -> List[EventHandler]:
        return [handler for handler, _ in self._handlers]

    def clear_event_handlers(self) -> None:
        self._handlers.clear()

    # ---- run ---------------------------------------------------------------

    def _signed_step(self, forward: bool) -> float:
        if self.step_size < 0.0 and forward:
            raise DegenerateStepError(
                f"Negative step size {self.step_size!r} for a forward integration"
            )
        return abs(self.step_size) if forward else -abs(self.step_size)

    def _sanity_checks(self, equation: Equation, t0: float, y0: Array, t_final: float):
        if not (math.isfinite(t0) and math.isfinite(t_final)):
            raise ValueError(f"Integration bounds must be finite, got {t0!r}, {t_final!r}")
        if y0.ndim != 1 or y0.shape[0] != equation.dimension:
            raise DimensionMismatchError(equation.dimension, int(y0.size))
        if abs(t_final - t0) <= 1e-12 * max(abs(t0), abs(t_final)):
            raise DegenerateStepError(
                f"Integration interval [{t0!r}, {t_final!r}] is too small"
            )

    def _check_state(self, equation: Equation, y: Array, what: str) -> Array:
        y = jnp.asarray(y)
        if y.shape != (equation.dimension,):
            raise DimensionMismatchError(equation.dimension, int(y.size), what)
        return y

    def _dispatch(self, interpolator: HermiteInterpolator, is_last: bool) -> None:
        if self.accepted_steps >= self.max_steps:
            raise StepExhaustionError(
                self.max_steps, interpolator.t_start, self._t_final
            )
        self.accepted_steps += 1
        for observer in self._observers:
            observer.on_step_accepted(interpolator, is_last)

    def integrate(
        self,
        equation: Equation,
        t0: float,
        y0: Array,
        t_final: float,
    ) -> Tuple[float, Array]:
        """
        Integrate the equation from (t0, y0) up to t_final.

        Args:
            equation: The differential equation.
            t0: Initial time.
            y0: Initial state, shape (equation.dimension,).
            t_final: Target time; may be smaller than t0 for a backward run.

        Returns:
            t: Time actually reached, t_final unless a STOP event ended the
                run earlier.
            y: State at t.

        Raises:
            DimensionMismatchError: If y0 or f(t0, y0) do not match the
                equation dimension.
            DegenerateStepError: If the step size or interval is unusable.
            BracketingError: If an event root cannot be isolated.
            StepExhaustionError: If max_steps is exceeded.
        """
        t0, t_final = float(t0), float(t_final)
        y = jnp.asarray(y0, dtype=jnp.result_type(float))
        self._sanity_checks(equation, t0, y, t_final)
        forward = t_final > t0
        h = self._signed_step(forward)
        direction = 1.0 if forward else -1.0

        self.evaluations = 0
        self.accepted_steps = 0
        self._t_final = t_final

        def fun(t, y):
            self.evaluations += 1
            return equation.derivatives(t, y)

        self.status = RunStatus.RUNNING
        try:
            yp = self._check_state(equation, fun(t0, y), "derivative")
            if y.dtype != jnp.float64:
                logger.warning(
                    "State dtype is %s; enable jax_enable_x64 for double precision",
                    y.dtype,
                )

            detector = EventDetector(self._handlers)
            detector.init(t0, y, t_final)
            for observer in self._observers:
                observer.on_init(t0, y, t_final)

            t = t0
            while self.status is RunStatus.RUNNING:
                last = direction * (t_final - (t + h)) <= LAST_STEP_SLACK * abs(h)
                step = self.method.advance(fun, t, y, t_final - t if last else h, (), yp)
                if last:
                    step = step._replace(t_next=t_final)
                window = HermiteInterpolator.from_step(step)

                while True:
                    group = detector.scan(window) if len(detector) else []

                    if not group:
                        self._dispatch(window, last)
                        detector.commit(window.t_end, window.y_end)
                        t, y, yp = window.t_end, window.y_end, step.yp_next
                        if last:
                            self.status = RunStatus.DONE
                        break

                    t_event = group[0].t
                    piece = window.truncate(t_event)
                    y_event = piece.y_end

                    action = Action.CONTINUE
                    trigger = None
                    for occurrence in group:
                        handler = detector.handler(occurrence.index)
                        chosen = Action(
                            handler.event_occurred(t_event, y_event, occurrence.increasing)
                        )
                        detector.acknowledge(occurrence)
                        logger.debug(
                            "Event of handler %d at t=%r: %s",
                            occurrence.index, t_event, chosen.name,
                        )
                        if chosen in (Action.STOP, Action.RESET_STATE):
                            action, trigger = chosen, handler
                            break
                        if chosen is Action.RESET_DERIVATIVES:
                            action = chosen

                    at_end = last and t_event == step.t_next
                    self._dispatch(piece, action is Action.STOP or at_end)

                    if action is Action.STOP:
                        t, y = t_event, y_event
                        self.status = RunStatus.DONE
                        logger.info("Integration stopped by event at t=%r", t_event)
                        break

                    if action is Action.RESET_STATE:
                        y_event = self._check_state(
                            equation, trigger.reset_state(t_event, y_event), "reset state"
                        )
                    if action is not Action.CONTINUE:
                        detector.commit(t_event, y_event)
                        t, y, yp = t_event, y_event, None
                        if at_end:
                            self.status = RunStatus.DONE
                        break

                    detector.commit(t_event, y_event)
                    if t_event == window.t_end:
                        t, y, yp = t_event, y_event, step.yp_next
                        if last:
                            self.status = RunStatus.DONE
                        break
                    window = window.restrict(t_event, window.t_end)

        except Exception:
            self.status = RunStatus.FAILED
            raise

        logger.info(
            "%s integration reached t=%r in %d steps (%d evaluations)",
            self.name, t, self.accepted_steps, self.evaluations,
        )
        return t, y
