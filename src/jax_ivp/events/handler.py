"""Event handlers: switching functions and the actions they trigger."""

from enum import Enum
from typing import Callable, Optional, Protocol, Union, runtime_checkable

from jax import Array
import jax.numpy as jnp

from ..custom_types import ResetFn, SwitchingFn


class Action(Enum):
    """What the integrator does once an event has been located."""

    CONTINUE = "continue"
    RESET_STATE = "reset_state"
    RESET_DERIVATIVES = "reset_derivatives"
    STOP = "stop"


@runtime_checkable
class EventHandler(Protocol):
    """
    Protocol for switching functions watched during integration.

    Handlers hold no per-run detection state, so one instance may be shared
    by several integrators.
    """

    def init(self, t0: float, y0: Array, t_final: float) -> None:
        """Called once at the start of every run."""
        ...

    def g(self, t: float, y: Array) -> float:
        """Continuous scalar switching function."""
        ...

    def event_occurred(self, t: float, y: Array, increasing: bool) -> Action:
        """Called at a located root; decides the action."""
        ...

    def reset_state(self, t: float, y: Array) -> Array:
        """New state after a RESET_STATE action."""
        ...


class SwitchingFunction:
    """
    Event handler assembled from plain callables.

    Args:
        fun: Switching function with signature (t, y, *args) -> scalar.
        action: Action taken at every root, or a callable
            (t, y, increasing) -> Action deciding per event.
        reset: Callable (t, y, *args) -> new y, required for RESET_STATE.
        direction: 0 to report all crossings, +1 only crossings where g
            increases, -1 only where g decreases.
        args: Additional arguments to pass to fun and reset.
        name: Label used in logs and reprs.

    Example usage:
    ```python
    from jax_ivp import Action, SwitchingFunction

    # Stop once the first component reaches 2.5
    threshold = SwitchingFunction(lambda t, y: y[0] - 2.5, action=Action.STOP)
    ```
    """

    def __init__(
        self,
        fun: SwitchingFn,
        action: Union[Action, Callable] = Action.STOP,
        reset: Optional[ResetFn] = None,
        direction: int = 0,
        args: tuple = (),
        name: Optional[str] = None,
    ):
        if direction not in (-1, 0, 1):
            raise ValueError(f"Event direction must be -1, 0, or 1, got {direction}")
        if action is Action.RESET_STATE and reset is None:
            raise ValueError("RESET_STATE requires a reset callable")
        self.fun = fun
        self.action = action
        self.reset = reset
        self.direction = direction
        self.args = tuple(args)
        self.name = name or getattr(fun, "__name__", "switching_function")

    def init(self, t0: float, y0: Array, t_final: float) -> None:
        pass

    def g(self, t: float, y: Array) -> float:
        return float(self.fun(t, y, *self.args))

    def event_occurred(self, t: float, y: Array, increasing: bool) -> Action:
        if isinstance(self.action, Action):
            return self.action
        return Action(self.action(t, y, increasing))

    def reset_state(self, t: float, y: Array) -> Array:
        if self.reset is None:
            raise ValueError(f"Event handler {self.name!r} defines no reset")
        return jnp.asarray(self.reset(t, y, *self.args))

    def __repr__(self) -> str:
        return f"SwitchingFunction({self.name!r}, direction={self.direction})"
