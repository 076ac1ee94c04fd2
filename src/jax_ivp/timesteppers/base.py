"""Base class and step record for time-stepping schemes."""

import math
from typing import Callable, NamedTuple, Optional

from flax import nnx
import jax
from jax import Array
import jax.numpy as jnp

from ..exceptions import DegenerateStepError


class Step(NamedTuple):
    """
    Immutable record of one completed integration step.

    Attributes:
        t: Start time.
        y: State at t.
        t_next: End time.
        y_next: State at t_next.
        yp: Derivative at (t, y).
        yp_next: Derivative at (t_next, y_next).
    """

    t: float
    y: Array
    t_next: float
    y_next: Array
    yp: Array
    yp_next: Array

    @property
    def h(self) -> float:
        return self.t_next - self.t


def check_step_size(h: float) -> float:
    """Reject zero and non-finite step sizes."""
    h = float(h)
    if h == 0.0 or not math.isfinite(h):
        raise DegenerateStepError(f"Step size must be finite and non-zero, got {h!r}")
    return h


class AbstractStepper(nnx.Module):
    """
    Base class for explicit time-stepping schemes.

    Subclasses implement `_update`, the increment of one step, and inherit
    `advance`, which wraps it with the derivative samples at both ends.

    Args:
        jit: Compile the stage computations of `_update` with `jax.jit`,
            `fun` being a static argument. The right-hand side must then be
            traceable (no Python control flow on t or y), and side effects
            in `fun` such as call counters only run while tracing. The
            derivative samples at the step ends are always evaluated eagerly.
    """

    name = "abstract"
    order = 0

    def __init__(self, jit: bool = False):
        self.jit = jit
        self._compiled_update = (
            jax.jit(self._update, static_argnames=["fun"]) if jit else None
        )

    def _increment(
        self, fun: Callable, t: float, y: Array, h: float, yp: Array, args: tuple
    ) -> Array:
        if self._compiled_update is None:
            return self._update(fun, t, y, h, yp, args)
        return self._compiled_update(fun=fun, t=t, y=y, h=h, yp=yp, args=args)

    def _update(
        self, fun: Callable, t: float, y: Array, h: float, yp: Array, args: tuple
    ) -> Array:
        raise NotImplementedError

    def advance(
        self,
        fun: Callable,
        t: float,
        y: Array,
        h: float,
        args: tuple = (),
        yp: Optional[Array] = None,
    ) -> Step:
        """
        Take a single time step and sample the derivative at both ends.

        Args:
            fun: Right-hand side of system dydt = f(t, y, *args).
            t: Current time.
            y: Current solution.
            h: Signed time step size.
            args: Additional arguments to pass to fun.
            yp: Derivative at (t, y) if already known, else it is evaluated.

        Returns:
            Step record spanning [t, t + h].
        """
        h = check_step_size(h)
        t = float(t)
        if yp is None:
            yp = jnp.asarray(fun(t, y, *args))
        y_next = self._increment(fun, t, y, h, yp, args)
        t_next = t + h
        yp_next = jnp.asarray(fun(t_next, y_next, *args))
        return Step(t, y, t_next, y_next, yp, yp_next)

    def step(
        self,
        fun: Callable,
        t: float,
        y: Array,
        h: float,
        args: tuple = ()
    ) -> Array:
        """
        Take a single time step.

        Returns:
            Solution at t + h.
        """
        h = check_step_size(h)
        yp = jnp.asarray(fun(t, y, *args))
        return self._increment(fun, float(t), y, h, yp, args)
