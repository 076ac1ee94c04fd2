"""Step observers recording or sampling the trajectory."""

import math
from typing import Callable, List, Optional

from jax import Array
import jax.numpy as jnp

from ..interpolators import InterpolatorProtocol


class StepRecorder:
    """
    Record the end points of every accepted step.

    Attributes:
        t: Step boundary times, starting with the initial time.
        y: States at the times in t.
        last_flags: `is_last` flag received with each step.
    """

    def __init__(self):
        self.t: List[float] = []
        self.y: List[Array] = []
        self.last_flags: List[bool] = []

    def on_init(self, t0: float, y0: Array, t_final: float) -> None:
        self.t = [t0]
        self.y = [y0]
        self.last_flags = []

    def on_step_accepted(self, interpolator: InterpolatorProtocol, is_last: bool) -> None:
        self.t.append(interpolator.t_end)
        self.y.append(interpolator.y_end)
        self.last_flags.append(is_last)

    def as_arrays(self):
        """Return (t, y) stacked as arrays of shape (n,) and (n, dim)."""
        return jnp.asarray(self.t), jnp.stack(self.y, axis=0)


class DenseOutputSampler:
    """
    Sample the dense output at prescribed times.

    Args:
        t_eval: Times at which to store the solution, ordered in the
            integration direction.

    Samples are taken from the interpolator of the step containing each
    requested time, so their accuracy is the one of the method itself, not
    of the step grid.
    """

    def __init__(self, t_eval):
        self.t_eval = [float(t) for t in t_eval]
        self.t: List[float] = []
        self.y: List[Array] = []
        self._next = 0
        self._forward = True

    def on_init(self, t0: float, y0: Array, t_final: float) -> None:
        self.t = []
        self.y = []
        self._next = 0
        self._forward = t_final >= t0
        while self._next < len(self.t_eval) and self.t_eval[self._next] == t0:
            self._store(t0, y0)

    def _reached(self, t: float, bound: float) -> bool:
        return t <= bound if self._forward else t >= bound

    def _store(self, t: float, y: Array) -> None:
        self.t.append(t)
        self.y.append(y)
        self._next += 1

    def on_step_accepted(self, interpolator: InterpolatorProtocol, is_last: bool) -> None:
        while self._next < len(self.t_eval):
            t = self.t_eval[self._next]
            if not self._reached(t, interpolator.t_end):
                break
            self._store(t, interpolator.state_at(t))

    def as_arrays(self):
        """Return (t, y) stacked as arrays of shape (n,) and (n, dim)."""
        return jnp.asarray(self.t), jnp.stack(self.y, axis=0)


class StepNormalizer:
    """
    Call a fixed-step handler on a regular grid, independent of the steps
    the integrator actually takes.

    Args:
        h: Grid spacing (magnitude); the sign follows the run direction.
        handler: Callable (t, y, is_last) invoked at t0, t0 + h, ... and at
            the final time of the run.
    """

    def __init__(self, h: float, handler: Callable[[float, Array, bool], None]):
        if not (h > 0.0 and math.isfinite(h)):
            raise ValueError(f"Normalizer step must be positive, got {h!r}")
        self.h = float(h)
        self.handler = handler
        self._t0 = 0.0
        self._count = 0
        self._signed_h = self.h
        self._last_t: Optional[float] = None

    def on_init(self, t0: float, y0: Array, t_final: float) -> None:
        self._t0 = t0
        self._count = 0
        self._signed_h = self.h if t_final >= t0 else -self.h
        self._last_t = t0
        self.handler(t0, y0, False)

    def on_step_accepted(self, interpolator: InterpolatorProtocol, is_last: bool) -> None:
        forward = self._signed_h > 0.0
        while True:
            t = self._t0 + (self._count + 1) * self._signed_h
            if (t > interpolator.t_end) if forward else (t < interpolator.t_end):
                break
            self._count += 1
            self._last_t = t
            self.handler(t, interpolator.state_at(t), is_last and t == interpolator.t_end)
        if is_last and self._last_t != interpolator.t_end:
            self._last_t = interpolator.t_end
            self.handler(interpolator.t_end, interpolator.y_end, True)
