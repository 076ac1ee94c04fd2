"""Oscillating problems, one of them with discontinuous events."""

import math
from typing import List

from jax import Array
import jax.numpy as jnp

from ..events import Action, EventHandler, SwitchingFunction
from .base import ReferenceProblem


class HarmonicOscillator(ReferenceProblem):
    """
    y0' = y1, y1' = -y0, y(0) = (1, 0), on [0, 5].

    Exact solution: y(t) = (cos t, -sin t).
    """

    t0 = 0.0
    t_final = 5.0

    def __init__(self):
        super().__init__([1.0, 0.0])

    def rhs(self, t: float, y: Array) -> Array:
        return jnp.stack([y[1], -y[0]])

    def exact(self, t: float) -> Array:
        return jnp.array([math.cos(t), -math.sin(t)])


def _bounce(t, y):
    return -y


class BouncingSine(ReferenceProblem):
    """
    |sin t| built from a harmonic oscillator with a bounce at every zero.

    y0' = y1, y1' = -y0 starting at t = 3. Each time y0 reaches zero the
    state is negated (RESET_STATE), so y0 = |sin t| and
    y1 = sign(sin t) cos t. A second handler stops the run at t = 12,
    before the nominal final time 15.
    """

    t0 = 3.0
    t_final = 15.0
    stop_time = 12.0

    def __init__(self):
        super().__init__([math.sin(3.0), math.cos(3.0)])

    def rhs(self, t: float, y: Array) -> Array:
        return jnp.stack([y[1], -y[0]])

    def exact(self, t: float) -> Array:
        s = math.sin(t)
        sign = 1.0 if s >= 0.0 else -1.0
        return jnp.array([abs(s), sign * math.cos(t)])

    def event_handlers(self) -> List[EventHandler]:
        return [
            SwitchingFunction(
                lambda t, y: y[0], action=Action.RESET_STATE, reset=_bounce, name="bounce"
            ),
            SwitchingFunction(
                lambda t, y: t - self.stop_time, action=Action.STOP, name="stop"
            ),
        ]

    def theoretical_event_times(self) -> List[float]:
        return [math.pi, 2.0 * math.pi, 3.0 * math.pi, self.stop_time]
