"""Exponential decay, integrated forward and backward."""

from jax import Array
import jax.numpy as jnp

from .base import ReferenceProblem


class ExponentialDecay(ReferenceProblem):
    """
    y' = -y, y(0) = (1, 0.1), on [0, 4].

    Exact solution: y(t) = y0 exp(-(t - t0)).
    """

    t0 = 0.0
    t_final = 4.0

    def __init__(self):
        super().__init__([1.0, 0.1])

    def rhs(self, t: float, y: Array) -> Array:
        return -y

    def exact(self, t: float) -> Array:
        return self.y0 * jnp.exp(-(t - self.t0))


class BackwardDecay(ExponentialDecay):
    """The decay problem integrated backward, from t = 0 to t = -4."""

    t_final = -4.0
