"""Problems with polynomial coefficients."""

from jax import Array
import jax.numpy as jnp

from .base import ReferenceProblem


class ConstantRate(ReferenceProblem):
    """y' = 1, y(0) = 0, on [0, 5]. Exact solution: y(t) = t."""

    t0 = 0.0
    t_final = 5.0

    def __init__(self):
        super().__init__([0.0])

    def rhs(self, t: float, y: Array) -> Array:
        return jnp.ones_like(y)

    def exact(self, t: float) -> Array:
        return self.y0 + (t - self.t0)


class PolynomialGrowth(ReferenceProblem):
    """
    y' = t^3 y, y(0) = 1, on [0, 1.5].

    Exact solution: y(t) = y0 exp((t^4 - t0^4) / 4).
    """

    t0 = 0.0
    t_final = 1.5

    def __init__(self):
        super().__init__([1.0])

    def rhs(self, t: float, y: Array) -> Array:
        return t**3 * y

    def exact(self, t: float) -> Array:
        return self.y0 * jnp.exp((t**4 - self.t0**4) / 4.0)
