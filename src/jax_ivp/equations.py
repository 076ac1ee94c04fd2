"""Equation interface consumed by the integrator."""

from typing import Protocol, runtime_checkable

from jax import Array
import jax.numpy as jnp

from .custom_types import RHSFunction


@runtime_checkable
class Equation(Protocol):
    """
    First-order system y' = f(t, y).

    Implementations must not mutate their inputs.
    """

    @property
    def dimension(self) -> int:
        """Size of the state vector."""
        ...

    def derivatives(self, t: float, y: Array) -> Array:
        """Evaluate f(t, y)."""
        ...


class FunctionEquation:
    """
    Adapter turning a plain right-hand side callable into an `Equation`.

    Args:
        fun: Right-hand side with signature (t, y, *args) -> dydt.
        dimension: Size of the state vector.
        args: Additional arguments to pass to fun.
    """

    def __init__(self, fun: RHSFunction, dimension: int, args: tuple = ()):
        self.fun = fun
        self._dimension = int(dimension)
        self.args = tuple(args)

    @property
    def dimension(self) -> int:
        return self._dimension

    def derivatives(self, t: float, y: Array) -> Array:
        return jnp.asarray(self.fun(t, y, *self.args))

    def __repr__(self) -> str:
        name = getattr(self.fun, "__name__", type(self.fun).__name__)
        return f"FunctionEquation({name}, dimension={self._dimension})"


def as_equation(obj, y0: Array, args: tuple = ()) -> Equation:
    """Return obj itself if it is an `Equation`, else wrap it as one."""
    if isinstance(obj, Equation):
        return obj
    if not callable(obj):
        raise TypeError(
            f"Expected an Equation or a callable (t, y, *args), got {type(obj).__name__}"
        )
    return FunctionEquation(obj, jnp.size(y0), args)
