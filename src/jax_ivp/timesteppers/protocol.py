"""Protocols for time-stepping schemes."""

from typing import Callable, Optional, Protocol, runtime_checkable

from jax import Array

from .base import Step


@runtime_checkable
class StepperProtocol(Protocol):
    """
    Protocol for time-stepping schemes.

    Defines the interface for advancing an ODE one time step. Any class
    implementing an advance() method with this signature can be used as a
    time-stepping method by the `Integrator` and `solve_ivp`.
    """

    name: str
    order: int

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
        Take a single time step.

        Args:
            fun: Right-hand side function.
            t: Current time.
            y: Current solution.
            h: Signed time step size.
            args: Additional arguments to pass to fun.
            yp: Derivative at (t, y) if already known.

        Returns:
            The completed step, including the derivative samples needed
            to build its dense output.
        """
        ...
