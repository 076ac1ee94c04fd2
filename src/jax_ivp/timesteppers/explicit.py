"""Explicit Runge-Kutta time-stepping schemes."""

from typing import Callable

from jax import Array

from .base import AbstractStepper


class ForwardEuler(AbstractStepper):
    """
    Forward Euler method.

    Discretisation:
        $$ \\frac{\\partial y}{\\partial t} \\rightarrow
        \\frac{(y_{n+1} - y_n)}{h} = f(t_n, y_n) $$

    Implements: StepperProtocol
    """

    name = "euler"
    order = 1

    def _update(
        self, fun: Callable, t: float, y: Array, h: float, yp: Array, args: tuple
    ) -> Array:
        return y + h * yp


class Midpoint(AbstractStepper):
    """
    Explicit midpoint rule, a second order Runge-Kutta method.

    Computes
        $$ y_{n+1} = y_n + h f(t_n + h/2, y_n + (h/2) f(t_n, y_n)). $$

    Implements: StepperProtocol
    """

    name = "midpoint"
    order = 2

    def _update(
        self, fun: Callable, t: float, y: Array, h: float, yp: Array, args: tuple
    ) -> Array:
        k2 = fun(t + 0.5 * h, y + 0.5 * h * yp, *args)
        return y + h * k2


class RK4(AbstractStepper):
    """
    Fourth (4th) order Runge-Kutta method.

    Implements: StepperProtocol
    """

    name = "classical Runge-Kutta"
    order = 4

    def _update(
        self, fun: Callable, t: float, y: Array, h: float, yp: Array, args: tuple
    ) -> Array:
        k1 = yp
        k2 = fun(t + 0.5 * h, y + 0.5 * h * k1, *args)
        k3 = fun(t + 0.5 * h, y + 0.5 * h * k2, *args)
        k4 = fun(t + h, y + h * k3, *args)
        return y + (h / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)
