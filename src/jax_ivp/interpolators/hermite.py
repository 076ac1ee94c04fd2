"""Cubic Hermite dense output for completed steps."""

from dataclasses import dataclass, replace
import math

from jax import Array

from ..exceptions import InterpolationRangeError
from ..timesteppers.base import Step

# Queries this far outside the window (relative to |h|) are still served.
SOFT_SLACK = 1e-12


@dataclass(frozen=True)
class HermiteInterpolator:
    """
    Dense output over one step, built from y and y' at both step ends.

    The reconstruction is the cubic Hermite polynomial
    $$ y(\\theta) = h_{00} y_n + h_{10} h y'_n + h_{01} y_{n+1} + h_{11} h y'_{n+1} $$
    with $\\theta = (t - t_n) / h$. The polynomial always spans the full
    original step; `restrict` and `truncate` only narrow the window it may be
    queried on, so no derivative is ever re-evaluated.

    Instances are immutable: queries never change internal state.

    Attributes:
        step: The completed step the polynomial is built from.
        t_start: Start of the query window.
        t_end: End of the query window.
        y_start: State at t_start.
        y_end: State at t_end.
    """

    step: Step
    t_start: float
    t_end: float
    y_start: Array
    y_end: Array

    @classmethod
    def from_step(cls, step: Step) -> "HermiteInterpolator":
        return cls(step, step.t, step.t_next, step.y, step.y_next)

    @property
    def h(self) -> float:
        """Signed length of the query window."""
        return self.t_end - self.t_start

    @property
    def forward(self) -> bool:
        return self.step.t_next > self.step.t

    def _check_range(self, t: float) -> float:
        t = float(t)
        lo, hi = sorted((self.t_start, self.t_end))
        slack = SOFT_SLACK * abs(self.step.h) + 4.0 * math.ulp(max(abs(lo), abs(hi)))
        if not (lo - slack <= t <= hi + slack):
            raise InterpolationRangeError(
                f"t={t!r} lies outside the step [{self.t_start!r}, {self.t_end!r}]"
            )
        return t

    def _theta(self, t: float) -> float:
        return (t - self.step.t) / self.step.h

    def state_at(self, t: float) -> Array:
        """
        Interpolated state at time t.

        Exact (bitwise) at the window bounds.

        Raises:
            InterpolationRangeError: If t lies outside the window.
        """
        t = self._check_range(t)
        if t == self.t_start:
            return self.y_start
        if t == self.t_end:
            return self.y_end
        return self._evaluate(self._theta(t))

    def derivative_at(self, t: float) -> Array:
        """Time derivative of the dense output at time t."""
        t = self._check_range(t)
        theta = self._theta(t)
        s = self.step
        d00 = 6.0 * theta * (theta - 1.0)
        d10 = theta * (3.0 * theta - 4.0) + 1.0
        d11 = theta * (3.0 * theta - 2.0)
        return d00 * (s.y - s.y_next) / s.h + d10 * s.yp + d11 * s.yp_next

    def _evaluate(self, theta: float) -> Array:
        s = self.step
        t2 = theta * theta
        t3 = t2 * theta
        h00 = 2.0 * t3 - 3.0 * t2 + 1.0
        h10 = t3 - 2.0 * t2 + theta
        h01 = 3.0 * t2 - 2.0 * t3
        h11 = t3 - t2
        return h00 * s.y + h01 * s.y_next + s.h * (h10 * s.yp + h11 * s.yp_next)

    def restrict(self, new_start: float, new_end: float) -> "HermiteInterpolator":
        """
        Narrow the query window to [new_start, new_end].

        Both bounds must lie inside the current window and keep its
        direction; the states at the new bounds come from the same polynomial.
        """
        new_start = self._check_range(new_start)
        new_end = self._check_range(new_end)
        if (new_end - new_start) * (self.step.t_next - self.step.t) < 0:
            raise InterpolationRangeError(
                f"Restriction [{new_start!r}, {new_end!r}] reverses the step direction"
            )
        return replace(
            self,
            t_start=new_start,
            t_end=new_end,
            y_start=self.state_at(new_start),
            y_end=self.state_at(new_end),
        )

    def truncate(self, new_end: float) -> "HermiteInterpolator":
        """Interpolator over [t_start, new_end] reusing the same polynomial."""
        return self.restrict(self.t_start, new_end)

    def __repr__(self) -> str:
        return f"HermiteInterpolator([{self.t_start!r}, {self.t_end!r}])"
