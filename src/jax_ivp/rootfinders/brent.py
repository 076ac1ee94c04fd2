"""Brent's method for bracketed root finding."""

import logging
import math
from typing import Optional

from flax import nnx

from ..custom_types import ScalarFunction
from ..exceptions import BracketingError

logger = logging.getLogger(__name__)

# Relative part of the convergence criterion, a few machine epsilons.
RTOL = 4.0 * 2.220446049250313e-16


class Brent(nnx.Module):
    """
    Brent's bracketing root finder.

    Combines bisection with secant and inverse quadratic steps; every
    iterate stays inside a bracket where the function changes sign, so
    convergence only needs the function to be continuous.

    Implements: RootFinderProtocol

    Attributes:
        tol: Absolute convergence tolerance on the abscissa.
        maxiter: Maximum number of function evaluations after the bounds.
    """

    def __init__(self, tol: float = 1e-10, maxiter: int = 100):
        if not tol > 0.0:
            raise ValueError(f"tol must be positive, got {tol!r}")
        if maxiter < 1:
            raise ValueError(f"maxiter must be at least 1, got {maxiter!r}")
        self.tol = float(tol)
        self.maxiter = int(maxiter)

    def __call__(
        self,
        fun: ScalarFunction,
        a: float,
        b: float,
        fa: Optional[float] = None,
        fb: Optional[float] = None,
    ) -> float:
        """
        Find a root of fun bracketed by a and b.

        Args:
            fun: Scalar function of one variable.
            a: Bracket bound on the start side.
            b: Bracket bound on the end side.
            fa: fun(a), if already known.
            fb: fun(b), if already known.

        Returns:
            The final bracket bound lying on b's side of the root (or the
            exact root if one was hit).

        Raises:
            ValueError: If fun(a) and fun(b) have the same sign.
            BracketingError: If the root is not isolated within maxiter.
        """
        fa = float(fun(a)) if fa is None else float(fa)
        fb = float(fun(b)) if fb is None else float(fb)
        if fa == 0.0:
            return a
        if fb == 0.0:
            return b
        if math.copysign(1.0, fa) == math.copysign(1.0, fb):
            raise ValueError(
                f"Root is not bracketed: f({a!r})={fa!r}, f({b!r})={fb!r}"
            )
        end_positive = fb > 0.0

        x_pre, f_pre = a, fa
        x_cur, f_cur = b, fb
        x_blk, f_blk = a, fa
        s_pre = s_cur = x_cur - x_pre

        for iteration in range(self.maxiter + 1):
            if f_pre != 0.0 and f_cur != 0.0 and (f_pre > 0.0) != (f_cur > 0.0):
                x_blk, f_blk = x_pre, f_pre
                s_pre = s_cur = x_cur - x_pre
            if abs(f_blk) < abs(f_cur):
                x_pre, x_cur, x_blk = x_cur, x_blk, x_cur
                f_pre, f_cur, f_blk = f_cur, f_blk, f_cur

            delta = 0.5 * (self.tol + RTOL * abs(x_cur))
            s_bis = 0.5 * (x_blk - x_cur)
            if f_cur == 0.0 or abs(s_bis) < delta:
                logger.debug("Brent converged after %d iterations", iteration)
                if f_cur == 0.0 or (f_cur > 0.0) == end_positive:
                    return x_cur
                return x_blk

            if iteration == self.maxiter:
                break

            if abs(s_pre) > delta and abs(f_cur) < abs(f_pre):
                if x_pre == x_blk:
                    # secant
                    s_try = -f_cur * (x_cur - x_pre) / (f_cur - f_pre)
                else:
                    # inverse quadratic
                    d_pre = (f_pre - f_cur) / (x_pre - x_cur)
                    d_blk = (f_blk - f_cur) / (x_blk - x_cur)
                    s_try = -f_cur * (f_blk * d_blk - f_pre * d_pre) / (
                        d_blk * d_pre * (f_blk - f_pre)
                    )
                if 2.0 * abs(s_try) < min(abs(s_pre), 3.0 * abs(s_bis) - delta):
                    s_pre, s_cur = s_cur, s_try
                else:
                    s_pre = s_cur = s_bis
            else:
                s_pre = s_cur = s_bis

            x_pre, f_pre = x_cur, f_cur
            if abs(s_cur) > delta:
                x_cur += s_cur
            else:
                x_cur += delta if s_bis > 0.0 else -delta
            f_cur = float(fun(x_cur))

        raise BracketingError(x_cur, x_blk, self.maxiter)
