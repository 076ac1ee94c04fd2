"""Protocol for bracketing root-finding algorithms."""

from typing import Optional, Protocol, runtime_checkable

from ..custom_types import ScalarFunction


@runtime_checkable
class RootFinderProtocol(Protocol):
    """
    Protocol for bracketing root-finding algorithms.

    Used by the event detector to locate the zero crossing of a switching
    function inside an interval where it changes sign. Only continuity of
    the function is assumed.
    """

    tol: float
    maxiter: int

    def __call__(
        self,
        fun: ScalarFunction,
        a: float,
        b: float,
        fa: Optional[float] = None,
        fb: Optional[float] = None,
    ) -> float:
        """
        Find a root of fun inside the bracket [a, b].

        Args:
            fun: Scalar function of one variable.
            a: Bracket bound on the start side (may be larger than b).
            b: Bracket bound on the end side.
            fa: fun(a), if already known.
            fb: fun(b), if already known.

        Returns:
            A point within `tol` of the root, on the same side of the root
            as b.
        """
        ...
