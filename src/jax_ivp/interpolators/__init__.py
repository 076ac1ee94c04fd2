"""Dense output reconstructing the solution inside completed steps."""

from .hermite import HermiteInterpolator
from .protocol import InterpolatorProtocol

__all__ = [
    "HermiteInterpolator",
    "InterpolatorProtocol",
]
