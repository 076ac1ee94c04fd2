"""Root-finding algorithms used to locate events."""

from .protocol import RootFinderProtocol
from .brent import Brent


__all__ = [
    "RootFinderProtocol",
    "Brent",
]
