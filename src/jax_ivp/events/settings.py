"""Per-handler settings for event detection."""

from dataclasses import dataclass
import math
from typing import Optional


@dataclass(frozen=True)
class EventSettings:
    """
    How the detector watches one switching function.

    Attributes:
        max_check_interval: Longest interval between two samples of g inside
            a step. Steps longer than this are split so that a pair of close
            roots is not missed. Default: no splitting.
        convergence: Tolerance on the event time.
        max_iterations: Root bracketing budget; exhausting it is an error.
        proximity: Window after an event of this handler during which a new
            root is treated as the same event. Default: 2 * convergence.
    """

    max_check_interval: float = math.inf
    convergence: float = 1e-10
    max_iterations: int = 100
    proximity: Optional[float] = None

    def __post_init__(self):
        if not self.max_check_interval > 0.0:
            raise ValueError(
                f"max_check_interval must be positive, got {self.max_check_interval!r}"
            )
        if not (self.convergence > 0.0 and math.isfinite(self.convergence)):
            raise ValueError(f"convergence must be positive, got {self.convergence!r}")
        if self.max_iterations < 1:
            raise ValueError(
                f"max_iterations must be at least 1, got {self.max_iterations!r}"
            )
        if self.proximity is not None and self.proximity < 0.0:
            raise ValueError(f"proximity must be non-negative, got {self.proximity!r}")

    @property
    def window(self) -> float:
        """Re-trigger window actually applied."""
        return 2.0 * self.convergence if self.proximity is None else self.proximity
