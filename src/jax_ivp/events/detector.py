"""
Root bracketing state machine locating events inside accepted steps.

The detector keeps one `EventState` record per registered handler for the
duration of a run. Handlers themselves stay stateless, so the same handler
objects can be shared between integrators.
"""

from dataclasses import dataclass
from enum import Enum
import logging
import math
from typing import List, NamedTuple, Optional, Sequence, Tuple

from jax import Array

from ..interpolators import HermiteInterpolator
from ..rootfinders import Brent
from .handler import EventHandler
from .settings import EventSettings

logger = logging.getLogger(__name__)


class DetectorStatus(Enum):
    """Outcome of the last scan."""

    SCANNING = "scanning"
    ROOT_FOUND = "root_found"
    NO_EVENT = "no_event"


class EventOccurrence(NamedTuple):
    """
    A located root, consumed immediately by the integrator.

    Attributes:
        index: Registration index of the handler.
        t: Event time shared by all occurrences of the same group.
        root: Root located for this handler (within its convergence of t).
        increasing: Whether g crossed zero from below.
    """

    index: int
    t: float
    root: float
    increasing: bool


@dataclass
class EventState:
    """
    Detection state of one switching function during one run.

    Attributes:
        handler: The watched handler.
        settings: Detection settings for this handler.
        solver: Root finder honoring the settings' tolerance and budget.
        t_ref: Last confirmed point; scans resume from here.
        g_ref: Value of g at t_ref.
        last_event: Time of the most recent event of this handler.
        armed: Cleared by an event; restored once t_ref leaves the re-trigger
            window of last_event. Roots inside the window are skipped while
            the handler is disarmed.
    """

    handler: EventHandler
    settings: EventSettings
    solver: Brent
    t_ref: float = math.nan
    g_ref: float = math.nan
    last_event: Optional[float] = None
    armed: bool = True


class EventDetector:
    """
    Locates the first event among all handlers inside a step.

    Args:
        handlers: Sequence of (handler, settings) pairs; the position in the
            sequence is the handler index used for tie-breaking.
    """

    def __init__(self, handlers: Sequence[Tuple[EventHandler, EventSettings]]):
        self.states = [
            EventState(h, s, Brent(tol=s.convergence, maxiter=s.max_iterations))
            for h, s in handlers
        ]
        self.forward = True
        self.status = DetectorStatus.NO_EVENT

    def __len__(self) -> int:
        return len(self.states)

    def init(self, t0: float, y0: Array, t_final: float) -> None:
        """Reset every handler for a new run starting at (t0, y0)."""
        self.forward = t_final >= t0
        for state in self.states:
            state.handler.init(t0, y0, t_final)
            state.last_event = None
            state.armed = True
            state.t_ref = t0
            state.g_ref = float(state.handler.g(t0, y0))
        self.status = DetectorStatus.NO_EVENT

    def _after(self, t1: float, t2: float) -> bool:
        """True if t1 lies strictly after t2 in the integration direction."""
        return t1 > t2 if self.forward else t1 < t2

    def _in_window(self, state: EventState, t: float) -> bool:
        return (
            state.last_event is not None
            and abs(t - state.last_event) <= state.settings.window
        )

    def _g(self, state: EventState, interpolator: HermiteInterpolator, t: float) -> float:
        return float(state.handler.g(t, interpolator.state_at(t)))

    def _first_root(
        self, state: EventState, interpolator: HermiteInterpolator
    ) -> Optional[Tuple[float, bool]]:
        """Earliest acceptable root of one handler between t_ref and the step end."""
        t_end = interpolator.t_end
        if not self._after(t_end, state.t_ref):
            return None

        n = max(1, math.ceil(abs(t_end - state.t_ref) / state.settings.max_check_interval))
        dt = (t_end - state.t_ref) / n
        samples = [state.t_ref + k * dt for k in range(1, n)] + [t_end]
        direction = getattr(state.handler, "direction", 0)

        def g(t: float) -> float:
            return self._g(state, interpolator, t)

        ta, ga = state.t_ref, state.g_ref
        k = 0
        tb, gb = samples[0], g(samples[0])
        while True:
            if ga == 0.0 and ta != tb:
                # a start sitting on a zero of g takes its sign from just ahead
                offset = min(state.settings.convergence, abs(tb - ta))
                ta = ta + offset if self.forward else ta - offset
                ga = g(ta)
            if ga != 0.0 and (gb == 0.0 or (ga > 0.0) != (gb > 0.0)):
                root = state.solver(g, ta, tb, ga, gb)
                increasing = ga < 0.0
                if not state.armed and self._in_window(state, root):
                    logger.debug(
                        "Ignoring root at t=%r within re-trigger window of t=%r",
                        root, state.last_event,
                    )
                elif direction and increasing != (direction > 0):
                    logger.debug("Ignoring root at t=%r with unwanted direction", root)
                else:
                    return root, increasing
                # resume past the skipped root, then recheck up to the same sample
                ta, ga = root, g(root)
                if root != tb:
                    continue
            ta, ga = tb, gb
            k += 1
            if k == n:
                return None
            tb, gb = samples[k], g(samples[k])

    def scan(self, interpolator: HermiteInterpolator) -> List[EventOccurrence]:
        """
        Look for the first event group in the interpolator's window.

        Every handler is scanned from its reference point to the end of the
        window. The earliest root in the integration direction wins; roots of
        other handlers lying within the winner's convergence tolerance join
        its group. The group is returned ordered by handler index, all
        members sharing the latest root of the group as event time, so that
        every member has crossed when the integrator acts on it.

        Returns:
            The occurrence group, empty if no event lies in the window.

        Raises:
            BracketingError: If a root cannot be isolated within the budget.
        """
        self.status = DetectorStatus.SCANNING
        sign = 1.0 if self.forward else -1.0

        candidates = []
        for index, state in enumerate(self.states):
            found = self._first_root(state, interpolator)
            if found is not None:
                candidates.append((sign * found[0], index, found[0], found[1]))

        if not candidates:
            self.status = DetectorStatus.NO_EVENT
            return []

        candidates.sort()
        _, winner, first, _ = candidates[0]
        tolerance = self.states[winner].settings.convergence
        group = [c for c in candidates if sign * (c[2] - first) <= tolerance]
        t_event = group[-1][2]
        group.sort(key=lambda c: c[1])

        self.status = DetectorStatus.ROOT_FOUND
        logger.debug(
            "Event group at t=%r from handlers %s", t_event, [c[1] for c in group]
        )
        return [EventOccurrence(index, t_event, root, increasing)
                for _, index, root, increasing in group]

    def acknowledge(self, occurrence: EventOccurrence) -> None:
        """Record that a handler's event has been processed."""
        state = self.states[occurrence.index]
        state.last_event = occurrence.t
        state.armed = False

    def commit(self, t: float, y: Array) -> None:
        """Move every reference point to (t, y), the new start of scanning."""
        for state in self.states:
            state.t_ref = t
            state.g_ref = float(state.handler.g(t, y))
            if not state.armed and not self._in_window(state, t):
                state.armed = True

    def handler(self, index: int) -> EventHandler:
        return self.states[index].handler
