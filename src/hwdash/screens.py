"""Screen state machine: splash, then free navigation between views."""

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

from hwdash.models import ScreenState

logger = logging.getLogger(__name__)

NAVIGABLE = frozenset({ScreenState.DETAILS, ScreenState.GRAPHS, ScreenState.SETTINGS})

Listener = Callable[[ScreenState, ScreenState], None]


@dataclass(slots=True, frozen=True)
class SplashElapsed:
    """The splash timer ran out."""


@dataclass(slots=True, frozen=True)
class NavigateTo:
    """User asked for a screen."""

    target: ScreenState

    def __post_init__(self) -> None:
        if self.target not in NAVIGABLE:
            raise ValueError(f"cannot navigate to {self.target.value}")


Trigger = SplashElapsed | NavigateTo


class ScreenStateMachine:
    """
    Tracks the active screen.

    The splash screen only ends through ``SplashElapsed``; navigation is
    ignored until then. Afterwards any navigable screen can be selected,
    including the current one. No history is kept.
    """

    def __init__(self, initial: ScreenState = ScreenState.SPLASH) -> None:
        self._current = initial
        self._pending: deque[Trigger] = deque()
        self._listeners: list[Listener] = []

    @property
    def current(self) -> ScreenState:
        return self._current

    def subscribe(self, listener: Listener) -> None:
        """Call ``listener(previous, current)`` after every transition."""
        self._listeners.append(listener)

    def post(self, trigger: Trigger) -> None:
        """Queue a trigger for the next ``process_pending()``."""
        self._pending.append(trigger)

    def process_pending(self) -> int:
        """Apply queued triggers in order; return how many caused a transition."""
        applied = 0
        while self._pending:
            if self.apply(self._pending.popleft()):
                applied += 1
        return applied

    def apply(self, trigger: Trigger) -> bool:
        """Apply one trigger now. Returns False when it was ignored."""
        if isinstance(trigger, SplashElapsed):
            if self._current is not ScreenState.SPLASH:
                return False
            target = ScreenState.DETAILS
        elif isinstance(trigger, NavigateTo):
            if self._current is ScreenState.SPLASH:
                logger.debug("ignoring navigation to %s during splash", trigger.target.value)
                return False
            target = trigger.target
        else:
            raise TypeError(f"unknown trigger {trigger!r}")

        previous, self._current = self._current, target
        for listener in self._listeners:
            listener(previous, target)
        return True

    def splash_elapsed(self) -> bool:
        return self.apply(SplashElapsed())

    def navigate_to(self, target: ScreenState) -> bool:
        return self.apply(NavigateTo(target))
