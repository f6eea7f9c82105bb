"""Refresh scheduler and the read-only dashboard facade."""

import logging
import threading
import time
from collections.abc import Callable

from hwdash.config import DashboardConfig
from hwdash.errors import AdapterUnreachable, UnknownSeries
from hwdash.extract import extract_points
from hwdash.history import TimeSeriesStore
from hwdash.models import ScreenState, Snapshot
from hwdash.screens import NavigateTo, ScreenStateMachine, SplashElapsed
from hwdash.source import MetricSource
from hwdash.store import SnapshotStore
from hwdash.timers import Timer, TimerMode

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """
    Drives one cooperative tick of the dashboard.

    Each tick, in order: advance the timers, take a sample and publish it
    when the refresh timer fired, then let the screen state machine apply
    its pending triggers. At most one ``sample()`` call runs at a time; a
    slow source delays the next tick rather than overlapping refreshes.
    """

    def __init__(
        self,
        source: MetricSource,
        snapshots: SnapshotStore,
        series: TimeSeriesStore,
        screens: ScreenStateMachine,
        config: DashboardConfig,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._source = source
        self._snapshots = snapshots
        self._series = series
        self._screens = screens
        self._config = config
        self._clock = clock
        self._last_tick: float | None = None
        self.refresh_timer = Timer(config.refresh_interval, TimerMode.REPEATING)
        self.splash_timer = Timer(config.splash_duration, TimerMode.ONCE)
        # Held while a refresh is published so readers never see half of it
        self.lock = threading.RLock()

    def tick(self, delta: float | None = None) -> None:
        """
        Run one scheduling pass.

        Args:
            delta: Seconds since the previous tick. Measured on the monotonic
                clock when omitted (the first measured tick counts as zero).
        """
        if delta is None:
            now = self._clock()
            delta = 0.0 if self._last_tick is None else now - self._last_tick
            self._last_tick = now

        self.splash_timer.tick(delta)
        self.refresh_timer.tick(delta)

        if self.splash_timer.just_finished():
            self._screens.post(SplashElapsed())

        if self.refresh_timer.just_finished():
            missed = self.refresh_timer.times_finished_this_tick() - 1
            if missed:
                logger.debug("refresh fell behind by %d interval(s)", missed)
            self.refresh()

        self._screens.process_pending()

    def prime(self) -> bool:
        """
        Publish a baseline snapshot without recording any series.

        Counter-based series such as network throughput need a previous
        snapshot, so the first timed refresh can already produce them.
        """
        return self.refresh(record=False)

    def refresh(self, record: bool = True) -> bool:
        """Sample the source and publish the result. Returns False when stale."""
        try:
            sample = self._source.sample()
        except AdapterUnreachable as exc:
            logger.warning("metric source unreachable, keeping previous snapshot: %s", exc)
            self._snapshots.mark_stale(exc)
            return False

        with self.lock:
            previous = self._snapshots.replace(sample.snapshot)
            if record:
                self._append(sample.snapshot, previous)
        return True

    def _append(self, snapshot: Snapshot, previous: Snapshot) -> None:
        for name, value in extract_points(snapshot, previous):
            if name not in self._series:
                self._series.ensure_series(name, self._config.capacity_for(name))
            try:
                self._series.record(name, value)
            except UnknownSeries:
                logger.error("dropping sample for unknown series %r", name, exc_info=True)


class Dashboard:
    """
    The dashboard core: stores, state machine and scheduler wired together.

    Presenters read through ``current_screen()``, ``current_snapshot()`` and
    ``series_view()``; only ``tick()`` and ``navigate_to()`` change state.
    """

    def __init__(
        self,
        source: MetricSource,
        config: DashboardConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config if config is not None else DashboardConfig()
        self.source = source
        self._snapshots = SnapshotStore()
        self._series = TimeSeriesStore()
        self._screens = ScreenStateMachine()
        self.scheduler = RefreshScheduler(
            source,
            self._snapshots,
            self._series,
            self._screens,
            self.config,
            clock=clock,
        )
        self.scheduler.prime()

    @property
    def screens(self) -> ScreenStateMachine:
        return self._screens

    def tick(self, delta: float | None = None) -> None:
        self.scheduler.tick(delta)

    def navigate_to(self, target: ScreenState) -> bool:
        """Request a screen; ignored (returns False) during the splash."""
        return self._screens.apply(NavigateTo(target))

    def current_screen(self) -> ScreenState:
        return self._screens.current

    def current_snapshot(self) -> Snapshot:
        return self._snapshots.current

    def series_view(self, name: str) -> tuple[float, ...]:
        with self.scheduler.lock:
            return self._series.read(name)

    def series_names(self) -> list[str]:
        with self.scheduler.lock:
            return self._series.names()

    def series_capacity(self, name: str) -> int:
        return self._series.capacity(name)

    def is_stale(self) -> bool:
        return self._snapshots.stale

    @property
    def last_error(self) -> BaseException | None:
        return self._snapshots.last_error
