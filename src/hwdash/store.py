"""Holder of the most recent complete snapshot."""

import threading

from hwdash.models import Snapshot


class SnapshotStore:
    """
    Single-writer store for the latest Snapshot.

    Snapshots are immutable, so publishing is a reference swap under a lock:
    a reader sees either the previous snapshot or the new one, never a mix.
    """

    def __init__(self, initial: Snapshot | None = None) -> None:
        self._lock = threading.Lock()
        self._current = initial if initial is not None else Snapshot.empty()
        self._stale = False
        self._last_error: BaseException | None = None
        self._refresh_count = 0

    @property
    def current(self) -> Snapshot:
        with self._lock:
            return self._current

    @property
    def stale(self) -> bool:
        """True when the latest refresh failed and the shown data is old."""
        return self._stale

    @property
    def last_error(self) -> BaseException | None:
        return self._last_error

    @property
    def refresh_count(self) -> int:
        return self._refresh_count

    def replace(self, snapshot: Snapshot) -> Snapshot:
        """Publish a new snapshot and return the one it replaced."""
        with self._lock:
            previous = self._current
            self._current = snapshot
            self._stale = False
            self._last_error = None
            self._refresh_count += 1
        return previous

    def mark_stale(self, error: BaseException) -> None:
        """Keep the current snapshot but flag it as out of date."""
        with self._lock:
            self._stale = True
            self._last_error = error
