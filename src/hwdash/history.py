"""Bounded metric history for charting."""

from collections import deque

from hwdash.errors import UnknownSeries


class TimeSeries:
    """Named FIFO of samples that never grows past its capacity."""

    __slots__ = ("_name", "_samples")

    def __init__(self, name: str, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"series capacity must be >= 1, got {capacity}")
        self._name = name
        self._samples: deque[float] = deque(maxlen=capacity)

    @property
    def name(self) -> str:
        return self._name

    @property
    def capacity(self) -> int:
        return self._samples.maxlen  # type: ignore[return-value]

    def record(self, value: float) -> None:
        """Append a sample, evicting the single oldest one when full."""
        self._samples.append(float(value))

    def read(self) -> tuple[float, ...]:
        """Current samples, oldest first. A copy, never a live view."""
        return tuple(self._samples)

    @property
    def latest(self) -> float | None:
        return self._samples[-1] if self._samples else None

    def __len__(self) -> int:
        return len(self._samples)

    def __repr__(self) -> str:
        return f"TimeSeries({self._name!r}, {len(self)}/{self.capacity})"


class TimeSeriesStore:
    """
    Set of independently bounded series keyed by name.

    Capacity is fixed when a series is created. ``ensure_series`` on an
    existing name leaves it untouched, so eviction stays strictly one-in,
    one-out for the lifetime of the series.
    """

    def __init__(self) -> None:
        self._series: dict[str, TimeSeries] = {}

    def ensure_series(self, name: str, capacity: int) -> TimeSeries:
        series = self._series.get(name)
        if series is None:
            series = TimeSeries(name, capacity)
            self._series[name] = series
        return series

    def record(self, name: str, value: float) -> None:
        self._get(name).record(value)

    def read(self, name: str) -> tuple[float, ...]:
        return self._get(name).read()

    def capacity(self, name: str) -> int:
        return self._get(name).capacity

    def names(self) -> list[str]:
        """Series names in creation order."""
        return list(self._series)

    def _get(self, name: str) -> TimeSeries:
        try:
            return self._series[name]
        except KeyError:
            raise UnknownSeries(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._series

    def __len__(self) -> int:
        return len(self._series)
