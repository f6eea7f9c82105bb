"""Startup configuration for hwdash."""

from collections.abc import Mapping
from dataclasses import dataclass, field

from hwdash.errors import ConfigError


@dataclass(slots=True, frozen=True)
class DashboardConfig:
    """
    Static settings supplied when the dashboard starts.

    Args:
        refresh_interval: Seconds between two metric samples.
        splash_duration: Seconds the splash screen stays up.
        history_capacity: Samples kept per series unless overridden.
        series_capacities: Per-series overrides, keyed by an exact series
            name or a dotted prefix such as ``"cpu.core"``.
        frame_interval: Seconds between two scheduling ticks of the UI.
        process_limit: Keep at most this many processes per snapshot.
    """

    refresh_interval: float = 1.0
    splash_duration: float = 2.0
    history_capacity: int = 60
    series_capacities: Mapping[str, int] = field(default_factory=dict)
    frame_interval: float = 0.1
    process_limit: int | None = None

    def __post_init__(self) -> None:
        if not self.refresh_interval > 0:
            raise ConfigError(f"refresh interval must be > 0, got {self.refresh_interval}")
        if not self.splash_duration >= 0:
            raise ConfigError(f"splash duration must be >= 0, got {self.splash_duration}")
        if not self.frame_interval > 0:
            raise ConfigError(f"frame interval must be > 0, got {self.frame_interval}")
        _check_capacity("history capacity", self.history_capacity)
        for name, capacity in self.series_capacities.items():
            _check_capacity(f"capacity of {name!r}", capacity)
        if self.process_limit is not None and self.process_limit < 0:
            raise ConfigError(f"process limit must be >= 0, got {self.process_limit}")

    def capacity_for(self, series_name: str) -> int:
        """Return the capacity of a series: exact name, longest prefix, default."""
        if series_name in self.series_capacities:
            return self.series_capacities[series_name]
        parts = series_name.split(".")
        for end in range(len(parts) - 1, 0, -1):
            prefix = ".".join(parts[:end])
            if prefix in self.series_capacities:
                return self.series_capacities[prefix]
        return self.history_capacity


def _check_capacity(label: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"{label} must be a positive integer, got {value!r}")


def parse_capacity(text: str) -> tuple[str, int]:
    """Parse a ``NAME=N`` command line override."""
    name, sep, value = text.partition("=")
    name = name.strip()
    if not sep or not name:
        raise ConfigError(f"expected NAME=N, got {text!r}")
    try:
        capacity = int(value)
    except ValueError:
        raise ConfigError(f"capacity for {name!r} is not an integer: {value!r}") from None
    _check_capacity(f"capacity of {name!r}", capacity)
    return name, capacity
