"""Exceptions raised by hwdash."""

from hwdash.models import MetricKind


class HwdashError(Exception):
    """Base class for hwdash errors."""


class MetricUnavailable(HwdashError):
    """One metric category could not be populated."""

    def __init__(self, kind: MetricKind, reason: str = "") -> None:
        self.kind = kind
        self.reason = reason
        message = f"{kind.value} metrics unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnknownSeries(HwdashError, KeyError):
    """A time series was used before it was created."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"unknown series {self.name!r}"


class AdapterUnreachable(HwdashError):
    """The metric source could not produce a snapshot at all."""


class ConfigError(HwdashError, ValueError):
    """Invalid dashboard configuration."""
