"""Data models for hwdash."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum

UNKNOWN = "unknown"


class MetricKind(Enum):
    """Hardware category a snapshot is made of."""

    CPU = "cpu"
    GPU = "gpu"
    MEMORY = "memory"
    DISK = "disk"
    NETWORK = "network"
    SYSTEM = "system"
    SENSORS = "sensors"
    PROCESSES = "processes"


class ScreenState(Enum):
    """Screens the dashboard can show."""

    SPLASH = "splash"
    DETAILS = "details"
    GRAPHS = "graphs"
    SETTINGS = "settings"


@dataclass(slots=True, frozen=True)
class CpuEntry:
    """One logical core."""

    brand: str
    name: str
    usage: float  # 0.0 - 100.0


@dataclass(slots=True, frozen=True)
class GpuEntry:
    brand: str
    name: str
    utilization: float | None = None


@dataclass(slots=True, frozen=True)
class MemoryStats:
    """Memory and swap counters, all in bytes."""

    total: int = 0
    used: int = 0
    swap_total: int = 0
    swap_used: int = 0

    @property
    def used_fraction(self) -> float:
        return self.used / self.total if self.total else 0.0

    @property
    def swap_used_fraction(self) -> float:
        return self.swap_used / self.swap_total if self.swap_total else 0.0


@dataclass(slots=True, frozen=True)
class DiskEntry:
    name: str
    mount_point: str
    file_system: str
    total: int
    available: int
    removable: bool = False


@dataclass(slots=True, frozen=True)
class NetworkEntry:
    """Cumulative byte counters for one interface."""

    name: str
    received: int
    transmitted: int


@dataclass(slots=True, frozen=True)
class SystemIdentity:
    host_name: str = UNKNOWN
    os_name: str = UNKNOWN
    os_version: str = UNKNOWN
    kernel_version: str = UNKNOWN


@dataclass(slots=True, frozen=True)
class ComponentReading:
    """A sensor reading: temperature in Celsius or fan speed in RPM."""

    label: str
    value: float
    critical: float | None = None
    kind: str = "temperature"  # 'temperature' or 'fan'


@dataclass(slots=True, frozen=True)
class ProcessEntry:
    """Immutable snapshot of a process and its disk I/O counters."""

    pid: int
    name: str
    read_bytes: int = 0
    written_bytes: int = 0


@dataclass(slots=True, frozen=True)
class Snapshot:
    """
    Immutable capture of every tracked hardware fact at one instant.

    Sequences are tuples so a published snapshot can be shared with any
    number of readers without copying.
    """

    taken_at: float
    cpus: tuple[CpuEntry, ...] = ()
    gpus: tuple[GpuEntry, ...] = ()
    memory: MemoryStats = field(default_factory=MemoryStats)
    disks: tuple[DiskEntry, ...] = ()
    networks: tuple[NetworkEntry, ...] = ()
    system: SystemIdentity = field(default_factory=SystemIdentity)
    components: tuple[ComponentReading, ...] = ()
    processes: tuple[ProcessEntry, ...] = ()
    unavailable: frozenset[MetricKind] = frozenset()

    @classmethod
    def empty(cls, taken_at: float | None = None) -> Snapshot:
        """Snapshot with every category empty and marked unavailable."""
        return cls(
            taken_at=time.monotonic() if taken_at is None else taken_at,
            unavailable=frozenset(MetricKind),
        )

    @property
    def cpu_usage(self) -> float:
        """Aggregate CPU usage: mean of the per-core usage."""
        if not self.cpus:
            return 0.0
        return sum(cpu.usage for cpu in self.cpus) / len(self.cpus)

    def is_available(self, kind: MetricKind) -> bool:
        return kind not in self.unavailable

    @property
    def availability(self) -> dict[MetricKind, bool]:
        return {kind: kind not in self.unavailable for kind in MetricKind}
