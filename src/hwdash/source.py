"""Metric source adapters: best-effort hardware snapshots."""

import logging
import platform
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import cache
from typing import Any, Protocol

import psutil
import pynvml

from hwdash.errors import AdapterUnreachable, MetricUnavailable
from hwdash.models import (
    UNKNOWN,
    ComponentReading,
    CpuEntry,
    DiskEntry,
    GpuEntry,
    MemoryStats,
    MetricKind,
    NetworkEntry,
    ProcessEntry,
    Snapshot,
    SystemIdentity,
)

logger = logging.getLogger(__name__)

# io_counters is missing on some platforms (macOS)
PROCESS_ATTRS = ["pid", "name"] + (["io_counters"] if hasattr(psutil.Process, "io_counters") else [])

# Snapshot field filled by each category, and its value when unavailable.
SNAPSHOT_FIELDS: dict[MetricKind, str] = {
    MetricKind.CPU: "cpus",
    MetricKind.GPU: "gpus",
    MetricKind.MEMORY: "memory",
    MetricKind.DISK: "disks",
    MetricKind.NETWORK: "networks",
    MetricKind.SYSTEM: "system",
    MetricKind.SENSORS: "components",
    MetricKind.PROCESSES: "processes",
}

# Categories read through psutil; when all of them fail psutil itself is gone.
PSUTIL_KINDS = frozenset(
    {
        MetricKind.CPU,
        MetricKind.MEMORY,
        MetricKind.DISK,
        MetricKind.NETWORK,
        MetricKind.SENSORS,
        MetricKind.PROCESSES,
    }
)

EMPTY_VALUES: dict[MetricKind, Callable[[], Any]] = {
    MetricKind.CPU: tuple,
    MetricKind.GPU: tuple,
    MetricKind.MEMORY: MemoryStats,
    MetricKind.DISK: tuple,
    MetricKind.NETWORK: tuple,
    MetricKind.SYSTEM: SystemIdentity,
    MetricKind.SENSORS: tuple,
    MetricKind.PROCESSES: tuple,
}


@dataclass(slots=True, frozen=True)
class Sample:
    """Result of one ``sample()`` call."""

    snapshot: Snapshot
    errors: dict[MetricKind, MetricUnavailable] = field(default_factory=dict)

    @property
    def availability(self) -> dict[MetricKind, bool]:
        return self.snapshot.availability


class MetricSource(Protocol):
    def sample(self) -> Sample: ...


def build_snapshot(
    values: dict[MetricKind, Any],
    errors: dict[MetricKind, MetricUnavailable],
    taken_at: float,
) -> Snapshot:
    """Assemble a Snapshot, substituting empty values for failed categories."""
    fields = {}
    for kind, name in SNAPSHOT_FIELDS.items():
        if kind in errors or kind not in values:
            fields[name] = EMPTY_VALUES[kind]()
        else:
            fields[name] = values[kind]
    unavailable = frozenset(errors) | (frozenset(MetricKind) - frozenset(values))
    return Snapshot(taken_at=taken_at, unavailable=unavailable, **fields)


class PsutilSource:
    """
    Metric source backed by psutil, with GPUs read through NVML.

    Every category has its own collector; an exception in one of them marks
    only that category unavailable. ``sample()`` fails as a whole when none
    of the psutil-backed categories could be collected.
    """

    def __init__(
        self,
        process_limit: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._process_limit = process_limit
        self._clock = clock
        self._nvml_state: bool | None = None  # None: not tried yet
        self._reported: set[MetricKind] = set()
        self._collectors: dict[MetricKind, Callable[[], Any]] = {
            MetricKind.CPU: self._collect_cpus,
            MetricKind.GPU: self._collect_gpus,
            MetricKind.MEMORY: self._collect_memory,
            MetricKind.DISK: self._collect_disks,
            MetricKind.NETWORK: self._collect_networks,
            MetricKind.SYSTEM: self._collect_system,
            MetricKind.SENSORS: self._collect_components,
            MetricKind.PROCESSES: self._collect_processes,
        }
        # Initialize CPU percent (first call returns 0.0)
        psutil.cpu_percent(percpu=True)

    def sample(self) -> Sample:
        values: dict[MetricKind, Any] = {}
        errors: dict[MetricKind, MetricUnavailable] = {}

        for kind, collect in self._collectors.items():
            try:
                values[kind] = collect()
            except MetricUnavailable as exc:
                errors[kind] = exc
            except Exception as exc:
                errors[kind] = MetricUnavailable(kind, str(exc) or type(exc).__name__)
            else:
                self._reported.discard(kind)
                continue
            self._report(errors[kind])

        if PSUTIL_KINDS.issubset(errors):
            raise AdapterUnreachable("no psutil-backed metric category could be collected")

        snapshot = build_snapshot(values, errors, self._clock())
        return Sample(snapshot=snapshot, errors=errors)

    def close(self) -> None:
        """Release NVML if it was initialised."""
        if self._nvml_state:
            try:
                pynvml.nvmlShutdown()
            except pynvml.NVMLError as exc:
                logger.debug("NVML shutdown failed: %s", exc)
        self._nvml_state = None

    def _report(self, error: MetricUnavailable) -> None:
        if error.kind in self._reported:
            logger.debug("%s", error)
        else:
            logger.warning("%s", error)
            self._reported.add(error.kind)

    def _collect_cpus(self) -> tuple[CpuEntry, ...]:
        # Non-blocking, uses the previous call's data
        usages = psutil.cpu_percent(percpu=True)
        brand = _cpu_brand()
        return tuple(
            CpuEntry(brand=brand, name=f"cpu{index}", usage=float(usage))
            for index, usage in enumerate(usages)
        )

    def _collect_gpus(self) -> tuple[GpuEntry, ...]:
        if self._nvml_state is None:
            try:
                pynvml.nvmlInit()
                self._nvml_state = True
            except pynvml.NVMLError as exc:
                self._nvml_state = False
                raise MetricUnavailable(MetricKind.GPU, f"NVML init failed: {exc}") from exc
        if not self._nvml_state:
            raise MetricUnavailable(MetricKind.GPU, "NVML is not available")

        gpus = []
        for index in range(pynvml.nvmlDeviceGetCount()):
            handle = pynvml.nvmlDeviceGetHandleByIndex(index)
            try:
                utilization = float(pynvml.nvmlDeviceGetUtilizationRates(handle).gpu)
            except pynvml.NVMLError:
                utilization = None
            gpus.append(
                GpuEntry(
                    brand=_nvml_brand(handle),
                    name=_text(pynvml.nvmlDeviceGetName(handle)),
                    utilization=utilization,
                )
            )
        return tuple(gpus)

    def _collect_memory(self) -> MemoryStats:
        mem = psutil.virtual_memory()
        swap = psutil.swap_memory()
        return MemoryStats(
            total=mem.total,
            used=mem.used,
            swap_total=swap.total,
            swap_used=swap.used,
        )

    def _collect_disks(self) -> tuple[DiskEntry, ...]:
        disks = []
        for part in psutil.disk_partitions(all=False):
            try:
                usage = psutil.disk_usage(part.mountpoint)
            except OSError:
                # Unmounted media, permission denied, etc.
                continue
            disks.append(
                DiskEntry(
                    name=part.device,
                    mount_point=part.mountpoint,
                    file_system=part.fstype,
                    total=usage.total,
                    available=usage.free,
                    removable="removable" in part.opts.split(","),
                )
            )
        return tuple(disks)

    def _collect_networks(self) -> tuple[NetworkEntry, ...]:
        counters = psutil.net_io_counters(pernic=True)
        return tuple(
            NetworkEntry(name=name, received=io.bytes_recv, transmitted=io.bytes_sent)
            for name, io in sorted(counters.items())
        )

    def _collect_system(self) -> SystemIdentity:
        return SystemIdentity(
            host_name=platform.node() or UNKNOWN,
            os_name=_os_name(),
            os_version=platform.version() or UNKNOWN,
            kernel_version=platform.release() or UNKNOWN,
        )

    def _collect_components(self) -> tuple[ComponentReading, ...]:
        if not hasattr(psutil, "sensors_temperatures"):
            raise MetricUnavailable(MetricKind.SENSORS, "not supported on this platform")

        readings = []
        for chip, entries in psutil.sensors_temperatures().items():
            for index, entry in enumerate(entries):
                readings.append(
                    ComponentReading(
                        label=_sensor_label(chip, entry.label, index),
                        value=float(entry.current),
                        critical=entry.critical,
                    )
                )
        if hasattr(psutil, "sensors_fans"):
            for chip, entries in psutil.sensors_fans().items():
                for index, entry in enumerate(entries):
                    readings.append(
                        ComponentReading(
                            label=_sensor_label(chip, entry.label, index),
                            value=float(entry.current),
                            kind="fan",
                        )
                    )
        return tuple(readings)

    def _collect_processes(self) -> tuple[ProcessEntry, ...]:
        """
        Collect pid, name and disk I/O of every running process.

        Processes that die mid-poll, zombies and access-denied entries are
        skipped; unreadable I/O counters are reported as zero.
        """
        processes: list[ProcessEntry] = []

        for proc in psutil.process_iter(attrs=PROCESS_ATTRS):
            try:
                info = proc.info
                io = info.get("io_counters")
                processes.append(
                    ProcessEntry(
                        pid=info.get("pid", 0),
                        name=info.get("name") or "",
                        read_bytes=io.read_bytes if io else 0,
                        written_bytes=io.write_bytes if io else 0,
                    )
                )
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue

        if self._process_limit is not None:
            processes.sort(key=lambda p: p.read_bytes + p.written_bytes, reverse=True)
            del processes[self._process_limit:]
        return tuple(processes)


class StaticSource:
    """
    Source replaying fixed data, for tests and headless runs.

    ``snapshots`` is either one Snapshot returned on every call or a
    callable producing the next Snapshot (it may raise to simulate an
    unreachable adapter).
    """

    def __init__(self, snapshots: Snapshot | Callable[[], Snapshot]) -> None:
        self._snapshots = snapshots
        self.calls = 0

    def sample(self) -> Sample:
        self.calls += 1
        if isinstance(self._snapshots, Snapshot):
            snapshot = self._snapshots
        else:
            snapshot = self._snapshots()
        errors = {kind: MetricUnavailable(kind) for kind in snapshot.unavailable}
        return Sample(snapshot=snapshot, errors=errors)


@cache
def _cpu_brand() -> str:
    try:
        with open("/proc/cpuinfo", encoding="utf-8") as cpuinfo:
            for line in cpuinfo:
                if line.startswith("model name"):
                    return line.split(":", 1)[1].strip()
    except OSError:
        pass
    return platform.processor() or UNKNOWN


def _os_name() -> str:
    try:
        return platform.freedesktop_os_release()["NAME"]
    except (OSError, AttributeError, KeyError):
        return platform.system() or UNKNOWN


@cache
def _nvml_brand_names() -> dict[int, str]:
    return {
        getattr(pynvml, attr): attr.removeprefix("NVML_BRAND_").replace("_", " ").title()
        for attr in dir(pynvml)
        if attr.startswith("NVML_BRAND_") and attr != "NVML_BRAND_COUNT"
    }


def _nvml_brand(handle: Any) -> str:
    try:
        brand = pynvml.nvmlDeviceGetBrand(handle)
    except pynvml.NVMLError:
        return "NVIDIA"
    return _nvml_brand_names().get(brand, "NVIDIA")


def _text(value: str | bytes) -> str:
    # Older NVML bindings return bytes
    return value.decode("utf-8") if isinstance(value, bytes) else value


def _sensor_label(chip: str, label: str, index: int) -> str:
    return f"{chip} {label}" if label else f"{chip} #{index}"
