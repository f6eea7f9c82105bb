"""Shared fixtures for hwdash tests."""

import psutil
import pytest

from hwdash.models import (
    CpuEntry,
    GpuEntry,
    MemoryStats,
    MetricKind,
    NetworkEntry,
    ProcessEntry,
    Snapshot,
    SystemIdentity,
)


def make_snapshot(
    taken_at: float = 0.0,
    cpu_usages: tuple[float, ...] = (10.0, 30.0),
    networks: tuple[NetworkEntry, ...] = (),
    gpus: tuple[GpuEntry, ...] = (),
    unavailable: frozenset[MetricKind] = frozenset(),
) -> Snapshot:
    """Build a populated snapshot with predictable values."""
    return Snapshot(
        taken_at=taken_at,
        cpus=tuple(
            CpuEntry(brand="Test CPU", name=f"cpu{i}", usage=usage)
            for i, usage in enumerate(cpu_usages)
        ),
        gpus=gpus,
        memory=MemoryStats(total=1000, used=250, swap_total=200, swap_used=50),
        networks=networks,
        system=SystemIdentity(host_name="testhost", os_name="TestOS"),
        processes=(ProcessEntry(pid=1, name="init", read_bytes=10, written_bytes=20),),
        unavailable=unavailable,
    )


@pytest.fixture
def snapshot() -> Snapshot:
    return make_snapshot()


PSUTIL_CALLS = (
    "cpu_percent",
    "virtual_memory",
    "swap_memory",
    "disk_partitions",
    "net_io_counters",
    "sensors_temperatures",
    "sensors_fans",
    "process_iter",
)


def break_psutil(monkeypatch) -> None:
    """Make every psutil query used by the source fail, as if /proc were gone."""

    def fail(*args, **kwargs):
        raise OSError("/proc is not mounted")

    for name in PSUTIL_CALLS:
        monkeypatch.setattr(psutil, name, fail, raising=False)
