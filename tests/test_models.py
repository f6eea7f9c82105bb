"""Tests for hwdash data models."""

import dataclasses

import pytest

from hwdash.models import (
    UNKNOWN,
    CpuEntry,
    MemoryStats,
    MetricKind,
    ProcessEntry,
    Snapshot,
    SystemIdentity,
)


def test_process_entry_creation():
    """Test ProcessEntry dataclass creation."""
    entry = ProcessEntry(pid=123, name="test_process", read_bytes=4096, written_bytes=512)

    assert entry.pid == 123
    assert entry.name == "test_process"
    assert entry.read_bytes == 4096
    assert entry.written_bytes == 512


def test_process_entry_is_frozen():
    """Test that ProcessEntry is immutable (frozen)."""
    entry = ProcessEntry(pid=1, name="init")

    with pytest.raises(dataclasses.FrozenInstanceError):
        entry.pid = 999


def test_snapshot_uses_slots(snapshot):
    """Slots-based dataclasses don't have __dict__."""
    assert not hasattr(snapshot, "__dict__")
    assert not hasattr(snapshot.memory, "__dict__")


def test_snapshot_is_frozen(snapshot):
    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.cpus = ()


def test_cpu_usage_is_mean_of_cores(snapshot):
    assert snapshot.cpu_usage == pytest.approx(20.0)


def test_cpu_usage_without_cores():
    assert Snapshot(taken_at=0.0).cpu_usage == 0.0


def test_memory_fractions():
    memory = MemoryStats(total=1000, used=250, swap_total=200, swap_used=50)

    assert memory.used_fraction == pytest.approx(0.25)
    assert memory.swap_used_fraction == pytest.approx(0.25)


def test_memory_fractions_with_zero_totals():
    """No swap configured must not divide by zero."""
    memory = MemoryStats()

    assert memory.used_fraction == 0.0
    assert memory.swap_used_fraction == 0.0


def test_system_identity_defaults_to_unknown():
    identity = SystemIdentity()

    assert identity.host_name == UNKNOWN
    assert identity.os_name == UNKNOWN
    assert identity.os_version == UNKNOWN
    assert identity.kernel_version == UNKNOWN


def test_empty_snapshot_marks_everything_unavailable():
    empty = Snapshot.empty(taken_at=5.0)

    assert empty.taken_at == 5.0
    assert empty.cpus == ()
    assert empty.processes == ()
    for kind in MetricKind:
        assert not empty.is_available(kind)


def test_availability_mapping():
    snapshot = Snapshot(
        taken_at=0.0,
        cpus=(CpuEntry(brand="x", name="cpu0", usage=1.0),),
        unavailable=frozenset({MetricKind.GPU}),
    )

    availability = snapshot.availability
    assert availability[MetricKind.GPU] is False
    assert availability[MetricKind.CPU] is True
    assert set(availability) == set(MetricKind)
