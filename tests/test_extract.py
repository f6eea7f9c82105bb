"""Tests for the snapshot to series mapping."""

import pytest
from conftest import make_snapshot

from hwdash.extract import CPU_TOTAL, MEMORY_USED, SWAP_USED, extract_points
from hwdash.models import GpuEntry, MetricKind, NetworkEntry


def test_cpu_and_memory_points():
    points = dict(extract_points(make_snapshot(cpu_usages=(10.0, 30.0))))

    assert points[CPU_TOTAL] == pytest.approx(20.0)
    assert points["cpu.core.0"] == 10.0
    assert points["cpu.core.1"] == 30.0
    assert points[MEMORY_USED] == pytest.approx(25.0)
    assert points[SWAP_USED] == pytest.approx(25.0)


def test_gpu_points_only_when_utilization_known():
    gpus = (
        GpuEntry(brand="GeForce", name="A", utilization=55.0),
        GpuEntry(brand="GeForce", name="B", utilization=None),
    )
    points = dict(extract_points(make_snapshot(gpus=gpus)))

    assert points["gpu.0.usage"] == 55.0
    assert "gpu.1.usage" not in points


def test_unavailable_category_contributes_nothing():
    snapshot = make_snapshot(unavailable=frozenset({MetricKind.CPU}))
    names = [name for name, _ in extract_points(snapshot)]

    assert not any(name.startswith("cpu.") for name in names)
    assert MEMORY_USED in names


def test_network_needs_a_previous_snapshot():
    snapshot = make_snapshot(networks=(NetworkEntry("eth0", 100, 50),))
    names = [name for name, _ in extract_points(snapshot)]

    assert not any(name.startswith("net.") for name in names)


def test_network_throughput_per_second():
    previous = make_snapshot(taken_at=10.0, networks=(NetworkEntry("eth0", 1000, 500),))
    current = make_snapshot(taken_at=12.0, networks=(NetworkEntry("eth0", 3000, 900),))

    points = dict(extract_points(current, previous))

    assert points["net.eth0.rx"] == pytest.approx(1000.0)
    assert points["net.eth0.tx"] == pytest.approx(200.0)


def test_network_counter_reset_is_skipped():
    previous = make_snapshot(taken_at=0.0, networks=(NetworkEntry("eth0", 5000, 5000),))
    current = make_snapshot(taken_at=1.0, networks=(NetworkEntry("eth0", 10, 10),))

    names = [name for name, _ in extract_points(current, previous)]

    assert "net.eth0.rx" not in names


def test_new_interface_has_no_throughput_yet():
    previous = make_snapshot(taken_at=0.0, networks=(NetworkEntry("eth0", 0, 0),))
    current = make_snapshot(
        taken_at=1.0,
        networks=(NetworkEntry("eth0", 10, 10), NetworkEntry("wlan0", 99, 99)),
    )

    names = [name for name, _ in extract_points(current, previous)]

    assert "net.eth0.rx" in names
    assert "net.wlan0.rx" not in names
