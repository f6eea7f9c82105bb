"""Mapping from snapshots to named numeric series."""

from collections.abc import Callable, Iterator

from hwdash.models import MetricKind, Snapshot

CPU_TOTAL = "cpu.total"
MEMORY_USED = "memory.used"
SWAP_USED = "swap.used"

Point = tuple[str, float]
Extractor = Callable[[Snapshot, "Snapshot | None"], Iterator[Point]]


def cpu_core_series(index: int) -> str:
    return f"cpu.core.{index}"


def gpu_usage_series(index: int) -> str:
    return f"gpu.{index}.usage"


def network_series(interface: str, direction: str) -> str:
    return f"net.{interface}.{direction}"


def _cpu_points(snapshot: Snapshot, previous: Snapshot | None) -> Iterator[Point]:
    if not snapshot.cpus:
        return
    yield CPU_TOTAL, snapshot.cpu_usage
    for index, cpu in enumerate(snapshot.cpus):
        yield cpu_core_series(index), cpu.usage


def _gpu_points(snapshot: Snapshot, previous: Snapshot | None) -> Iterator[Point]:
    for index, gpu in enumerate(snapshot.gpus):
        if gpu.utilization is not None:
            yield gpu_usage_series(index), gpu.utilization


def _memory_points(snapshot: Snapshot, previous: Snapshot | None) -> Iterator[Point]:
    memory = snapshot.memory
    yield MEMORY_USED, memory.used_fraction * 100.0
    if memory.swap_total:
        yield SWAP_USED, memory.swap_used_fraction * 100.0


def _network_points(snapshot: Snapshot, previous: Snapshot | None) -> Iterator[Point]:
    """
    Throughput in bytes/s from the counter delta since the previous snapshot.

    No throughput is produced without a previous snapshot that has
    networking available.
    """
    if previous is None or not previous.is_available(MetricKind.NETWORK):
        return
    interval = snapshot.taken_at - previous.taken_at
    if interval <= 0:
        return
    before = {net.name: net for net in previous.networks}
    for net in snapshot.networks:
        old = before.get(net.name)
        if old is None:
            continue
        received = net.received - old.received
        transmitted = net.transmitted - old.transmitted
        # Counters reset (interface re-created, wrap-around)
        if received < 0 or transmitted < 0:
            continue
        yield network_series(net.name, "rx"), received / interval
        yield network_series(net.name, "tx"), transmitted / interval


EXTRACTORS: dict[MetricKind, Extractor] = {
    MetricKind.CPU: _cpu_points,
    MetricKind.GPU: _gpu_points,
    MetricKind.MEMORY: _memory_points,
    MetricKind.NETWORK: _network_points,
}


def extract_points(snapshot: Snapshot, previous: Snapshot | None = None) -> list[Point]:
    """
    Return every ``(series name, value)`` pair carried by ``snapshot``.

    Categories marked unavailable contribute nothing, so a missing GPU
    leaves the GPU series untouched instead of recording zeros.
    """
    points: list[Point] = []
    for kind, extractor in EXTRACTORS.items():
        if snapshot.is_available(kind):
            points.extend(extractor(snapshot, previous))
    return points
