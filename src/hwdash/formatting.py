"""Text rendering of snapshot sections, one formatter per metric kind."""

from collections.abc import Callable

from hwdash.models import MetricKind, Snapshot

UNAVAILABLE = "unavailable"

SECTION_TITLES: dict[MetricKind, str] = {
    MetricKind.CPU: "CPU",
    MetricKind.GPU: "GPU",
    MetricKind.MEMORY: "Memory",
    MetricKind.DISK: "Disks",
    MetricKind.NETWORK: "Network",
    MetricKind.SYSTEM: "System",
    MetricKind.SENSORS: "Sensors",
    MetricKind.PROCESSES: "Processes",
}


def format_bytes(size: float) -> str:
    """Format bytes as human-readable string."""
    for unit in ["B", "K", "M", "G", "T"]:
        if size < 1024:
            return f"{size:5.1f}{unit}" if unit != "B" else f"{int(size):5d}{unit}"
        size = size / 1024
    return f"{size:.1f}P"


def _cpu_lines(snapshot: Snapshot) -> list[str]:
    return [f"{cpu.name:<6} {cpu.brand}  {cpu.usage:5.1f}%" for cpu in snapshot.cpus]


def _gpu_lines(snapshot: Snapshot) -> list[str]:
    lines = []
    for gpu in snapshot.gpus:
        line = f"{gpu.brand}: {gpu.name}"
        if gpu.utilization is not None:
            line += f"  {gpu.utilization:5.1f}%"
        lines.append(line)
    return lines


def _memory_lines(snapshot: Snapshot) -> list[str]:
    memory = snapshot.memory
    return [
        f"Mem  {format_bytes(memory.used)}/{format_bytes(memory.total)}"
        f"  {memory.used_fraction * 100:5.1f}%",
        f"Swap {format_bytes(memory.swap_used)}/{format_bytes(memory.swap_total)}"
        f"  {memory.swap_used_fraction * 100:5.1f}%",
    ]


def _disk_lines(snapshot: Snapshot) -> list[str]:
    return [
        f"{disk.name} on {disk.mount_point} ({disk.file_system})"
        f"  {format_bytes(disk.available)} free of {format_bytes(disk.total)}"
        + ("  [removable]" if disk.removable else "")
        for disk in snapshot.disks
    ]


def _network_lines(snapshot: Snapshot) -> list[str]:
    return [
        f"{net.name}: {format_bytes(net.received)} in / {format_bytes(net.transmitted)} out"
        for net in snapshot.networks
    ]


def _system_lines(snapshot: Snapshot) -> list[str]:
    system = snapshot.system
    return [
        f"Host name:      {system.host_name}",
        f"OS:             {system.os_name}",
        f"OS version:     {system.os_version}",
        f"Kernel version: {system.kernel_version}",
    ]


def _sensor_lines(snapshot: Snapshot) -> list[str]:
    lines = []
    for reading in snapshot.components:
        if reading.kind == "fan":
            lines.append(f"{reading.label}: {reading.value:.0f} RPM")
            continue
        line = f"{reading.label}: {reading.value:.1f}°C"
        if reading.critical is not None:
            line += f" (critical {reading.critical:.1f}°C)"
        lines.append(line)
    return lines


def _process_lines(snapshot: Snapshot) -> list[str]:
    return [
        f"[{proc.pid}] {proc.name}  read {format_bytes(proc.read_bytes)}"
        f" written {format_bytes(proc.written_bytes)}"
        for proc in snapshot.processes
    ]


FORMATTERS: dict[MetricKind, Callable[[Snapshot], list[str]]] = {
    MetricKind.CPU: _cpu_lines,
    MetricKind.GPU: _gpu_lines,
    MetricKind.MEMORY: _memory_lines,
    MetricKind.DISK: _disk_lines,
    MetricKind.NETWORK: _network_lines,
    MetricKind.SYSTEM: _system_lines,
    MetricKind.SENSORS: _sensor_lines,
    MetricKind.PROCESSES: _process_lines,
}


def format_section(kind: MetricKind, snapshot: Snapshot) -> list[str]:
    """Lines describing one category; an unavailable one renders as a marker only."""
    if not snapshot.is_available(kind):
        return [UNAVAILABLE]
    return FORMATTERS[kind](snapshot)
