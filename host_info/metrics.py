"""Shape raw probe output into the /specs and /usage response records."""
from __future__ import annotations

from typing import Any, Dict, Optional

from .history import RollingHistory
from .probe import SystemProbe

GIB = 1024 ** 3
NOT_AVAILABLE = "N/A"


def bytes_to_gb(value: float) -> str:
    """Render a byte count as gigabytes with two fraction digits, e.g. ``"8.00 GB"``."""
    return f"{value / GIB:.2f} GB"


def _plain_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _vram(value: Optional[float]) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{_plain_number(value)} MB"


def _megabytes(value: Optional[float]) -> str:
    # Zero is treated like a missing reading.
    if not value:
        return NOT_AVAILABLE
    return f"{_plain_number(value)} MB"


def fetch_specs(probe: SystemProbe) -> Dict[str, Any]:
    """Gather CPU, memory, OS, disk, and GPU metadata from the host."""
    cpu = probe.cpu()
    memory = probe.mem()
    os_info = probe.os_info()
    disks = probe.disk_layout()
    graphics = probe.graphics()

    return {
        "cpu": {
            "manufacturer": cpu["manufacturer"],
            "brand": cpu["brand"],
            "cores": cpu["cores"],
            "speed": f"{_plain_number(cpu['speed'])} GHz",
        },
        "memory": {
            "total": bytes_to_gb(memory["total"]),
        },
        "os": {
            "platform": os_info["platform"],
            "distro": os_info["distro"],
            "kernel": os_info["kernel"],
        },
        "disks": [
            {
                "name": disk["name"],
                "size": bytes_to_gb(disk["size"]),
                "type": disk["type"],
            }
            for disk in disks
        ],
        "gpu": [
            {
                "model": controller["model"],
                "vram": _vram(controller.get("vram")),
                "memoryUsed": _megabytes(controller.get("memoryUsed")),
                "memoryFree": _megabytes(controller.get("memoryFree")),
            }
            for controller in graphics["controllers"]
        ],
    }


def fetch_usage(probe: SystemProbe, history: RollingHistory[str]) -> Dict[str, Any]:
    """Sample current load, memory and filesystem usage, and record the load in ``history``."""
    current_load = probe.current_load()
    memory = probe.mem()
    filesystems = probe.fs_size()

    load = f"{current_load['currentLoad']:.2f}"
    load_history = history.record(load)

    used = memory["total"] - memory["free"]
    # A probe reporting no memory yields 0 % rather than a division error.
    usage_percent = used / memory["total"] * 100 if memory["total"] else 0.0
    return {
        "cpu": {
            "load": f"{load} %",
            "history": load_history,
        },
        "memory": {
            "total": bytes_to_gb(memory["total"]),
            "used": bytes_to_gb(used),
            "usage": f"{usage_percent:.2f} %",
        },
        "storage": [
            {
                "filesystem": fs["fs"],
                "size": bytes_to_gb(fs["size"]),
                "used": bytes_to_gb(fs["used"]),
                "usage": f"{_plain_number(fs['use'])} %",
            }
            for fs in filesystems
        ],
    }
