"""Helpers for probing host hardware and resource usage."""
from __future__ import annotations

import logging
import platform
import re
import subprocess
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import psutil

SYS_BLOCK = Path("/sys/block")
PROC_CPUINFO = Path("/proc/cpuinfo")

_VIRTUAL_BLOCK_PREFIXES = ("loop", "ram", "zram", "dm-", "md", "sr", "fd", "nbd")
_CPU_VENDORS = {
    "GenuineIntel": "Intel",
    "AuthenticAMD": "AMD",
    "CentaurHauls": "VIA",
    "HygonGenuine": "Hygon",
}
_VRAM_RE = re.compile(r"VRAM[^:]*:\s*([\d.]+)\s*(GB|MB)", re.I)


def _run(args: List[str], timeout: float = 5.0) -> Optional[str]:
    """Run an external tool and return its stdout, or ``None`` if it is unavailable."""
    try:
        result = subprocess.run(args, capture_output=True, text=True, check=True, timeout=timeout)
    except (OSError, subprocess.SubprocessError) as exc:
        logging.debug("Probe command %s unavailable: %s", args[0], exc)
        return None
    return result.stdout


def _read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8", errors="ignore").strip()
    except OSError:
        return None


def _cpu_identity() -> Dict[str, str]:
    vendor = ""
    model = ""
    if sys.platform.startswith("linux"):
        cpuinfo = _read_text(PROC_CPUINFO) or ""
        for line in cpuinfo.splitlines():
            key, _, value = line.partition(":")
            key = key.strip()
            if key == "vendor_id" and not vendor:
                vendor = value.strip()
            elif key in ("model name", "Hardware") and not model:
                model = value.strip()
    elif sys.platform == "darwin":
        model = (_run(["/usr/sbin/sysctl", "-n", "machdep.cpu.brand_string"]) or "").strip()
        vendor = (_run(["/usr/sbin/sysctl", "-n", "machdep.cpu.vendor"]) or "").strip()
        if not vendor and model.startswith("Apple"):
            vendor = "Apple"

    model = model or platform.processor()
    manufacturer = _CPU_VENDORS.get(vendor, vendor)
    if not manufacturer and model:
        manufacturer = model.split()[0]
    return {"manufacturer": manufacturer, "brand": model}


def _distro_name() -> str:
    if sys.platform.startswith("linux"):
        try:
            release = platform.freedesktop_os_release()
        except OSError:
            return "Linux"
        return release.get("PRETTY_NAME") or release.get("NAME", "Linux")
    if sys.platform == "darwin":
        return f"macOS {platform.mac_ver()[0]}".strip()
    return f"{platform.system()} {platform.release()}".strip()


def _linux_disk_type(name: str) -> str:
    if name.startswith("nvme"):
        return "NVMe"
    rotational = _read_text(SYS_BLOCK / name / "queue" / "rotational")
    if rotational == "1":
        return "HD"
    if rotational == "0":
        return "SSD"
    return ""


def _linux_disk_layout() -> List[Dict[str, Any]]:
    disks = []
    for device in sorted(SYS_BLOCK.iterdir()):
        name = device.name
        if name.startswith(_VIRTUAL_BLOCK_PREFIXES):
            continue
        sectors = _read_text(device / "size")
        if not sectors or not sectors.isdigit() or int(sectors) == 0:
            continue
        model = _read_text(device / "device" / "model")
        disks.append(
            {
                # /sys/block sizes are always expressed in 512-byte sectors.
                "name": model or name,
                "size": int(sectors) * 512,
                "type": _linux_disk_type(name),
            }
        )
    return disks


def _partition_disk_layout() -> List[Dict[str, Any]]:
    disks = []
    for partition in psutil.disk_partitions(all=False):
        try:
            usage = psutil.disk_usage(partition.mountpoint)
        except OSError as exc:
            logging.debug("Skipping %s: %s", partition.mountpoint, exc)
            continue
        disks.append({"name": partition.device, "size": usage.total, "type": partition.fstype})
    return disks


def _nvidia_controllers() -> List[Dict[str, Any]]:
    output = _run(
        [
            "nvidia-smi",
            "--query-gpu=name,memory.total,memory.used,memory.free",
            "--format=csv,noheader,nounits",
        ]
    )
    controllers = []
    for line in (output or "").splitlines():
        fields = [field.strip() for field in line.split(",")]
        if len(fields) != 4:
            continue
        name, total, used, free = fields
        controllers.append(
            {
                "model": name,
                "vram": _to_int(total),
                "memoryUsed": _to_int(used),
                "memoryFree": _to_int(free),
            }
        )
    return controllers


def _macos_controllers() -> List[Dict[str, Any]]:
    output = _run(["system_profiler", "SPDisplaysDataType"], timeout=10.0)
    controllers: List[Dict[str, Any]] = []
    for line in (output or "").splitlines():
        if "Chipset Model:" in line:
            controllers.append(
                {
                    "model": line.split(":", 1)[1].strip(),
                    "vram": None,
                    "memoryUsed": None,
                    "memoryFree": None,
                }
            )
            continue
        match = _VRAM_RE.search(line)
        if match and controllers:
            amount = float(match.group(1))
            controllers[-1]["vram"] = int(amount * 1024) if match.group(2).upper() == "GB" else int(amount)
    return controllers


def _to_int(value: str) -> Optional[int]:
    try:
        return int(float(value))
    except ValueError:
        return None


class SystemProbe:
    """Query the host for hardware metadata and live utilization.

    Every method returns plain dicts (or lists of dicts) so callers can be
    tested against a fake probe with the same shape.
    """

    def __init__(self, cpu_sample_seconds: float = 0.1) -> None:
        self.cpu_sample_seconds = cpu_sample_seconds

    def cpu(self) -> Dict[str, Any]:
        freq = psutil.cpu_freq()
        mhz = 0.0
        if freq:
            mhz = freq.max or freq.current
        return {
            **_cpu_identity(),
            "cores": psutil.cpu_count(logical=True) or 0,
            "speed": round(mhz / 1000, 2),
        }

    def mem(self) -> Dict[str, Any]:
        memory = psutil.virtual_memory()
        return {"total": memory.total, "free": memory.free}

    def os_info(self) -> Dict[str, Any]:
        return {
            "platform": sys.platform,
            "distro": _distro_name(),
            "kernel": platform.release(),
        }

    def disk_layout(self) -> List[Dict[str, Any]]:
        if sys.platform.startswith("linux") and SYS_BLOCK.is_dir():
            return _linux_disk_layout()
        return _partition_disk_layout()

    def graphics(self) -> Dict[str, Any]:
        controllers = _nvidia_controllers()
        if not controllers and sys.platform == "darwin":
            controllers = _macos_controllers()
        return {"controllers": controllers}

    def current_load(self) -> Dict[str, Any]:
        return {"currentLoad": psutil.cpu_percent(interval=self.cpu_sample_seconds)}

    def fs_size(self) -> List[Dict[str, Any]]:
        filesystems = []
        for partition in psutil.disk_partitions(all=False):
            try:
                usage = psutil.disk_usage(partition.mountpoint)
            except OSError as exc:
                logging.debug("Skipping %s: %s", partition.mountpoint, exc)
                continue
            filesystems.append(
                {
                    "fs": partition.device,
                    "size": usage.total,
                    "used": usage.used,
                    "use": usage.percent,
                }
            )
        return filesystems
