"""Shared test fixtures: a fake probe and an HTTPX client bound to a fresh app."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from host_info.api import create_app
from host_info.config import Settings

GIB = 1024 ** 3


class FakeProbe:
    """Stands in for SystemProbe with canned readings and call counters."""

    def __init__(self):
        self.load = 12.345
        self.total = 8 * GIB
        self.free = 2 * GIB
        self.fail = False
        self.calls = {"specs": 0, "usage": 0}

    def _check(self):
        if self.fail:
            raise RuntimeError("probe unavailable")

    def cpu(self):
        self._check()
        self.calls["specs"] += 1
        return {"manufacturer": "Intel", "brand": "Core i7-9750H", "cores": 12, "speed": 2.6}

    def mem(self):
        self._check()
        return {"total": self.total, "free": self.free}

    def os_info(self):
        return {"platform": "linux", "distro": "Ubuntu 24.04 LTS", "kernel": "6.8.0-45-generic"}

    def disk_layout(self):
        return [{"name": "Samsung SSD 970", "size": 512 * GIB, "type": "NVMe"}]

    def graphics(self):
        return {
            "controllers": [
                {"model": "GeForce RTX 2060", "vram": 6144, "memoryUsed": 512, "memoryFree": 5632},
                {"model": "UHD Graphics 630", "vram": 1024, "memoryUsed": None, "memoryFree": None},
            ]
        }

    def current_load(self):
        self._check()
        self.calls["usage"] += 1
        return {"currentLoad": self.load}

    def fs_size(self):
        return [{"fs": "/dev/nvme0n1p2", "size": 100 * GIB, "used": 25 * GIB, "use": 25.0}]


@pytest.fixture
def probe() -> FakeProbe:
    return FakeProbe()


@pytest.fixture
def app(probe):
    return create_app(settings=Settings(), probe=probe)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
