from __future__ import annotations

import pytest

from pve_discovery import discovery
from pve_discovery.adapters.http.aiohttp_prober import AiohttpProber
from pve_discovery.adapters.net.tcp_dialer import AsyncioTCPDialer
from pve_discovery.adapters.system.psutil_interfaces import PsutilInterfaceSource
from pve_discovery.config import DiscoveryConfig
from pve_discovery.domain.discovery_service import DiscoveryService, Instance, Result
from pve_discovery.domain.subnets import NetworkInterface
from tests.fakes import FakeDialer, FakeInterfaceSource, FakeProber


@pytest.fixture
def fake_build(monkeypatch):
    prober = FakeProber({"192.168.1.10": 200})

    def build(config=None):
        svc = DiscoveryService(
            FakeDialer(open_hosts={"192.168.1.10"}),
            prober,
            FakeInterfaceSource([NetworkInterface("eth0", True, False, ["192.168.1.5"])]),
            config=config,
        )
        return svc, prober

    monkeypatch.setattr(discovery, "build_service", build)
    return prober


def test_build_service_wires_production_adapters():
    cfg = DiscoveryConfig(workers=10)
    svc, prober = discovery.build_service(cfg)
    assert isinstance(svc.dialer, AsyncioTCPDialer)
    assert isinstance(svc.interfaces, PsutilInterfaceSource)
    assert isinstance(prober, AiohttpProber) and svc.prober is prober
    assert svc.config is cfg


@pytest.mark.asyncio
async def test_scan_closes_prober(fake_build):
    res = await discovery.scan(["192.168.1.0/24"])
    assert res.instances == [Instance("192.168.1.10", "https://192.168.1.10:8006")]
    assert fake_build.closed


def test_run_scan_blocking_auto_detect(fake_build):
    res = discovery.run_scan()
    assert res == Result(
        instances=[Instance("192.168.1.10", "https://192.168.1.10:8006")],
        subnets=["192.168.1.0/24"],
    )


def test_local_subnets(fake_build):
    assert discovery.local_subnets() == ["192.168.1.0/24"]


def test_reexports():
    assert discovery.normalize_subnet("10.0.0") == "10.0.0.0/24"
    assert discovery.parse_subnet_list("10.0.0, 10.0.1.3") == ["10.0.0.0/24", "10.0.1.0/24"]
    assert len(discovery.expand_subnet("10.0.0.0/24")) == 254
