from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from pve_discovery.adapters.api import fastapi_app
from pve_discovery.config import DiscoveryConfig, settings
from pve_discovery.domain.discovery_service import DiscoveryService
from pve_discovery.domain.subnets import NetworkInterface
from tests.fakes import FakeDialer, FakeInterfaceSource, FakeProber

client = TestClient(fastapi_app.app)


@pytest.fixture
def fake_service(monkeypatch):
    prober = FakeProber({"192.168.1.10": 200})
    svc = DiscoveryService(
        FakeDialer(open_hosts={"192.168.1.10"}),
        prober,
        FakeInterfaceSource([NetworkInterface("eth0", True, False, ["192.168.1.77"])]),
        config=DiscoveryConfig(probe_timeout=0.05, verify_timeout=0.05),
    )
    monkeypatch.setattr(fastapi_app, "build_service", lambda: (svc, prober))
    return svc, prober


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_discover_explicit_subnet(fake_service):
    _, prober = fake_service
    r = client.post("/discover", json={"subnets": ["192.168.1.0/24"]})
    assert r.status_code == 200
    assert r.json() == {
        "instances": [{"ip": "192.168.1.10", "url": "https://192.168.1.10:8006"}],
        "subnets": ["192.168.1.0/24"],
    }
    assert prober.closed


def test_discover_without_subnets_uses_local(fake_service):
    r = client.post("/discover", json={})
    assert r.status_code == 200
    assert r.json()["subnets"] == ["192.168.1.0/24"]


def test_discover_rejects_bad_subnet(fake_service):
    r = client.post("/discover", json={"subnets": ["192.168.1.0/24", "nope"]})
    assert r.status_code == 400
    assert "nope" in r.json()["detail"]


def test_discover_rejects_too_many_subnets(fake_service, monkeypatch):
    monkeypatch.setattr(settings, "MAX_SUBNETS", 2)
    r = client.post("/discover", json={"subnets": ["10.0.0", "10.0.1", "10.0.2"]})
    assert r.status_code == 400


def test_discover_enumeration_failure_is_500(monkeypatch):
    prober = FakeProber()
    svc = DiscoveryService(FakeDialer(), prober, FakeInterfaceSource(fail="no netlink"))
    monkeypatch.setattr(fastapi_app, "build_service", lambda: (svc, prober))
    r = client.post("/discover", json={"subnets": None})
    assert r.status_code == 500
    assert "detecting local subnets" in r.json()["detail"]
    assert prober.closed


def test_local_subnets(fake_service):
    r = client.get("/subnets/local")
    assert r.status_code == 200
    assert r.json() == {"subnets": ["192.168.1.0/24"]}


@pytest.mark.parametrize("value", ["172.20.20.5", "172.20.20", "172.20.20.0/24"])
def test_normalize(value):
    r = client.get("/subnets/normalize", params={"value": value})
    assert r.status_code == 200
    assert r.json() == {"input": value, "subnet": "172.20.20.0/24"}


def test_normalize_rejects_ipv6():
    r = client.get("/subnets/normalize", params={"value": "fe80::1"})
    assert r.status_code == 400


def test_api_key_enforced(fake_service, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "s3cret")
    assert client.get("/subnets/local").status_code == 401
    r = client.get("/subnets/local", headers={"X-API-Key": "s3cret"})
    assert r.status_code == 200
