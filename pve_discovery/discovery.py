# /pve_discovery/discovery.py
"""
Entry points for callers that do not wire adapters themselves.

    from pve_discovery.discovery import run_scan, parse_subnet_list

    result = run_scan(parse_subnet_list("192.168.1.0/24, 10.0.0"))
    for inst in result.instances:
        print(inst.ip, inst.url)

An empty subnet list scans the /24s of the machine's own interfaces.
"""
from __future__ import annotations

import asyncio
from collections.abc import Sequence

from pve_discovery.adapters.http.aiohttp_prober import AiohttpProber
from pve_discovery.adapters.net.tcp_dialer import AsyncioTCPDialer
from pve_discovery.adapters.system.psutil_interfaces import PsutilInterfaceSource
from pve_discovery.config import DiscoveryConfig
from pve_discovery.domain.discovery_service import DiscoveryService, Instance, Result
from pve_discovery.domain.subnets import expand_subnet, normalize_subnet, parse_subnet_list

__all__ = [
    "Instance",
    "Result",
    "build_service",
    "expand_subnet",
    "local_subnets",
    "normalize_subnet",
    "parse_subnet_list",
    "run_scan",
    "scan",
]


def build_service(config: DiscoveryConfig | None = None) -> tuple[DiscoveryService, AiohttpProber]:
    """Wire the production adapters. The caller owns the prober and must close it."""
    cfg = config or DiscoveryConfig()
    prober = AiohttpProber(cfg)
    svc = DiscoveryService(
        dialer=AsyncioTCPDialer(),
        prober=prober,
        interfaces=PsutilInterfaceSource(),
        config=cfg,
    )
    return svc, prober


async def scan(subnets: Sequence[str] | None = None, config: DiscoveryConfig | None = None) -> Result:
    svc, prober = build_service(config)
    try:
        return await svc.scan(subnets)
    finally:
        await prober.close()


def run_scan(subnets: Sequence[str] | None = None, config: DiscoveryConfig | None = None) -> Result:
    return asyncio.run(scan(subnets, config))


def local_subnets() -> list[str]:
    """The /24s of this machine's up, non-loopback IPv4 interfaces."""
    svc, _prober = build_service()  # prober never opens a session here
    return svc.local_subnets()
