# /pve_discovery/domain/discovery_service.py
from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from ipaddress import IPv4Address

from pve_discovery.config import DiscoveryConfig
from pve_discovery.domain.subnets import expand_subnet, normalize_subnet, subnets_from_interfaces
from pve_discovery.errors import EnumerationError, ProbeError
from pve_discovery.ports.dialer import DialerPort
from pve_discovery.ports.http_prober import HTTPProberPort
from pve_discovery.ports.interface_source import InterfaceSourcePort

LOG = logging.getLogger("discovery_service")

# ==== DTOs ====


@dataclass(frozen=True, slots=True)
class Instance:
    ip: str
    url: str  # https://<ip>:<port>

    def to_dict(self) -> dict[str, str]:
        return {"ip": self.ip, "url": self.url}


@dataclass(slots=True)
class Result:
    instances: list[Instance] = field(default_factory=list)
    subnets: list[str] = field(default_factory=list)  # what was actually searched


# ==== Service ====


class DiscoveryService:
    """Finds Proxmox VE hosts: subnets -> candidate hosts -> open port -> HTTP answer."""

    def __init__(
        self,
        dialer: DialerPort,
        prober: HTTPProberPort,
        interfaces: InterfaceSourcePort,
        *,
        config: DiscoveryConfig | None = None,
    ) -> None:
        self.dialer = dialer
        self.prober = prober
        self.interfaces = interfaces
        self.config = config or DiscoveryConfig()

    # --- subnet resolution ---

    def local_subnets(self) -> list[str]:
        subnets = subnets_from_interfaces(self.interfaces.interfaces())
        LOG.info("local subnets", extra={"extra": {"subnets": subnets}})
        return subnets

    def _resolve_subnets(self, subnets: Sequence[str]) -> list[str]:
        if not subnets:
            try:
                return self.local_subnets()
            except EnumerationError as e:
                raise EnumerationError(f"detecting local subnets: {e}") from e

        resolved: list[str] = []
        for s in subnets:
            cidr = normalize_subnet(s)
            if cidr not in resolved:
                resolved.append(cidr)
        return resolved

    # --- port probe phase ---

    async def _dial_one(
        self,
        host: str,
        open_hosts: list[str],
        sem: asyncio.Semaphore,
    ) -> None:
        async with sem:
            try:
                await self.dialer.dial(host, self.config.port, self.config.probe_timeout)
            except ProbeError as e:
                LOG.debug("port closed", extra={"extra": {"host": host, "detail": str(e)}})
                return
        open_hosts.append(host)

    async def probe_ports(self, hosts: Sequence[str]) -> list[str]:
        """Hosts accepting a TCP connection on the API port, in no particular order."""
        open_hosts: list[str] = []
        sem = asyncio.Semaphore(self.config.workers)

        async with asyncio.TaskGroup() as tg:
            for h in hosts:
                tg.create_task(self._dial_one(h, open_hosts, sem))

        LOG.info(
            "port probe done",
            extra={"extra": {"candidates": len(hosts), "open": len(open_hosts)}},
        )
        return open_hosts

    # --- verification phase ---

    def _base_url(self, host: str) -> str:
        return f"https://{host}:{self.config.port}"

    async def verify(self, host: str) -> Instance | None:
        """Any HTTP response on the version endpoint counts, whatever the status."""
        url = self._base_url(host)
        try:
            status = await self.prober.probe(url + self.config.api_path)
        except ProbeError as e:
            LOG.debug("verify failed", extra={"extra": {"host": host, "detail": str(e)}})
            return None
        LOG.info("proxmox found", extra={"extra": {"host": host, "status": status}})
        return Instance(ip=host, url=url)

    async def _verify_one(
        self,
        idx: int,
        host: str,
        found: list[Instance | None],
        sem: asyncio.Semaphore,
    ) -> None:
        async with sem:
            found[idx] = await self.verify(host)

    async def verify_hosts(self, hosts: Sequence[str]) -> list[Instance]:
        found: list[Instance | None] = [None] * len(hosts)
        sem = asyncio.Semaphore(self.config.verify_concurrency)

        async with asyncio.TaskGroup() as tg:
            for i, h in enumerate(hosts):
                tg.create_task(self._verify_one(i, h, found, sem))

        return [inst for inst in found if inst is not None]

    # --- primary entrypoint kept linear/simple ---

    async def scan(self, subnets: Sequence[str] | None = None) -> Result:
        resolved = self._resolve_subnets(subnets or [])
        if not resolved:
            LOG.info("nothing to scan")
            return Result()

        hosts: list[str] = []
        for s in resolved:
            hosts.extend(expand_subnet(s))

        LOG.info(
            "scan started",
            extra={"extra": {"subnets": resolved, "candidates": len(hosts)}},
        )
        open_hosts = sorted(await self.probe_ports(hosts), key=IPv4Address)
        instances = await self.verify_hosts(open_hosts)
        LOG.info("scan done", extra={"extra": {"subnets": resolved, "found": len(instances)}})

        return Result(instances=instances, subnets=resolved)
