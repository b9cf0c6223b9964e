# /pve_discovery/adapters/system/psutil_interfaces.py
from __future__ import annotations

import logging
import socket
from ipaddress import IPv4Address
from typing import Any

import psutil

from pve_discovery.domain.subnets import NetworkInterface
from pve_discovery.errors import EnumerationError

LOG = logging.getLogger("adapter.interfaces")


def _is_loopback(stats: Any, addresses: list[str]) -> bool:
    if stats is not None and "loopback" in stats.flags.split(","):
        return True
    # Windows reports no flags; fall back to the addresses themselves
    return bool(addresses) and all(IPv4Address(a).is_loopback for a in addresses)


class PsutilInterfaceSource:
    def interfaces(self) -> list[NetworkInterface]:
        try:
            stats = psutil.net_if_stats()
            addrs = psutil.net_if_addrs()
        except (OSError, psutil.Error) as e:
            LOG.error("interface enumeration failed", extra={"extra": {"error": str(e)}})
            raise EnumerationError(str(e)) from e

        out: list[NetworkInterface] = []
        for name, entries in addrs.items():
            st = stats.get(name)
            ipv4 = [a.address for a in entries if a.family == socket.AF_INET and a.address]
            out.append(
                NetworkInterface(
                    name=name,
                    is_up=bool(st and st.isup),
                    is_loopback=_is_loopback(st, ipv4),
                    ipv4_addresses=ipv4,
                )
            )
        LOG.debug("interfaces listed", extra={"extra": {"count": len(out)}})
        return out
