# /pve_discovery/domain/subnets.py
from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from ipaddress import IPv4Address, IPv4Network, IPv6Address, ip_address, ip_network

from pve_discovery.errors import InvalidInputError, ParseError

LOG = logging.getLogger("domain.subnets")

_SEPARATORS = re.compile(r"[,\s]+")


@dataclass(slots=True)
class NetworkInterface:
    name: str
    is_up: bool
    is_loopback: bool
    ipv4_addresses: list[str] = field(default_factory=list)


def _slash24(addr: IPv4Address) -> str:
    return str(IPv4Network(f"{addr}/24", strict=False))


def normalize_subnet(value: str) -> str:
    """
    Turn a CIDR, a plain IPv4 address or a partial address ("a.b.c") into the
    /24 that contains it, e.g. "172.20.20.5" -> "172.20.20.0/24".

    Whatever prefix a CIDR carries, the result is always a /24 of its base
    address: "10.0.0.0/16" -> "10.0.0.0/24".
    """
    s = value.strip()

    if "/" in s:
        try:
            net = ip_network(s, strict=False)
        except ValueError:
            raise ParseError(f"cannot parse {value!r} as IP or CIDR") from None
        if net.version != 4:
            raise InvalidInputError(f"not an IPv4 CIDR: {value}")
        return _slash24(net.network_address)

    try:
        addr = ip_address(s)
    except ValueError:
        addr = None
    if addr is not None:
        if isinstance(addr, IPv6Address):
            if addr.ipv4_mapped is None:
                raise InvalidInputError(f"not an IPv4 address: {value}")
            addr = addr.ipv4_mapped
        return _slash24(addr)

    # partial, missing the host octet
    try:
        return _slash24(IPv4Address(s + ".0"))
    except ValueError:
        raise ParseError(f"cannot parse {value!r} as IP or CIDR") from None


def parse_subnet_list(raw: str) -> list[str]:
    """Normalize a comma and/or space separated list. Blank input means "auto-detect" and gives []."""
    return [normalize_subnet(part) for part in _SEPARATORS.split(raw.strip()) if part]


def expand_subnet(cidr: str) -> list[str]:
    """All 254 usable host addresses of a /24; [] when the input is not an IPv4 CIDR."""
    if "/" not in cidr:
        return []
    try:
        net = ip_network(cidr.strip(), strict=False)
    except ValueError:
        LOG.debug("expand skipped malformed subnet", extra={"extra": {"subnet": cidr}})
        return []
    if net.version != 4:
        return []
    return [str(h) for h in IPv4Network(f"{net.network_address}/24", strict=False).hosts()]


def subnets_from_interfaces(interfaces: Iterable[NetworkInterface]) -> list[str]:
    """Containing /24 of every IPv4 address on up, non-loopback interfaces, first-seen order."""
    subnets: list[str] = []
    seen: set[str] = set()
    for iface in interfaces:
        if not iface.is_up or iface.is_loopback:
            continue
        for raw in iface.ipv4_addresses:
            try:
                addr = IPv4Address(raw)
            except ValueError:
                continue
            subnet = _slash24(addr)
            if subnet not in seen:
                seen.add(subnet)
                subnets.append(subnet)
    return subnets
