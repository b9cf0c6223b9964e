# /pve_discovery/ports/interface_source.py
from __future__ import annotations

from typing import Protocol

from pve_discovery.domain.subnets import NetworkInterface


class InterfaceSourcePort(Protocol):
    def interfaces(self) -> list[NetworkInterface]:
        """List the host's network interfaces; raise EnumerationError if the OS refuses."""
