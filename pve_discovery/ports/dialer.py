# /pve_discovery/ports/dialer.py
from __future__ import annotations

from typing import Protocol


class DialerPort(Protocol):
    async def dial(self, host: str, port: int, timeout: float) -> None:
        """Open and immediately close a TCP connection; raise ProbeError if it cannot be made."""
