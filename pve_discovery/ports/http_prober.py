# /pve_discovery/ports/http_prober.py
from __future__ import annotations

from typing import Protocol


class HTTPProberPort(Protocol):
    async def probe(self, url: str) -> int:
        """GET url; return the HTTP status, or raise ProbeError on a transport failure."""
