# /pve_discovery/adapters/net/tcp_dialer.py
from __future__ import annotations

import asyncio
import contextlib
import logging

from pve_discovery.errors import ProbeError

LOG = logging.getLogger("adapter.tcp_dialer")


class AsyncioTCPDialer:
    """Connect-only reachability check: no bytes are sent, the socket is closed right away."""

    async def dial(self, host: str, port: int, timeout: float) -> None:
        try:
            async with asyncio.timeout(timeout):
                _reader, writer = await asyncio.open_connection(host, port)
        except (TimeoutError, OSError) as e:
            raise ProbeError(f"dial {host}:{port}: {type(e).__name__}") from e

        writer.close()
        # peer may reset on close; the port was open either way
        with contextlib.suppress(OSError):
            await writer.wait_closed()
        LOG.debug("port open", extra={"extra": {"host": host, "port": port}})
