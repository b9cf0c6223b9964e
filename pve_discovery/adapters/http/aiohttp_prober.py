# /pve_discovery/adapters/http/aiohttp_prober.py
from __future__ import annotations

import asyncio
import logging

import aiohttp

from pve_discovery.config import DiscoveryConfig
from pve_discovery.errors import ProbeError

LOG = logging.getLogger("adapter.http_prober")


class AiohttpProber:
    """
    Loop-aware aiohttp prober. Certificates are not verified: Proxmox ships
    self-signed ones. A session bound to a closed loop (run_scan calls
    asyncio.run once per scan) is dropped and rebuilt on the current loop.
    """

    def __init__(self, config: DiscoveryConfig | None = None) -> None:
        cfg = config or DiscoveryConfig()
        self._timeout = aiohttp.ClientTimeout(total=cfg.verify_timeout)
        self._limit = cfg.verify_concurrency
        self._session: aiohttp.ClientSession | None = None
        self._loop: asyncio.AbstractEventLoop | None = None  # track owning loop

    async def _ensure_session(self) -> aiohttp.ClientSession:
        loop = asyncio.get_running_loop()
        loop_changed = self._loop is not None and self._loop is not loop

        if loop_changed:
            try:
                if self._session and not self._session.closed:
                    await self._session.close()
            finally:
                self._session = None
                self._loop = None

        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                connector=aiohttp.TCPConnector(limit=self._limit, ssl=False),
                timeout=self._timeout,
                raise_for_status=False,
            )
            self._loop = loop

        return self._session

    async def probe(self, url: str) -> int:
        """Return the status of the first response. Redirects are not followed."""
        sess = await self._ensure_session()
        try:
            async with sess.get(url, allow_redirects=False) as resp:
                LOG.debug("probe answered", extra={"extra": {"url": url, "status": resp.status}})
                return resp.status
        except (TimeoutError, aiohttp.ClientError, OSError) as e:
            raise ProbeError(f"GET {url}: {type(e).__name__}") from e

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
        self._loop = None
