# /pve_discovery/adapters/api/fastapi_app.py
from __future__ import annotations
import logging
from typing import Optional

from fastapi import FastAPI, Header, HTTPException
from pydantic import BaseModel

from pve_discovery.config import settings
from pve_discovery.adapters.system.logging_cfg import configure_logger
from pve_discovery.discovery import build_service
from pve_discovery.domain.subnets import normalize_subnet
from pve_discovery.errors import EnumerationError, ParseError

LOG = logging.getLogger("adapter.api")
app = FastAPI(title="pve-discovery")
configure_logger(settings.LOG_LEVEL)


class DiscoverRequestModel(BaseModel):
    subnets: Optional[list[str]] = None


def _check_api_key(x_api_key: str | None) -> None:
    if settings.API_KEY and x_api_key != settings.API_KEY:
        raise HTTPException(status_code=401, detail="invalid api key")


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/subnets/local")
def subnets_local(x_api_key: str | None = Header(default=None)) -> dict:
    _check_api_key(x_api_key)
    svc, _prober = build_service()
    try:
        subnets = svc.local_subnets()
    except EnumerationError as e:
        LOG.exception("subnets.local.error")
        raise HTTPException(status_code=500, detail=str(e)) from e
    return {"subnets": subnets}


@app.get("/subnets/normalize")
def subnets_normalize(value: str, x_api_key: str | None = Header(default=None)) -> dict:
    _check_api_key(x_api_key)
    try:
        subnet = normalize_subnet(value)
    except ParseError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {"input": value, "subnet": subnet}


@app.post("/discover")
async def discover(payload: DiscoverRequestModel, x_api_key: str | None = Header(default=None)) -> dict:
    _check_api_key(x_api_key)
    raw = payload.subnets or []
    if len(raw) > settings.MAX_SUBNETS:
        raise HTTPException(status_code=400, detail=f"too many subnets (max {settings.MAX_SUBNETS})")
    try:
        subnets = [normalize_subnet(s) for s in raw]
    except ParseError as e:
        raise HTTPException(status_code=400, detail=f"invalid subnet: {e}") from e

    svc, prober = build_service()
    try:
        result = await svc.scan(subnets)
    except EnumerationError as e:
        LOG.exception("discover.error")
        raise HTTPException(status_code=500, detail=str(e)) from e
    finally:
        await prober.close()

    LOG.info(
        "discover.done",
        extra={"extra": {"subnets": result.subnets, "found": len(result.instances)}},
    )
    return {
        "instances": [i.to_dict() for i in result.instances],
        "subnets": result.subnets,
    }
