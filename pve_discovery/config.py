# /pve_discovery/config.py
from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field


class DiscoveryConfig(BaseModel):
    """Protocol parameters of a scan. Passed in explicitly, never read from the environment."""

    model_config = ConfigDict(frozen=True)

    port: int = Field(default=8006, gt=0, le=65535)  # Proxmox API port
    api_path: str = "/api2/json/version"
    probe_timeout: float = Field(default=0.8, gt=0)  # seconds per TCP dial
    verify_timeout: float = Field(default=5.0, gt=0)  # seconds per HTTP probe
    workers: int = Field(default=50, gt=0)  # concurrent dials
    verify_concurrency: int = Field(default=1, gt=0)  # 1 = sequential verification


class Settings(BaseModel):
    API_KEY: str | None = os.getenv("API_KEY")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Request limits for the HTTP surface
    MAX_SUBNETS: int = int(os.getenv("MAX_SUBNETS", "16"))


settings = Settings()
