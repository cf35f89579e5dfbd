"""Configuration via pydantic-settings — 12-factor app style."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """toptalkers configuration — loaded from env vars / .env file."""

    top_count: int = Field(default=100, ge=0, description="How many top addresses to keep")
    default_format: str = Field(default="auto", description="Default log format (auto|apache|json|plain)")
    address_field: str = Field(default="host", description="Entry field holding the client address")
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis URL for published snapshots")
    snapshot_ttl: int = Field(default=300, description="Published snapshot TTL in seconds")
    snapshot_name: str = Field(default="default", description="Name under which snapshots are published")
    poll_interval: float = Field(default=0.25, description="Tail poll interval in seconds")
    refresh_interval: float = Field(default=1.0, description="Tail redraw interval in seconds")
    log_level: str = Field(default="WARNING", description="Root log level for the CLI")

    class Config:
        env_prefix = "TOPTALKERS_"
        env_file = ".env"


settings = Settings()
