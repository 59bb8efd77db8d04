"""Process-wide configuration read from the environment / .env file."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Flat configuration object.

    Timeouts and TTLs are in seconds.  include_deleted is not a setting:
    it is a per-call argument on the repository read methods.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "postgresql+asyncpg://localhost/marketstore"
    redis_url: str = "redis://localhost:6379/0"

    default_cache_ttl: int = Field(default=3600, gt=0)
    point_op_timeout: float = Field(default=1.0, gt=0.0)
    list_op_timeout: float = Field(default=3.0, gt=0.0)
    cache_op_timeout: float = Field(default=0.25, gt=0.0)

    webhook_worker_count: int = Field(default=4, ge=1)
    webhook_queue_size: int = Field(default=1000, ge=1)
    webhook_channel: str = "webhooks_delivery"


@lru_cache
def get_settings() -> Settings:
    return Settings()
