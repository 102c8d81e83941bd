# backend/visit_sync/core/config.py
import logging
import os
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    app_name: str = "Visit Sync API"
    app_version: str = "1.0.0"
    environment: Literal["development", "test", "production"] = "development"
    api_prefix: str = "/api/v1"

    # Database
    database_url: str = Field(
        default="sqlite+pysqlite:///./visit_sync.db",
        description="SQLAlchemy URL for the legacy system of record",
    )
    database_echo: bool = Field(default=False, description="Echo SQL statements to the log")
    database_pool_size: int = 10
    database_max_overflow: int = 5

    log_level: str = Field(default="INFO", description="Root log level")

    # Visit order rules
    visit_order_expiry_days: int = Field(
        default=28,
        description="Days between a visit order's issue date and its expiry date",
    )

    # Slot provisioning
    slot_provisioning_retries: int = Field(
        default=1,
        ge=0,
        description="Re-reads allowed after a unique constraint violation while provisioning",
    )
    vsip_room_capacity: int = Field(default=99, description="Capacity given to provisioned rooms")

    # Monitoring
    slow_operation_threshold_seconds: float = Field(
        default=1.0,
        description="Service operations slower than this are logged as warnings",
    )
    metrics_enabled: bool = Field(default=True, description="Expose /metrics for Prometheus")

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"Unknown log level: {value}")
        return normalized

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
