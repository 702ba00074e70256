"""
certsync configuration definition.

Loads configuration from environment variables and provides a Pydantic model.
Uses pydantic-settings for type safety and defaults.
"""

import sys
from pathlib import Path
from typing import Literal

from apscheduler.triggers.cron import CronTrigger
from pydantic import Field, field_validator

from .core.config import BaseAppConfig


class CertSyncConfig(BaseAppConfig):
    """
    Configuration management for the certificate sync service.
    """

    # Target directory
    CERTIFICATES_PATH: Path = Field(
        default=Path("/opt/iobroker/certificates"),
        description="Base directory for exported PEM files",
    )

    # Store settings
    STORE_SOURCE: Literal["file", "http"] = Field(
        default="file", description="Where the system.certificates object is read from"
    )
    STORE_FILE_PATH: str = Field(
        default="/app/config/system.certificates.json",
        description="JSON/YAML export of the system.certificates object",
    )
    STORE_URL: str = Field(default="", description="HTTP endpoint returning the object JSON")
    STORE_USERNAME: str = Field(default="", description="Basic auth username for STORE_URL")
    STORE_PASSWORD: str = Field(default="", description="Basic auth password for STORE_URL")
    STORE_TIMEOUT: float = Field(default=10.0, description="Store request timeout (seconds)")

    # Restart flag
    RESTART_FLAG_SCOPE: Literal["collection", "global"] = Field(
        default="collection", description="One flag per collection or a single shared flag"
    )

    # Scheduling
    SYNC_SCHEDULE: str = Field(default="0 0 * * *", description="Crontab expression")
    SCHEDULE_TIMEZONE: str = Field(default="", description="Timezone name, empty for local")
    RUN_ON_STARTUP: bool = Field(default=True, description="Run once when the process starts")
    RUN_TIMEOUT_SECONDS: float = Field(default=600.0, gt=0, description="Per-run deadline")
    SYNC_WORKERS: int = Field(default=1, ge=1, le=32, description="Parallel collection pipelines")

    @field_validator("CERTIFICATES_PATH")
    @classmethod
    def _resolve_certificates_path(cls, value: Path) -> Path:
        # Resolved once here; the core only ever sees an absolute native path.
        return value.expanduser().resolve()

    @field_validator("SYNC_SCHEDULE")
    @classmethod
    def _check_schedule(cls, value: str) -> str:
        CronTrigger.from_crontab(value)
        return value


# Load config as a singleton.
# pydantic-settings reads environment variables during instantiation.
try:
    config = CertSyncConfig()
except Exception as e:
    sys.stderr.write(f"Failed to load configuration: {e}\n")
    raise
