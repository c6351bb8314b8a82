"""Scheduler configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class SchedulerSettings(BaseSettings):
    environment: str = "development"
    database_url: str = "sqlite+aiosqlite:///scheduler.db"
    echo_sql: bool = False
    app_title: str = "Salon Scheduler"
    log_level: str = "INFO"

    # Time grid: fallback window when no weekday has hours, and the empty
    # rows shown above and below the business's operating window.
    default_open_hour: int = 9
    default_close_hour: int = 19
    grid_padding_hours: int = 1

    model_config = {"env_prefix": "SCHED_", "env_file": ".env", "extra": "ignore"}

    @property
    def base_dir(self) -> Path:
        return Path(__file__).resolve().parent

    @property
    def project_dir(self) -> Path:
        return self.base_dir.parent

    @property
    def grid_options(self) -> dict[str, int]:
        return {
            "default_open": self.default_open_hour,
            "default_close": self.default_close_hour,
            "padding": self.grid_padding_hours,
        }

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}


settings = SchedulerSettings()
