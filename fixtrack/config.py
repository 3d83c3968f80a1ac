"""Configuration settings"""

import os
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Database - supports both SQLite and PostgreSQL
    database_url: str = "sqlite+aiosqlite:///./data/fixtrack.db"

    # Application
    app_name: str = "Fixtrack"
    app_version: str = "1.0.0"
    debug: bool = False
    timezone: str = "UTC"

    # Recording
    power_mode: Literal["high", "balanced", "battery"] = "balanced"
    default_scenario: str = "UNKNOWN"

    # Anomaly thresholds
    geofence_alert_mode: Literal["every_sample", "on_exit"] = "every_sample"
    gap_threshold_sec: float = 10
    speed_jump_kmh: float = 20
    sharp_turn_deg: float = 90
    route_match_m: float = 50
    route_deviation_m: float = 150

    @property
    def is_sqlite(self) -> bool:
        """Check if database is SQLite"""
        return self.database_url.startswith("sqlite")

    class Config:
        # Respect ENV_FILE environment variable, default to .env
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Ignore extra fields for forward compatibility


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
