"""
Tracker configuration — environment-driven settings and logging setup.
"""

import logging
import os
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for TennisTracker."""

    model_config = SettingsConfigDict(
        env_prefix="TENNISTRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── App ──────────────────────────────────────────────
    APP_NAME: str = "TennisTracker"
    APP_VERSION: str = "1.0.0"

    # ── Match defaults ───────────────────────────────────
    DEFAULT_FORMAT_CHOICE: str = "1"
    DEFAULT_LOCATION: str = ""

    # ── Export ───────────────────────────────────────────
    EXPORT_DIR: str = "./exports"

    # ── Logging ──────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

    # ── Rendering ────────────────────────────────────────
    USE_COLOR: Optional[bool] = None  # None = detect from TERM

    def color_enabled(self) -> bool:
        """Whether terminal renderings may use ANSI colour."""
        if self.USE_COLOR is not None:
            return self.USE_COLOR
        term = os.environ.get("TERM", "")
        return "xterm" in term or "color" in term


settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Install the tracker's log format on the root logger."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=settings.LOG_FORMAT,
    )
