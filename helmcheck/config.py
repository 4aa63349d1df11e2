"""Configuration management via environment variables."""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass
class Config:
    """Application configuration loaded from environment variables."""

    # HTTP settings
    request_timeout: float | None = None  # None keeps the transport default
    max_workers: int = 1  # >1 fetches distinct repositories in parallel

    # Logging
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        load_dotenv()

        timeout_str = os.getenv("HELM_CHECK_TIMEOUT")
        try:
            request_timeout = float(timeout_str) if timeout_str else None
        except ValueError:
            raise ValueError(f"HELM_CHECK_TIMEOUT must be a number, got {timeout_str!r}")
        if request_timeout is not None and request_timeout <= 0:
            raise ValueError("HELM_CHECK_TIMEOUT must be positive")

        workers_str = os.getenv("HELM_CHECK_WORKERS", "1")
        try:
            max_workers = int(workers_str)
        except ValueError:
            raise ValueError(f"HELM_CHECK_WORKERS must be an integer, got {workers_str!r}")
        if max_workers < 1:
            raise ValueError("HELM_CHECK_WORKERS must be at least 1")

        log_level = os.getenv("HELM_CHECK_LOG_LEVEL", "WARNING").upper()
        if log_level not in logging.getLevelNamesMapping():
            raise ValueError(f"HELM_CHECK_LOG_LEVEL must be a logging level name, got {log_level!r}")

        return cls(
            request_timeout=request_timeout,
            max_workers=max_workers,
            log_level=log_level,
        )
