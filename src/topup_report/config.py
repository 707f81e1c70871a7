"""Configuration helpers and Settings container.

This module provides a small `Settings` dataclass and `get_settings` which
reads the input/output file locations and logging options from environment
variables (optionally supplied through a `.env` file).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
import logging
import os

from dotenv import load_dotenv

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")


@dataclass(frozen=True)
class Settings:
    """Container for pipeline configuration read from the environment.

    Attributes:
        companies_path: JSON array of company records.
        users_path: JSON array of user records.
        output_path: Report file written by the `report` command.
        log_level: Numeric logging level.
        log_path: Optional file that receives a copy of the log stream.
    """
    companies_path: Path
    users_path: Path
    output_path: Path
    log_level: int = logging.INFO
    log_path: Path | None = None

    def with_overrides(self, **overrides: object) -> "Settings":
        """Return a copy with every non-None keyword applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def parse_log_level(value: str, source: str = "TOPUP_LOG_LEVEL") -> int:
    """Translate a level name such as ``"warning"`` into its numeric value.

    Raises:
        RuntimeError: if `value` is not a standard logging level name.
    """
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise RuntimeError(
            f"{source} must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL "
            f"(got {value!r})."
        )
    return level


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if `TOPUP_LOG_LEVEL` is not a known logging level.
    """
    companies_path = Path(os.getenv("TOPUP_COMPANIES_FILE", "companies.json"))
    users_path = Path(os.getenv("TOPUP_USERS_FILE", "users.json"))
    output_path = Path(os.getenv("TOPUP_OUTPUT_FILE", "output.txt"))
    log_level = parse_log_level(os.getenv("TOPUP_LOG_LEVEL", "INFO"))
    log_file = os.getenv("TOPUP_LOG_FILE", "").strip()

    return Settings(
        companies_path=companies_path,
        users_path=users_path,
        output_path=output_path,
        log_level=log_level,
        log_path=Path(log_file) if log_file else None,
    )
