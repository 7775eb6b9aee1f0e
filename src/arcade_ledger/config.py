"""Configuration surface for the arcade ledger."""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Ledger configuration, read from ``ARCADE_LEDGER_*`` environment variables."""

    # Owner principal fixed at engine construction
    owner: str = ""

    # Emit the bare ``1`` code for insufficient balance on the wire
    legacy_error_codes: bool = False

    # Hash-chained audit trail of successful mutations
    enable_audit: bool = True

    # Logging
    log_level: str = "INFO"
    json_logs: bool = True
    log_file: str = ""

    model_config = SettingsConfigDict(
        env_prefix="ARCADE_LEDGER_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache
def load_settings(env_file: str | None = None) -> LedgerSettings:
    """Load LedgerSettings once per process."""
    if env_file:
        return LedgerSettings(_env_file=Path(env_file))
    return LedgerSettings()
