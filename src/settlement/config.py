"""Runtime configuration for the settlement context.

Values come from environment variables so the same build runs in every
environment. Settings are read once and cached; tests call
``reset_settings()`` after patching the environment.
"""

import os
from dataclasses import dataclass

_settings = None


@dataclass(frozen=True)
class SettlementSettings:
    environment: str
    platform_account_id: str | None
    carrier_max_attempts: int
    carrier_backoff_seconds: float
    carrier_timeout_seconds: float
    carrier_gateway: str


def _load() -> SettlementSettings:
    return SettlementSettings(
        environment=(os.getenv("PROTEAN_ENV") or "development").lower(),
        platform_account_id=os.getenv("PLATFORM_ACCOUNT_ID") or None,
        carrier_max_attempts=int(os.getenv("CARRIER_MAX_ATTEMPTS", "3")),
        carrier_backoff_seconds=float(os.getenv("CARRIER_BACKOFF_SECONDS", "1.0")),
        carrier_timeout_seconds=float(os.getenv("CARRIER_TIMEOUT_SECONDS", "15")),
        carrier_gateway=os.getenv("CARRIER_GATEWAY", "http").lower(),
    )


def get_settings() -> SettlementSettings:
    """Return the cached settings, loading them from the environment on first use."""
    global _settings
    if _settings is None:
        _settings = _load()
    return _settings


def reset_settings() -> None:
    """Drop cached settings (useful for testing)."""
    global _settings
    _settings = None
