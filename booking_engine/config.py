"""
Centralized configuration with environment variable overrides.

Pricing policy, scheduling defaults, and storage locations are
configurable here. Engine components read from ``settings`` by default
and accept explicit overrides for tests.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from booking_engine.logging_context import LOG_FORMAT, CheckoutIdFormatter

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class SchedulingConfig:
    """Availability and reschedule settings."""

    default_service_duration_minutes: int = _safe_int("DEFAULT_SERVICE_DURATION_MINUTES", "60")
    reschedule_cooldown_hours: int = _safe_int("RESCHEDULE_COOLDOWN_HOURS", "24")
    booking_instructions: str = os.getenv(
        "BOOKING_INSTRUCTIONS",
        "Please arrive 10 minutes early. Bring your booking confirmation.",
    )


@dataclass(frozen=True)
class PaymentConfig:
    """Service charge and deposit policy applied at checkout."""

    service_charge_rate: float = _safe_float("SERVICE_CHARGE_RATE", "0.05")
    service_charge_minimum: float = _safe_float("SERVICE_CHARGE_MINIMUM", "2.00")
    deposit_percentage: float = _safe_float("DEPOSIT_PERCENTAGE", "20")
    currency_symbol: str = os.getenv("CURRENCY_SYMBOL", "£")


@dataclass(frozen=True)
class StoreConfig:
    """Location of the persisted booking collection and write retry policy."""

    bookings_file: str = os.getenv("BOOKINGS_FILE", "bookings.json")
    write_attempts: int = _safe_int("BOOKING_STORE_WRITE_ATTEMPTS", "3")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    payments: PaymentConfig = field(default_factory=PaymentConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "beauty-booking-engine")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not 0.0 <= config.payments.service_charge_rate <= 1.0:
        raise ValueError(
            "SERVICE_CHARGE_RATE must be between 0.0 and 1.0, "
            f"got {config.payments.service_charge_rate}"
        )
    if config.payments.service_charge_minimum < 0:
        raise ValueError(
            "SERVICE_CHARGE_MINIMUM must be >= 0, "
            f"got {config.payments.service_charge_minimum}"
        )
    if not 0.0 < config.payments.deposit_percentage <= 100.0:
        raise ValueError(
            "DEPOSIT_PERCENTAGE must be in (0, 100], "
            f"got {config.payments.deposit_percentage}"
        )
    if config.scheduling.default_service_duration_minutes < 1:
        raise ValueError(
            "DEFAULT_SERVICE_DURATION_MINUTES must be >= 1, "
            f"got {config.scheduling.default_service_duration_minutes}"
        )
    if config.scheduling.reschedule_cooldown_hours < 0:
        raise ValueError(
            "RESCHEDULE_COOLDOWN_HOURS must be >= 0, "
            f"got {config.scheduling.reschedule_cooldown_hours}"
        )
    if not config.store.bookings_file.strip():
        raise ValueError("BOOKINGS_FILE must not be empty")
    if config.store.write_attempts < 1:
        raise ValueError(
            "BOOKING_STORE_WRITE_ATTEMPTS must be >= 1, "
            f"got {config.store.write_attempts}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    handler = logging.StreamHandler()
    handler.setFormatter(CheckoutIdFormatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        handlers=[handler],
    )
    logger.info("Configuration loaded for '%s'", config.app_name)
    return config


# Singleton instance
settings = load_config()
