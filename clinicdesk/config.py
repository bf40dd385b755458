"""
Centralized configuration with environment variable overrides.

API endpoints, calendar geometry, availability thresholds, schedule
defaults and queue polling are all configurable here. Nothing is
hardcoded in view or screen logic.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from dotenv import load_dotenv

from clinicdesk.logging_context import LOG_FORMAT, install_request_id_filter

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


def _is_clock_time(value: str) -> bool:
    try:
        datetime.strptime(value, "%H:%M")
        return True
    except ValueError:
        return False


@dataclass(frozen=True)
class ApiConfig:
    """Backend REST endpoint settings."""

    base_url: str = os.getenv("API_URL", "http://localhost/hms")
    base_url_with_index: str = os.getenv("API_URL_WITH_INDEX", "http://localhost/hms/index.php")
    timeout_sec: float = _safe_float("API_TIMEOUT", "15.0")
    token: Optional[str] = os.getenv("API_TOKEN") or None


@dataclass(frozen=True)
class CalendarConfig:
    """Week grid geometry and availability tier thresholds."""

    start_hour: int = _safe_int("CALENDAR_START_HOUR", "8")
    end_hour: int = _safe_int("CALENDAR_END_HOUR", "21")
    hour_height: int = _safe_int("CALENDAR_HOUR_HEIGHT", "60")
    available_threshold: float = _safe_float("AVAILABLE_THRESHOLD", "0.7")
    limited_threshold: float = _safe_float("LIMITED_THRESHOLD", "0.3")


@dataclass(frozen=True)
class ScheduleConfig:
    """Defaults applied to newly added doctor schedule slots."""

    default_start_time: str = os.getenv("SCHEDULE_DEFAULT_START", "09:00")
    default_end_time: str = os.getenv("SCHEDULE_DEFAULT_END", "17:00")
    default_duration_minutes: int = _safe_int("SCHEDULE_DEFAULT_DURATION", "30")


@dataclass(frozen=True)
class QueueConfig:
    """Token queue display refresh settings."""

    poll_interval_sec: float = _safe_float("QUEUE_POLL_SECONDS", "30")
    completed_limit: int = _safe_int("QUEUE_COMPLETED_LIMIT", "10")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    api: ApiConfig = field(default_factory=ApiConfig)
    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    queue: QueueConfig = field(default_factory=QueueConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    clinic_name: str = os.getenv("CLINIC_NAME", "City General Hospital")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not config.api.base_url:
        raise ValueError("API_URL must not be empty")
    if config.api.timeout_sec <= 0:
        raise ValueError(f"API_TIMEOUT must be > 0, got {config.api.timeout_sec}")

    cal = config.calendar
    if not 0 <= cal.start_hour < cal.end_hour <= 23:
        raise ValueError(
            "CALENDAR_START_HOUR must be before CALENDAR_END_HOUR within 0-23, "
            f"got {cal.start_hour}-{cal.end_hour}"
        )
    if cal.hour_height < 2 or cal.hour_height % 2:
        raise ValueError(
            f"CALENDAR_HOUR_HEIGHT must be an even number >= 2, got {cal.hour_height}"
        )
    for name, value in [
        ("AVAILABLE_THRESHOLD", cal.available_threshold),
        ("LIMITED_THRESHOLD", cal.limited_threshold),
    ]:
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"{name} must be between 0.0 and 1.0, got {value}")
    if cal.limited_threshold > cal.available_threshold:
        raise ValueError(
            "LIMITED_THRESHOLD must not exceed AVAILABLE_THRESHOLD, "
            f"got {cal.limited_threshold} > {cal.available_threshold}"
        )

    sched = config.schedule
    for name, value in [
        ("SCHEDULE_DEFAULT_START", sched.default_start_time),
        ("SCHEDULE_DEFAULT_END", sched.default_end_time),
    ]:
        if not _is_clock_time(value):
            raise ValueError(f"{name} must be HH:MM, got {value!r}")
    if sched.default_duration_minutes < 1:
        raise ValueError(
            f"SCHEDULE_DEFAULT_DURATION must be >= 1, got {sched.default_duration_minutes}"
        )

    if config.queue.poll_interval_sec <= 0:
        raise ValueError(
            f"QUEUE_POLL_SECONDS must be > 0, got {config.queue.poll_interval_sec}"
        )
    if config.queue.completed_limit < 0:
        raise ValueError(
            f"QUEUE_COMPLETED_LIMIT must be >= 0, got {config.queue.completed_limit}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    install_request_id_filter()
    logger.info("Configuration loaded for '%s' (API %s)", config.clinic_name, config.api.base_url)
    return config


# Singleton instance
settings = load_config()
