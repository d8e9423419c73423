"""Runtime settings read from the environment (and an optional .env file)."""
import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from caas_journey.db import DEFAULT_DB_PATH

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when an environment variable holds an invalid value."""


@dataclass(frozen=True)
class Settings:
    db_path: str = DEFAULT_DB_PATH
    leaderboard_limit: int = 10
    stage_threshold: float = 18
    log_level: str = "INFO"


def _positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")
    if value < 1:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def _number(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")


def load_settings(env_file: str | None = None) -> Settings:
    """Build settings from CAAS_* environment variables.

    Variables already set in the environment win over the .env file.
    """
    load_dotenv(env_file)
    log_level = (os.getenv("CAAS_LOG_LEVEL") or "INFO").upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"CAAS_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")
    db_path = os.getenv("CAAS_DB_PATH")
    if not db_path:
        logger.info("CAAS_DB_PATH not set; using default '%s'", DEFAULT_DB_PATH)
        db_path = DEFAULT_DB_PATH
    return Settings(
        db_path=os.path.expanduser(db_path),
        leaderboard_limit=_positive_int("CAAS_LEADERBOARD_LIMIT", 10),
        stage_threshold=_number("CAAS_STAGE_THRESHOLD", 18),
        log_level=log_level,
    )
