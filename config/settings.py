"""
Application configuration for the Sleeper multi-league analyzer.
Reads settings from environment variables and provides defaults.
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

# Load .env file if present (explicit path avoids python-dotenv auto-discovery issues on newer Python)
ENV_PATH = Path(__file__).resolve().parents[1] / ".env"  # repo_root/.env if config/ is one level down
load_dotenv(dotenv_path=ENV_PATH, override=False)


class ConfigurationError(RuntimeError):
    """Required configuration is missing or malformed."""


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, str(default))
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be numeric, got {raw!r}") from exc


@dataclass
class AppSettings:
    """
    Settings for connecting to the Sleeper API and sizing the two cache tiers.

    Every field is read when the instance is built, so tests can construct a
    fresh AppSettings() after patching the environment.
    """

    # Principal whose leagues are analyzed
    sleeper_user_id: str = field(default_factory=lambda: os.getenv("SLEEPER_USER_ID", ""))
    nfl_season: str = field(default_factory=lambda: os.getenv("NFL_SEASON", "2025"))

    # Upstream API
    base_url: str = field(
        default_factory=lambda: os.getenv("SLEEPER_BASE_URL", "https://api.sleeper.app/v1")
    )
    request_timeout: float = field(default_factory=lambda: _env_float("SLEEPER_TIMEOUT", 10.0))

    # Ephemeral query cache TTL, in minutes
    cache_duration_minutes: int = field(default_factory=lambda: _env_int("CACHE_DURATION", 5))

    # Where the player snapshot lives
    data_dir: Path = field(default_factory=lambda: Path(os.getenv("SLEEPER_DATA_DIR", "data")))
    player_cache_ttl_hours: int = field(
        default_factory=lambda: _env_int("PLAYER_CACHE_TTL_HOURS", 24)
    )

    # Trending adds feed used by waiver scoring
    trending_lookback_hours: int = field(
        default_factory=lambda: _env_int("TRENDING_LOOKBACK_HOURS", 24)
    )
    trending_limit: int = field(default_factory=lambda: _env_int("TRENDING_LIMIT", 100))

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_duration_minutes * 60.0

    @property
    def player_cache_ttl_seconds(self) -> float:
        return self.player_cache_ttl_hours * 3600.0

    @property
    def player_cache_path(self) -> Path:
        return Path(self.data_dir) / "players.json"

    def require_user_id(self, principal: Optional[str] = None) -> str:
        """
        Return the explicit principal if given, else the configured one.

        Raises ConfigurationError when neither is set; principal-scoped
        operations cannot produce a partial result without it.
        """
        user_id = principal or self.sleeper_user_id
        if not user_id:
            raise ConfigurationError("SLEEPER_USER_ID environment variable is required")
        return user_id


# Create a single config instance for import
settings = AppSettings()
