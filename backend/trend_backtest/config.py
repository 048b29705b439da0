"""Engine configuration.

Two layers:
- EngineSettings: run defaults from environment variables (TREND_*)
  or a .env file
- ScoringConfig: indicator periods, weights, and thresholds, loaded
  from a YAML file when one is given
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

from trend_core.models.config import ScoringConfig

logger = logging.getLogger(__name__)


class ConfigFileError(ValueError):
    """Raised when a scoring config file is not a YAML mapping."""


class EngineSettings(BaseSettings):
    """Engine run defaults loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TREND_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # YAML file with ScoringConfig overrides (None = built-in defaults)
    config_path: Path | None = None
    default_timeframe: str = "ALL"
    lookahead: int | None = None
    log_level: str = "INFO"


_settings: EngineSettings | None = None


def get_settings() -> EngineSettings:
    """Get cached engine settings instance."""
    global _settings
    if _settings is None:
        _settings = EngineSettings()
    return _settings


def load_scoring_config(path: Path | str | None = None) -> ScoringConfig:
    """Load scoring config from a YAML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    Unknown keys and invalid values raise pydantic's ValidationError.

    Raises:
        ConfigFileError: If the file is not valid YAML or not a mapping
    """
    if path is None:
        return ScoringConfig()

    config_path = Path(path)
    if not config_path.exists():
        logger.info("No scoring config found at %s, using defaults", config_path)
        return ScoringConfig()

    try:
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigFileError(f"{config_path}: invalid YAML: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigFileError(
            f"{config_path}: expected a mapping of settings, got {type(raw).__name__}"
        )

    config = ScoringConfig.model_validate(raw)
    logger.info(
        "Loaded scoring config from %s: thresholds=%+.2f/%+.2f, min_trials=%d",
        config_path,
        config.buy_threshold,
        config.sell_threshold,
        config.min_trials,
    )
    return config
