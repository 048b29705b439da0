"""Tests for engine settings and scoring config loading."""

import pytest
from pydantic import ValidationError

from trend_backtest import config as config_module
from trend_backtest.config import (
    ConfigFileError,
    EngineSettings,
    get_settings,
    load_scoring_config,
)
from trend_core.models import ScoringConfig


class TestEngineSettings:
    """Tests for environment-based settings."""

    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        for name in ("TREND_CONFIG_PATH", "TREND_DEFAULT_TIMEFRAME", "TREND_LOOKAHEAD", "TREND_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        settings = EngineSettings()
        assert settings.config_path is None
        assert settings.default_timeframe == "ALL"
        assert settings.lookahead is None
        assert settings.log_level == "INFO"

    def test_env_prefix(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("TREND_LOOKAHEAD", "10")
        monkeypatch.setenv("TREND_DEFAULT_TIMEFRAME", "3M")

        settings = EngineSettings()
        assert settings.lookahead == 10
        assert settings.default_timeframe == "3M"

    def test_env_file(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("TREND_LOG_LEVEL", raising=False)
        (tmp_path / ".env").write_text("TREND_LOG_LEVEL=DEBUG\n")

        assert EngineSettings().log_level == "DEBUG"

    def test_get_settings_cached(self, monkeypatch):
        monkeypatch.setattr(config_module, "_settings", None)
        assert get_settings() is get_settings()


class TestLoadScoringConfig:
    """Tests for YAML scoring config loading."""

    def test_no_path(self):
        assert load_scoring_config(None) == ScoringConfig()

    def test_missing_file(self, tmp_path):
        assert load_scoring_config(tmp_path / "missing.yaml") == ScoringConfig()

    def test_overrides(self, tmp_path):
        path = tmp_path / "scoring.yaml"
        path.write_text(
            "buy_threshold: 0.35\n"
            "sell_threshold: -0.35\n"
            "min_trials: 10\n"
            "sma_fast_period: 20\n"
        )
        cfg = load_scoring_config(path)

        assert cfg.buy_threshold == pytest.approx(0.35)
        assert cfg.sell_threshold == pytest.approx(-0.35)
        assert cfg.min_trials == 10
        assert cfg.sma_fast_period == 20
        assert cfg.sma_slow_period == 200

    def test_empty_file(self, tmp_path):
        path = tmp_path / "scoring.yaml"
        path.write_text("")
        assert load_scoring_config(str(path)) == ScoringConfig()

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "scoring.yaml"
        path.write_text("buy_threshold: -0.5\nsell_threshold: 0.5\n")
        with pytest.raises(ValidationError):
            load_scoring_config(path)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "scoring.yaml"
        path.write_text("buy_threshold: [0.3\n")
        with pytest.raises(ConfigFileError):
            load_scoring_config(path)

    @pytest.mark.parametrize("text", ["- 0.3\n- -0.3\n", "0.3\n"])
    def test_not_a_mapping(self, tmp_path, text):
        path = tmp_path / "scoring.yaml"
        path.write_text(text)
        with pytest.raises(ConfigFileError) as exc_info:
            load_scoring_config(path)
        assert isinstance(exc_info.value, ValueError)
