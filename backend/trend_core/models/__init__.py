"""Data models shared by the indicator, scoring, and backtest layers."""

from trend_core.models.bar import Bar, Series
from trend_core.models.config import DEFAULT_SCORING_CONFIG, ScoringConfig
from trend_core.models.signal import (
    Bias,
    IndicatorSnapshot,
    IndicatorSummary,
    ScoreRecord,
    Signal,
    SignalResult,
)

__all__ = [
    "Bar",
    "Series",
    "ScoringConfig",
    "DEFAULT_SCORING_CONFIG",
    "Bias",
    "IndicatorSnapshot",
    "IndicatorSummary",
    "ScoreRecord",
    "Signal",
    "SignalResult",
]
