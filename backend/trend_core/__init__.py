"""Core shared logic for indicators, confluence scoring, and models.

This package contains pure business logic with no I/O dependencies
(no database, network, or file access). It is shared between callers
that only need the current signal and the backtesting system
(trend_backtest/).
"""

from trend_core.analysis import (
    compute_confidence,
    compute_signal,
    compute_snapshot,
    reason_text,
    signal_at,
    summarize_indicators,
)
from trend_core.errors import (
    EmptySeriesError,
    EngineError,
    InvalidLookaheadError,
    SeriesOrderError,
    UnknownTimeframeError,
)
from trend_core.models import (
    Bar,
    IndicatorSnapshot,
    IndicatorSummary,
    ScoreRecord,
    ScoringConfig,
    Series,
    Signal,
    SignalResult,
)
from trend_core.window import list_timeframes, select_window, window_size

__all__ = [
    "Bar",
    "Series",
    "Signal",
    "ScoreRecord",
    "SignalResult",
    "IndicatorSnapshot",
    "IndicatorSummary",
    "ScoringConfig",
    "compute_confidence",
    "compute_signal",
    "compute_snapshot",
    "summarize_indicators",
    "reason_text",
    "signal_at",
    "list_timeframes",
    "select_window",
    "window_size",
    "EngineError",
    "EmptySeriesError",
    "InvalidLookaheadError",
    "SeriesOrderError",
    "UnknownTimeframeError",
]
