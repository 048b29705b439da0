"""Backtesting and reporting for the trend engine.

Replays the confluence signal from trend_core over a full bar series,
combines it with the current-window signal into a TrendAnalysis, and
formats the result for the console or JSON.
"""

from trend_backtest.analyzer import TrendAnalysis, TrendAnalyzer, analyze
from trend_backtest.engine import Backtester, run_backtest
from trend_backtest.stats import BacktestResult, Trial

__all__ = [
    "Backtester",
    "BacktestResult",
    "Trial",
    "TrendAnalysis",
    "TrendAnalyzer",
    "analyze",
    "run_backtest",
]
