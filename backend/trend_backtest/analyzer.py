"""Trend analyzer: current signal on a window plus a full-history backtest.

For one request:
1. Slice the trailing window for the requested timeframe
2. Read the indicator snapshot and the signal at the window's last bar
3. Summarize the indicators and derive confidence and reason text
4. Backtest the full series (never the window)

Indicator channels are cached per (series content, scoring config) so a
dashboard switching timeframes over the same series does not recompute
the full-history channels for every request.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field

from trend_core.analysis import (
    compute_confidence,
    reason_text,
    signal_at,
    summarize_indicators,
)
from trend_core.errors import EmptySeriesError, InvalidLookaheadError
from trend_core.indicators import IndicatorCalculator
from trend_core.models.bar import Series
from trend_core.models.config import ScoringConfig
from trend_core.models.signal import IndicatorSnapshot, IndicatorSummary, SignalResult
from trend_core.nullable import Channel
from trend_core.sanitizer import PriceChannels, sanitize
from trend_core.window import DEFAULT_TIMEFRAME, select_window, window_size

from trend_backtest.engine import Backtester
from trend_backtest.stats import BacktestResult

logger = logging.getLogger(__name__)

# Maximum channel sets kept per analyzer (oldest evicted first)
MAX_CACHED_SERIES = 32


@dataclass
class TrendAnalysis:
    """Everything shown for one instrument and timeframe."""

    symbol: str
    timeframe: str
    as_of: dt.date | None
    snapshot: IndicatorSnapshot
    signal: SignalResult
    confidence: float
    reason_text: str
    backtest: BacktestResult
    summaries: list[IndicatorSummary] = field(default_factory=list)
    config: ScoringConfig = field(default_factory=ScoringConfig)


class TrendAnalyzer:
    """Analyze series with one scoring config and a bounded channel cache."""

    def __init__(
        self,
        config: ScoringConfig | None = None,
        max_cached: int = MAX_CACHED_SERIES,
    ):
        self.config = config or ScoringConfig()
        self._calculator = IndicatorCalculator(self.config)
        self._backtester = Backtester(self.config)
        self._config_key = self.config.model_dump_json()
        self._max_cached = max_cached
        self._cache: dict[tuple[str, str], tuple[PriceChannels, dict[str, Channel]]] = {}
        self.cache_hits = 0
        self.cache_misses = 0

    def _channels(self, series: Series) -> tuple[PriceChannels, dict[str, Channel]]:
        key = (series.content_hash, self._config_key)
        cached = self._cache.get(key)
        if cached is not None:
            self.cache_hits += 1
            logger.debug("channel cache hit: %s (%d bars)", series.symbol, len(series))
            return cached

        self.cache_misses += 1
        prices = sanitize(series)
        entry = (prices, self._calculator.calculate_all(prices))
        if self._max_cached > 0:
            while len(self._cache) >= self._max_cached:
                self._cache.pop(next(iter(self._cache)))
            self._cache[key] = entry
        return entry

    def clear_cache(self) -> None:
        self._cache.clear()

    def analyze(
        self,
        series: Series,
        timeframe: str = DEFAULT_TIMEFRAME,
        lookahead: int | None = None,
    ) -> TrendAnalysis:
        """
        Analyze one series for a timeframe.

        Args:
            series: Full bar history
            timeframe: Window for the current values (5D, 1M, 3M, 6M, 1Y, ALL)
            lookahead: Backtest lookahead (default: config.default_lookahead)

        Returns:
            TrendAnalysis for the window's last bar

        Raises:
            UnknownTimeframeError: If the timeframe is not known
            EmptySeriesError: If the series has no bars
            InvalidLookaheadError: If lookahead is outside [1, len - 1]
        """
        cfg = self.config
        window_size(timeframe)  # unknown timeframe fails before any work
        if len(series) == 0:
            raise EmptySeriesError(f"{series.symbol or 'series'}: no bars to analyze")
        if lookahead is None:
            lookahead = cfg.default_lookahead
        if lookahead < 1 or lookahead >= len(series):
            raise InvalidLookaheadError(lookahead, len(series))

        window = select_window(series, timeframe)
        prices, indicators = self._channels(window)
        last = len(prices) - 1
        snapshot = IndicatorCalculator.snapshot_at(prices, indicators, last)
        signal = signal_at(prices, indicators, last, cfg)

        full_prices, full_indicators = self._channels(series)
        backtest = self._backtester.run_channels(full_prices, full_indicators, lookahead)

        analysis = TrendAnalysis(
            symbol=series.symbol,
            timeframe=timeframe.strip().upper(),
            as_of=window.last_date,
            snapshot=snapshot,
            signal=signal,
            confidence=compute_confidence(signal.score, snapshot),
            reason_text=reason_text(signal, cfg.max_reasons),
            backtest=backtest,
            summaries=summarize_indicators(snapshot),
            config=cfg,
        )
        logger.info(
            "%s %s: %s score=%+.3f confidence=%.2f backtest=%s",
            analysis.symbol or "series",
            analysis.timeframe,
            signal.signal.value,
            signal.score,
            analysis.confidence,
            backtest.summary(),
        )
        return analysis


def analyze(
    series: Series,
    timeframe: str = DEFAULT_TIMEFRAME,
    lookahead: int | None = None,
    config: ScoringConfig | None = None,
) -> TrendAnalysis:
    """Analyze a series with a fresh TrendAnalyzer."""
    return TrendAnalyzer(config).analyze(series, timeframe, lookahead)
