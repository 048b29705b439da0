"""Backtest engine: replay the confluence signal over a full series.

Ties together IndicatorCalculator, ConfluenceScorer, and the signal
classifier to measure how often a change of signal side was followed by
a move in that direction ``lookahead`` bars later.

Processing order for each index t (from the first fully warmed-up bar
while t + lookahead is still inside the series):
1. Skip t if any required channel is undefined
2. Score and classify at t
3. Ignore HOLD and repeats of the retained side
4. On a side change, record a trial and compare close[t + lookahead]
   against close[t]
"""

from __future__ import annotations

import logging
from typing import Mapping

from trend_core.errors import EmptySeriesError, InvalidLookaheadError
from trend_core.indicators import IndicatorCalculator
from trend_core.models.bar import Series
from trend_core.models.config import ScoringConfig
from trend_core.models.signal import Signal
from trend_core.nullable import Channel
from trend_core.sanitizer import PriceChannels, sanitize
from trend_core.scoring import ConfluenceScorer, classify

from trend_backtest.stats import BacktestResult, StatisticsCalculator, Trial

logger = logging.getLogger(__name__)

# Channels that must all be defined before a bar is scored
REQUIRED_CHANNELS = ("sma_slow", "macd_signal", "bb_middle", "rsi")


def _is_ready(indicators: Mapping[str, Channel], index: int) -> bool:
    return all(indicators[name][index] is not None for name in REQUIRED_CHANNELS)


def _is_hit(side: Signal, entry: float | None, exit_: float | None) -> bool:
    if entry is None or exit_ is None:
        return False
    if side == Signal.BUY:
        return exit_ > entry
    return exit_ < entry


class Backtester:
    """Replay signals over a full series and score their forward outcome."""

    def __init__(self, config: ScoringConfig | None = None):
        self.config = config or ScoringConfig()
        self._calculator = IndicatorCalculator(self.config)
        self._scorer = ConfluenceScorer(self.config)
        self._stats = StatisticsCalculator()

    def run(self, series: Series, lookahead: int | None = None) -> BacktestResult:
        """
        Backtest a full series.

        Args:
            series: Full bar history (never a trailing window)
            lookahead: Bars between a trial and its outcome
                (default: config.default_lookahead)

        Returns:
            BacktestResult with effectiveness and the trial list

        Raises:
            EmptySeriesError: If the series has no bars
            InvalidLookaheadError: If lookahead is outside [1, len - 1]
        """
        if lookahead is None:
            lookahead = self.config.default_lookahead
        if len(series) == 0:
            raise EmptySeriesError(f"{series.symbol or 'series'}: cannot backtest an empty series")
        if lookahead < 1 or lookahead >= len(series):
            raise InvalidLookaheadError(lookahead, len(series))

        prices = sanitize(series)
        indicators = self._calculator.calculate_all(prices)
        return self.run_channels(prices, indicators, lookahead)

    def run_channels(
        self,
        prices: PriceChannels,
        indicators: Mapping[str, Channel],
        lookahead: int,
    ) -> BacktestResult:
        """Backtest already computed channels (lookahead is not re-validated)."""
        closes = prices.close
        n = len(prices)

        start = next((i for i in range(n) if _is_ready(indicators, i)), n)
        trials: list[Trial] = []
        last_side: Signal | None = None

        for t in range(start, n - lookahead):
            if not _is_ready(indicators, t):
                continue

            record = self._scorer.score_at(t, closes, indicators)
            side = classify(record, self.config)
            if side == Signal.HOLD or side == last_side:
                continue

            last_side = side
            entry, exit_ = closes[t], closes[t + lookahead]
            trial = Trial(
                index=t,
                side=side,
                score=record.score,
                entry_price=entry,
                exit_price=exit_,
                date=prices.dates[t] if prices.dates else None,
                hit=_is_hit(side, entry, exit_),
            )
            trials.append(trial)
            logger.debug(
                "trial t=%d side=%s score=%.4f entry=%s exit=%s hit=%s",
                t, side.value, record.score, entry, exit_, trial.hit,
            )

        result = self._stats.calculate(trials, lookahead, self.config.min_trials)
        logger.debug(
            "backtest: start=%d bars=%d lookahead=%d trials=%d hits=%d",
            start, n, lookahead, result.total, result.hits,
        )
        return result


def run_backtest(
    full_series: Series,
    lookahead: int | None = None,
    config: ScoringConfig | None = None,
) -> BacktestResult:
    """Backtest the confluence signal over ``full_series``.

    ``lookahead`` defaults to ``config.default_lookahead`` (5 bars for the
    default config), the same fallback as Backtester.run.
    """
    return Backtester(config).run(full_series, lookahead)
