"""Confluence scorer.

Combines trend, momentum, mean-reversion, and volatility readings at one
bar index into a single score in [-1, 1]:

- Trend (0.4): SMA50 vs SMA200 gap relative to ~2% of price, plus 0.3x
  the SMA50 slope over the last 5 bars relative to ~1% of price
- Momentum (0.3): 0.7x MACD-minus-signal gap relative to ~0.5% of price,
  plus 0.3x (RSI - 50) / 50
- Mean reversion (0.2): +/-0.8 for a lower/upper Bollinger touch, and
  +/-0.6 for RSI oversold/overbought
- Volatility (0.1): 0.3x sign of the MACD gap, only during a Bollinger
  squeeze (width at or below its trailing 20th percentile)

Each sub-score is clamped to [-1, 1] before weighting. Reasons are
appended in evaluation order.

This module is pure business logic with no I/O dependencies.
"""

from __future__ import annotations

import math
from typing import Mapping, Sequence

import numpy as np

from trend_core.models.config import ScoringConfig
from trend_core.models.signal import ScoreRecord
from trend_core.nullable import Channel, Value, clamp, sign, value_at


def floor_percentile(values: Sequence[Value], pct: float) -> float | None:
    """Return the ``pct`` percentile of the defined values.

    Uses the lower-rank element ``sorted[floor(pct/100 * (n - 1))]``
    without interpolation. None when no value is defined.
    """
    arr = np.sort(np.asarray([v for v in values if v is not None], dtype=np.float64))
    if arr.size == 0:
        return None
    return float(arr[math.floor(pct / 100.0 * (arr.size - 1))])


def _relation(a: float, b: float) -> str:
    if a > b:
        return ">"
    if a < b:
        return "<"
    return "="


class ConfluenceScorer:
    """Score one bar index from a set of aligned indicator channels."""

    def __init__(self, config: ScoringConfig | None = None):
        self.config = config or ScoringConfig()
        self._fast_label = f"MA{self.config.sma_fast_period}"
        self._slow_label = f"MA{self.config.sma_slow_period}"

    def score_at(
        self,
        index: int,
        closes: Sequence[Value],
        indicators: Mapping[str, Channel],
    ) -> ScoreRecord:
        """
        Compute the confluence score at ``index``.

        Args:
            index: Bar index to score
            closes: Close price channel
            indicators: Channels from IndicatorCalculator.calculate_all

        Returns:
            ScoreRecord with the weighted score, reasons, and sub-scores
        """
        price = closes[index]
        if price is None or price == 0:
            return ScoreRecord(score=0.0, reasons=["Price unavailable"])

        reasons: list[str] = []
        rsi_value = indicators["rsi"][index]

        trend = self._trend(index, price, indicators, reasons)
        momentum = self._momentum(index, price, rsi_value, indicators, reasons)
        mean_reversion = self._mean_reversion(index, price, rsi_value, indicators, reasons)
        volatility = self._volatility(index, indicators, reasons)

        cfg = self.config
        score = (
            cfg.trend_weight * trend
            + cfg.momentum_weight * momentum
            + cfg.mean_reversion_weight * mean_reversion
            + cfg.volatility_weight * volatility
        )
        return ScoreRecord(
            score=clamp(score),
            reasons=reasons,
            trend=trend,
            momentum=momentum,
            mean_reversion=mean_reversion,
            volatility=volatility,
        )

    # ------------------------------------------------------------------
    # Sub-scores (each returns a value clamped to [-1, 1])
    # ------------------------------------------------------------------

    def _trend(
        self,
        index: int,
        price: float,
        indicators: Mapping[str, Channel],
        reasons: list[str],
    ) -> float:
        cfg = self.config
        sma_fast = indicators["sma_fast"]
        fast = sma_fast[index]
        slow = indicators["sma_slow"][index]

        if fast is None or slow is None:
            if fast is not None:
                reasons.append(
                    f"Price {_relation(price, fast)} {self._fast_label} ({self._slow_label} not ready)"
                )
            elif slow is not None:
                reasons.append(
                    f"Price {_relation(price, slow)} {self._slow_label} ({self._fast_label} not ready)"
                )
            else:
                reasons.append(f"{self._fast_label}/{self._slow_label} not ready")
            return 0.0

        gap = fast - slow
        trend = clamp(gap / (price * cfg.trend_gap_scale))

        past_fast = value_at(sma_fast, index - cfg.trend_slope_lookback)
        if index >= cfg.trend_slope_lookback and past_fast is not None:
            slope = (fast - past_fast) / (price * cfg.trend_slope_scale)
            trend += cfg.trend_slope_factor * clamp(slope)

        if gap != 0:
            reasons.append(f"{self._fast_label} {_relation(fast, slow)} {self._slow_label}")
        return clamp(trend)

    def _momentum(
        self,
        index: int,
        price: float,
        rsi_value: Value,
        indicators: Mapping[str, Channel],
        reasons: list[str],
    ) -> float:
        cfg = self.config
        macd_value = indicators["macd"][index]
        signal_value = indicators["macd_signal"][index]
        momentum = 0.0

        if macd_value is not None and signal_value is not None:
            diff = macd_value - signal_value
            momentum += cfg.macd_factor * clamp(diff / (price * cfg.macd_gap_scale))
            if diff != 0:
                reasons.append(f"MACD {_relation(macd_value, signal_value)} Signal")
        else:
            reasons.append("MACD not ready")

        if rsi_value is not None:
            momentum += cfg.rsi_factor * clamp((rsi_value - 50.0) / 50.0)
            if rsi_value > cfg.rsi_bullish_level:
                reasons.append("RSI > 50")
            elif rsi_value < cfg.rsi_bearish_level:
                reasons.append("RSI < 50")
        else:
            reasons.append("RSI not ready")

        return clamp(momentum)

    def _mean_reversion(
        self,
        index: int,
        price: float,
        rsi_value: Value,
        indicators: Mapping[str, Channel],
        reasons: list[str],
    ) -> float:
        cfg = self.config
        upper = indicators["bb_upper"][index]
        lower = indicators["bb_lower"][index]
        score = 0.0

        if upper is not None and lower is not None:
            if price <= lower:
                score += cfg.band_touch_score
                reasons.append("Price ≤ Lower Band")
            if price >= upper:
                score -= cfg.band_touch_score
                reasons.append("Price ≥ Upper Band")
        else:
            reasons.append("Bollinger not ready")

        if cfg.use_rsi_extremes and rsi_value is not None:
            if rsi_value <= cfg.rsi_oversold:
                score += cfg.rsi_extreme_score
                reasons.append(f"RSI ≤ {cfg.rsi_oversold:g} (Oversold)")
            if rsi_value >= cfg.rsi_overbought:
                score -= cfg.rsi_extreme_score
                reasons.append(f"RSI ≥ {cfg.rsi_overbought:g} (Overbought)")

        return clamp(score)

    def _volatility(
        self,
        index: int,
        indicators: Mapping[str, Channel],
        reasons: list[str],
    ) -> float:
        cfg = self.config
        widths = indicators["bb_width"]
        width = widths[index]
        if index < cfg.squeeze_window or width is None:
            return 0.0

        window = widths[index - cfg.squeeze_window + 1 : index + 1]
        threshold = floor_percentile(window, cfg.squeeze_percentile)
        if threshold is None or width > threshold:
            return 0.0

        diff = (indicators["macd"][index] or 0.0) - (indicators["macd_signal"][index] or 0.0)
        reasons.append("Volatility squeeze (narrow Bollinger)")
        return clamp(cfg.squeeze_bias * sign(diff))
