"""Engine entry points for the latest bar of a series.

- compute_snapshot: every indicator value at the last bar
- compute_signal: confluence score + classified signal at the last bar
- summarize_indicators / compute_confidence / reason_text: the readable
  layer shown next to the signal

The backtest over full history lives in trend_backtest.
"""

from __future__ import annotations

import logging

from trend_core.errors import EmptySeriesError
from trend_core.indicators import IndicatorCalculator
from trend_core.models.bar import Series
from trend_core.models.config import ScoringConfig
from trend_core.models.signal import (
    IndicatorSnapshot,
    IndicatorSummary,
    Signal,
    SignalResult,
)
from trend_core.nullable import Channel, clamp
from trend_core.sanitizer import PriceChannels, sanitize
from trend_core.scoring import ConfluenceScorer, classify

logger = logging.getLogger(__name__)

HOLD_REASON = "No clear direction (neutral score)"
REASON_SEPARATOR = " • "


def _prepare(series: Series) -> PriceChannels:
    if len(series) == 0:
        raise EmptySeriesError(f"{series.symbol or 'series'}: no bars to analyze")
    return sanitize(series)


def compute_snapshot(series: Series, config: ScoringConfig | None = None) -> IndicatorSnapshot:
    """
    Calculate all indicator values at the last bar of ``series``.

    Raises:
        EmptySeriesError: If the series has no bars.
    """
    prices = _prepare(series)
    calculator = IndicatorCalculator(config)
    indicators = calculator.calculate_all(prices)
    return calculator.snapshot_at(prices, indicators, len(prices) - 1)


def signal_at(
    prices: PriceChannels,
    indicators: dict[str, Channel],
    index: int,
    config: ScoringConfig | None = None,
) -> SignalResult:
    """Score and classify one index of already computed channels."""
    cfg = config or ScoringConfig()
    record = ConfluenceScorer(cfg).score_at(index, prices.close, indicators)
    return SignalResult(
        score=record.score,
        signal=classify(record, cfg),
        reasons=record.reasons,
        price=prices.close[index],
    )


def compute_signal(series: Series, config: ScoringConfig | None = None) -> SignalResult:
    """
    Calculate the confluence score and signal at the last bar of ``series``.

    Deterministic: the same series and config always give the same
    score, signal, and reasons.

    Raises:
        EmptySeriesError: If the series has no bars.
    """
    cfg = config or ScoringConfig()
    prices = _prepare(series)
    indicators = IndicatorCalculator(cfg).calculate_all(prices)
    result = signal_at(prices, indicators, len(prices) - 1, cfg)
    logger.debug(
        "%s: signal=%s score=%.4f reasons=%s",
        series.symbol, result.signal.value, result.score, result.reasons,
    )
    return result


# =============================================================================
# Readable layer
# =============================================================================

def summarize_indicators(snapshot: IndicatorSnapshot) -> list[IndicatorSummary]:
    """Describe the moving average, RSI, MACD, and Bollinger readings."""
    s = snapshot
    summaries: list[IndicatorSummary] = []

    # Equal averages (a flat series) read as Neutral, like missing ones
    if s.sma_fast is None or s.sma_slow is None or s.sma_fast == s.sma_slow:
        summaries.append(IndicatorSummary(name="ma", label="Neutral"))
    elif s.sma_fast > s.sma_slow:
        summaries.append(IndicatorSummary(name="ma", label="Golden Cross (Uptrend Bias)", bias="bullish"))
    else:
        summaries.append(IndicatorSummary(name="ma", label="Death Cross (Downtrend Bias)", bias="bearish"))

    if s.rsi is None:
        summaries.append(IndicatorSummary(name="rsi", label="Neutral"))
    elif s.rsi >= 70:
        summaries.append(IndicatorSummary(name="rsi", label="Overbought", bias="bearish"))
    elif s.rsi <= 30:
        summaries.append(IndicatorSummary(name="rsi", label="Oversold", bias="bullish"))
    elif s.rsi > 50:
        summaries.append(IndicatorSummary(name="rsi", label="Bullish Momentum", bias="bullish"))
    else:
        summaries.append(IndicatorSummary(name="rsi", label="Bearish Momentum", bias="bearish"))

    if s.macd is not None and s.macd_signal is not None:
        if s.macd > s.macd_signal:
            summaries.append(IndicatorSummary(name="macd", label="Bullish Crossover", bias="bullish"))
        else:
            summaries.append(IndicatorSummary(name="macd", label="Bearish Crossover", bias="bearish"))
    else:
        summaries.append(IndicatorSummary(name="macd", label="Neutral"))

    if s.price is not None and s.bb_upper is not None and s.bb_lower is not None:
        if s.price >= s.bb_upper:
            summaries.append(IndicatorSummary(name="bollinger", label="Price at/above Upper Band", bias="bearish"))
        elif s.price <= s.bb_lower:
            summaries.append(IndicatorSummary(name="bollinger", label="Price at/below Lower Band", bias="bullish"))
        else:
            summaries.append(IndicatorSummary(name="bollinger", label="Price near Middle Band"))
    else:
        summaries.append(IndicatorSummary(name="bollinger", label="Neutral"))

    return summaries


def compute_confidence(score: float, snapshot: IndicatorSnapshot) -> float:
    """Confidence in [0, 1]: |score| scaled by how many indicators are ready."""
    return clamp(abs(score) * (0.6 + 0.4 * snapshot.coverage), 0.0, 1.0)


def reason_text(result: SignalResult, max_reasons: int = 3) -> str:
    """Join the leading reasons for display (a fixed text for HOLD)."""
    if result.signal == Signal.HOLD:
        return HOLD_REASON
    return REASON_SEPARATOR.join(result.reasons[:max_reasons])
