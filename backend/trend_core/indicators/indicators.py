"""Technical indicators for confluence scoring.

Every indicator is a pure function over nullable channels
(``list[float | None]``). Output length always equals input length and
index ``i`` of an output corresponds to bar ``i`` of the input. Short or
ragged input never raises: indices that cannot be computed are None.

Warm-up rules:
- SMA / Bollinger / Donchian need ``period`` contiguous valid inputs;
  a None resets the window.
- EMA seeds on the first valid input and carries its last value across
  None gaps.
- RSI / ATR seed on a simple average, then use Wilder smoothing; a None
  input restarts the seed.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from trend_core.models.config import ScoringConfig
from trend_core.models.signal import IndicatorSnapshot
from trend_core.nullable import (
    NO_VALUE,
    Channel,
    Value,
    combine,
    empty_channel,
    safe_div,
)
from trend_core.sanitizer import PriceChannels


# =============================================================================
# Moving averages
# =============================================================================

def _window_mean(window: Sequence[float]) -> float:
    # Offsets from the first value are all 0.0 for a constant window,
    # so its mean is exactly that value
    base = window[0]
    return base + math.fsum(v - base for v in window) / len(window)


def sma(values: Sequence[Value], period: int) -> Channel:
    """
    Calculate Simple Moving Average.

    Args:
        values: Sequence of values (None for missing)
        period: SMA period

    Returns:
        List of SMA values (None until ``period`` contiguous valid inputs)
    """
    out = empty_channel(len(values))
    run = 0
    for i, v in enumerate(values):
        if v is None:
            run = 0
            continue
        run += 1
        if run >= period:
            out[i] = _window_mean(values[i - period + 1 : i + 1])
    return out


def ema(values: Sequence[Value], period: int) -> Channel:
    """
    Calculate Exponential Moving Average.

    The first valid input is used as the seed, so the EMA is defined from
    the first valid index onwards. Missing inputs carry the previous EMA
    value forward.

    Args:
        values: Sequence of values (None for missing)
        period: EMA period

    Returns:
        List of EMA values
    """
    out = empty_channel(len(values))
    k = 2.0 / (period + 1)
    prev: Value = NO_VALUE
    for i, v in enumerate(values):
        if v is None:
            out[i] = prev
            continue
        prev = v if prev is None else prev + k * (v - prev)
        out[i] = prev
    return out


# =============================================================================
# Momentum
# =============================================================================

def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


def rsi(values: Sequence[Value], period: int = 14) -> Channel:
    """
    Calculate Relative Strength Index with Wilder smoothing.

    The first value appears after ``period + 1`` contiguous valid closes.
    When the average loss is zero the RSI is 100.

    Args:
        values: Sequence of close prices
        period: RSI period

    Returns:
        List of RSI values in [0, 100]
    """
    out = empty_channel(len(values))
    prev_close: Value = NO_VALUE
    gains: list[float] = []
    losses: list[float] = []
    avg_gain: Value = NO_VALUE
    avg_loss: Value = NO_VALUE

    for i, v in enumerate(values):
        if v is None:
            prev_close = NO_VALUE
            gains.clear()
            losses.clear()
            avg_gain = avg_loss = NO_VALUE
            continue
        if prev_close is None:
            prev_close = v
            continue

        change = v - prev_close
        prev_close = v
        gain = max(change, 0.0)
        loss = max(-change, 0.0)

        if avg_gain is None or avg_loss is None:
            gains.append(gain)
            losses.append(loss)
            if len(gains) < period:
                continue
            avg_gain = sum(gains) / period
            avg_loss = sum(losses) / period
        else:
            avg_gain = (avg_gain * (period - 1) + gain) / period
            avg_loss = (avg_loss * (period - 1) + loss) / period

        out[i] = _rsi_value(avg_gain, avg_loss)
    return out


def macd(
    values: Sequence[Value],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> tuple[Channel, Channel, Channel]:
    """
    Calculate MACD line, signal line, and histogram.

    The signal line is an EMA over the defined MACD values only; each
    result is written back at the index of the MACD value it came from.

    Args:
        values: Sequence of close prices
        fast: Fast EMA period
        slow: Slow EMA period
        signal: Signal EMA period

    Returns:
        Tuple of (macd_line, signal_line, histogram) lists
    """
    fast_ema = ema(values, fast)
    slow_ema = ema(values, slow)
    macd_line = combine(lambda f, s: f - s, fast_ema, slow_ema)

    defined = [i for i, v in enumerate(macd_line) if v is not None]
    signal_values = ema([macd_line[i] for i in defined], signal)
    signal_line = empty_channel(len(values))
    for i, sig in zip(defined, signal_values):
        signal_line[i] = sig

    histogram = combine(lambda m, s: m - s, macd_line, signal_line)
    return macd_line, signal_line, histogram


# =============================================================================
# Volatility
# =============================================================================

def bollinger_bands(
    values: Sequence[Value],
    period: int = 20,
    mult: float = 2.0,
) -> tuple[Channel, Channel, Channel, Channel]:
    """
    Calculate Bollinger Bands.

    middle = SMA(period), upper/lower = middle +/- mult * stddev, where
    stddev is the population standard deviation of the window.
    width = (upper - lower) / middle, None when middle is zero.

    Args:
        values: Sequence of close prices
        period: Lookback period
        mult: Band width multiplier

    Returns:
        Tuple of (upper, middle, lower, width) lists
    """
    n = len(values)
    middle = sma(values, period)
    upper = empty_channel(n)
    lower = empty_channel(n)
    width = empty_channel(n)

    for i, m in enumerate(middle):
        if m is None:
            continue
        window = values[i - period + 1 : i + 1]
        sd = math.sqrt(math.fsum((v - m) ** 2 for v in window) / period)
        upper[i] = m + mult * sd
        lower[i] = m - mult * sd
        width[i] = safe_div(upper[i] - lower[i], m)

    return upper, middle, lower, width


def true_range(
    highs: Sequence[Value],
    lows: Sequence[Value],
    closes: Sequence[Value],
) -> Channel:
    """
    Calculate True Range.

    TR = max(high - low, abs(high - prev_close), abs(low - prev_close))

    The first bar has no previous close, so TR starts at index 1. Any
    missing input yields None.

    Args:
        highs: Sequence of high prices
        lows: Sequence of low prices
        closes: Sequence of close prices

    Returns:
        List of True Range values
    """
    out = empty_channel(len(closes))
    for i in range(1, len(closes)):
        h, l, prev_close = highs[i], lows[i], closes[i - 1]
        if h is None or l is None or prev_close is None:
            continue
        out[i] = max(h - l, abs(h - prev_close), abs(l - prev_close))
    return out


def atr(
    highs: Sequence[Value],
    lows: Sequence[Value],
    closes: Sequence[Value],
    period: int = 14,
) -> Channel:
    """
    Calculate Average True Range (ATR) with Wilder smoothing.

    The first ATR is the simple average of the first ``period`` True
    Range values; afterwards atr = (prev_atr * (period - 1) + tr) / period.

    Args:
        highs: Sequence of high prices
        lows: Sequence of low prices
        closes: Sequence of close prices
        period: ATR period

    Returns:
        List of ATR values (>= 0 wherever defined)
    """
    tr = true_range(highs, lows, closes)
    out = empty_channel(len(tr))
    seed: list[float] = []
    value: Value = NO_VALUE

    for i, t in enumerate(tr):
        if t is None:
            seed.clear()
            value = NO_VALUE
            continue
        if value is None:
            seed.append(t)
            if len(seed) < period:
                continue
            value = sum(seed) / period
        else:
            value = (value * (period - 1) + t) / period
        out[i] = value
    return out


def keltner_channel(
    highs: Sequence[Value],
    lows: Sequence[Value],
    closes: Sequence[Value],
    ema_period: int = 20,
    atr_period: int = 10,
    mult: float = 2.0,
) -> tuple[Channel, Channel, Channel]:
    """
    Calculate Keltner Channel.

    middle = EMA((high + low + close) / 3), bands = middle +/- mult * ATR

    Args:
        highs: Sequence of high prices
        lows: Sequence of low prices
        closes: Sequence of close prices
        ema_period: EMA period of the typical price
        atr_period: ATR period
        mult: ATR multiplier

    Returns:
        Tuple of (upper, middle, lower) lists
    """
    typical = combine(lambda h, l, c: (h + l + c) / 3, highs, lows, closes)
    middle = ema(typical, ema_period)
    atr_values = atr(highs, lows, closes, atr_period)
    upper = combine(lambda m, a: m + mult * a, middle, atr_values)
    lower = combine(lambda m, a: m - mult * a, middle, atr_values)
    return upper, middle, lower


def chaikin_volatility(
    highs: Sequence[Value],
    lows: Sequence[Value],
    period: int = 10,
    lag: int = 10,
) -> Channel:
    """
    Calculate Chaikin Volatility.

    Percent change of EMA(high - low, period) over ``lag`` bars.

    Args:
        highs: Sequence of high prices
        lows: Sequence of low prices
        period: EMA smoothing period of the high-low range
        lag: Rate-of-change lookback

    Returns:
        List of percentage values
    """
    ranges = combine(lambda h, l: h - l, highs, lows)
    smoothed = ema(ranges, period)
    out = empty_channel(len(smoothed))
    for i in range(lag, len(smoothed)):
        current, base = smoothed[i], smoothed[i - lag]
        if current is None:
            continue
        ratio = safe_div(current - base, base) if base is not None else NO_VALUE
        if ratio is not None:
            out[i] = ratio * 100.0
    return out


def donchian_channel(
    highs: Sequence[Value],
    lows: Sequence[Value],
    period: int = 20,
) -> tuple[Channel, Channel, Channel]:
    """
    Calculate Donchian Channel.

    upper = highest high, lower = lowest low over the trailing ``period``
    bars (inclusive); middle = (upper + lower) / 2.

    Args:
        highs: Sequence of high prices
        lows: Sequence of low prices
        period: Lookback period

    Returns:
        Tuple of (upper, middle, lower) lists
    """
    n = len(highs)
    upper = empty_channel(n)
    middle = empty_channel(n)
    lower = empty_channel(n)

    for i in range(period - 1, n):
        hs = highs[i - period + 1 : i + 1]
        ls = lows[i - period + 1 : i + 1]
        if any(v is None for v in hs) or any(v is None for v in ls):
            continue
        upper[i] = float(np.max(hs))
        lower[i] = float(np.min(ls))
        middle[i] = (upper[i] + lower[i]) / 2

    return upper, middle, lower


# =============================================================================
# Trend following
# =============================================================================

def parabolic_sar(
    highs: Sequence[Value],
    lows: Sequence[Value],
    step: float = 0.02,
    max_step: float = 0.2,
) -> Channel:
    """
    Calculate Parabolic SAR.

    Starts in an uptrend at the first bar (SAR = low, EP = high). On a
    reversal the SAR jumps to the previous extreme point, the EP resets to
    the reversal bar's opposite extreme, and the acceleration factor
    resets to ``step``. The SAR is never placed inside the previous bar's
    range. A bar with a missing high or low yields None and restarts the
    state.

    Args:
        highs: Sequence of high prices
        lows: Sequence of low prices
        step: Acceleration factor start and increment
        max_step: Acceleration factor cap

    Returns:
        List of SAR values
    """
    out = empty_channel(len(highs))
    direction = 0  # 1 = long, -1 = short, 0 = no state
    sar = ep = 0.0
    af = step
    prev_high = prev_low = 0.0

    for i, (high, low) in enumerate(zip(highs, lows)):
        if high is None or low is None:
            direction = 0
            continue

        if direction == 0:
            direction = 1
            sar, ep, af = low, high, step
            out[i] = sar
            prev_high, prev_low = high, low
            continue

        sar = sar + af * (ep - sar)

        if direction > 0:
            sar = min(sar, prev_low)
            if low < sar:
                direction = -1
                sar, ep, af = ep, low, step
            elif high > ep:
                ep = high
                af = min(max_step, af + step)
        else:
            sar = max(sar, prev_high)
            if high > sar:
                direction = 1
                sar, ep, af = ep, high, step
            elif low < ep:
                ep = low
                af = min(max_step, af + step)

        out[i] = sar
        prev_high, prev_low = high, low

    return out


# =============================================================================
# IndicatorCalculator class
# =============================================================================

class IndicatorCalculator:
    """Calculator for all indicator channels used by the confluence scorer."""

    def __init__(self, config: ScoringConfig | None = None):
        self.config = config or ScoringConfig()

    def calculate_all(self, prices: PriceChannels) -> dict[str, Channel]:
        """
        Calculate all indicators for the given price channels.

        Args:
            prices: Sanitized close/high/low channels

        Returns:
            Dict of indicator name -> channel, aligned with the input bars
        """
        cfg = self.config
        closes, highs, lows = prices.close, prices.high, prices.low

        macd_line, signal_line, hist = macd(
            closes, cfg.macd_fast_period, cfg.macd_slow_period, cfg.macd_signal_period
        )
        bb_upper, bb_middle, bb_lower, bb_width = bollinger_bands(
            closes, cfg.bb_period, cfg.bb_mult
        )
        kc_upper, kc_middle, kc_lower = keltner_channel(
            highs, lows, closes, cfg.keltner_ema_period, cfg.keltner_atr_period, cfg.keltner_mult
        )
        dc_upper, dc_middle, dc_lower = donchian_channel(highs, lows, cfg.donchian_period)

        return {
            "sma_fast": sma(closes, cfg.sma_fast_period),
            "sma_slow": sma(closes, cfg.sma_slow_period),
            "ema": ema(closes, cfg.ema_period),
            "rsi": rsi(closes, cfg.rsi_period),
            "macd": macd_line,
            "macd_signal": signal_line,
            "macd_hist": hist,
            "bb_upper": bb_upper,
            "bb_middle": bb_middle,
            "bb_lower": bb_lower,
            "bb_width": bb_width,
            "atr": atr(highs, lows, closes, cfg.atr_period),
            "keltner_upper": kc_upper,
            "keltner_middle": kc_middle,
            "keltner_lower": kc_lower,
            "chaikin": chaikin_volatility(highs, lows, cfg.chaikin_period, cfg.chaikin_lag),
            "donchian_upper": dc_upper,
            "donchian_middle": dc_middle,
            "donchian_lower": dc_lower,
            "psar": parabolic_sar(highs, lows, cfg.psar_step, cfg.psar_max_step),
        }

    @staticmethod
    def snapshot_at(
        prices: PriceChannels,
        indicators: dict[str, Channel],
        index: int,
    ) -> IndicatorSnapshot:
        """Read every indicator value at one bar index."""
        values = {name: channel[index] for name, channel in indicators.items()}
        return IndicatorSnapshot(index=index, price=prices.close[index], **values)

    def calculate_latest(self, prices: PriceChannels) -> IndicatorSnapshot | None:
        """
        Calculate indicators and read them at the latest bar only.

        Args:
            prices: Sanitized price channels (need enough history)

        Returns:
            IndicatorSnapshot for the last bar, or None for empty input
        """
        if len(prices) == 0:
            return None
        indicators = self.calculate_all(prices)
        return self.snapshot_at(prices, indicators, len(prices) - 1)
