"""Technical indicators (pure math, no I/O)."""

from trend_core.indicators.indicators import (
    IndicatorCalculator,
    atr,
    bollinger_bands,
    chaikin_volatility,
    donchian_channel,
    ema,
    keltner_channel,
    macd,
    parabolic_sar,
    rsi,
    sma,
    true_range,
)

__all__ = [
    "sma",
    "ema",
    "rsi",
    "macd",
    "bollinger_bands",
    "true_range",
    "atr",
    "keltner_channel",
    "chaikin_volatility",
    "donchian_channel",
    "parabolic_sar",
    "IndicatorCalculator",
]
