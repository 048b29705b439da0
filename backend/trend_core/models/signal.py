"""Indicator snapshot, score, and signal models."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from trend_core.models.config import ScoringConfig


class Signal(str, Enum):
    """Directional trading signal."""

    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


Bias = Literal["bullish", "bearish", "neutral"]

# Fields whose display name carries the configured period
_PERIOD_NAMES: dict[str, tuple[str, str]] = {
    "sma_fast": ("SMA", "sma_fast_period"),
    "sma_slow": ("SMA", "sma_slow_period"),
    "ema": ("EMA", "ema_period"),
    "rsi": ("RSI", "rsi_period"),
    "atr": ("ATR", "atr_period"),
}


class IndicatorSnapshot(BaseModel):
    """Named indicator values read at one bar index.

    ``None`` means the indicator is still warming up (or undefined) at
    that index. Serialized with the display names of the default periods
    (``SMA_50``, ...); use display_values() for another ScoringConfig.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    index: int
    price: float | None = None
    sma_fast: float | None = Field(default=None, alias="SMA_50")
    sma_slow: float | None = Field(default=None, alias="SMA_200")
    ema: float | None = Field(default=None, alias="EMA_20")
    rsi: float | None = Field(default=None, alias="RSI_14")
    macd: float | None = Field(default=None, alias="MACD")
    macd_signal: float | None = Field(default=None, alias="MACD_Signal")
    macd_hist: float | None = Field(default=None, alias="MACD_Hist")
    bb_upper: float | None = Field(default=None, alias="Bollinger_Upper")
    bb_middle: float | None = Field(default=None, alias="Bollinger_Middle")
    bb_lower: float | None = Field(default=None, alias="Bollinger_Lower")
    bb_width: float | None = Field(default=None, alias="Bollinger_Width")
    atr: float | None = Field(default=None, alias="ATR_14")
    keltner_upper: float | None = Field(default=None, alias="Keltner_Upper")
    keltner_middle: float | None = Field(default=None, alias="Keltner_Middle")
    keltner_lower: float | None = Field(default=None, alias="Keltner_Lower")
    chaikin: float | None = Field(default=None, alias="Chaikin_Volatility")
    donchian_upper: float | None = Field(default=None, alias="Donchian_Upper")
    donchian_middle: float | None = Field(default=None, alias="Donchian_Middle")
    donchian_lower: float | None = Field(default=None, alias="Donchian_Lower")
    psar: float | None = Field(default=None, alias="PSAR")

    @property
    def coverage(self) -> float:
        """Fraction of scored indicator groups with defined values."""
        parts = (
            (self.sma_fast is not None and self.sma_slow is not None)
            + (self.macd is not None and self.macd_signal is not None)
            + (self.rsi is not None)
            + (self.bb_upper is not None and self.bb_lower is not None)
        )
        return parts / 4

    def display_values(self, config: ScoringConfig | None = None) -> dict[str, float | None]:
        """Indicator values keyed by display name, periods taken from ``config``."""
        cfg = config or ScoringConfig()
        fields = type(self).model_fields
        renames = {
            fields[name].alias: f"{prefix}_{getattr(cfg, period)}"
            for name, (prefix, period) in _PERIOD_NAMES.items()
        }
        values = self.model_dump(by_alias=True, exclude={"index", "price"})
        return {renames.get(key, key): value for key, value in values.items()}


class ScoreRecord(BaseModel):
    """Confluence score at one index with the reasons that produced it."""

    score: float
    reasons: list[str] = Field(default_factory=list)

    # Clamped sub-scores, before weighting
    trend: float = 0.0
    momentum: float = 0.0
    mean_reversion: float = 0.0
    volatility: float = 0.0


class SignalResult(BaseModel):
    """Score record plus its classified signal at the latest bar."""

    score: float
    signal: Signal
    reasons: list[str] = Field(default_factory=list)
    price: float | None = None


class IndicatorSummary(BaseModel):
    """Human-readable reading of one indicator family."""

    name: str
    label: str
    bias: Bias = "neutral"
