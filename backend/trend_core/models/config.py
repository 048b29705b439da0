"""Scoring configuration model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, PositiveInt, model_validator


class ScoringConfig(BaseModel):
    """Indicator periods, scoring weights, and signal thresholds.

    One instance is shared by the live signal and the backtest replay so
    that both classify scores against the same thresholds.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Indicator periods
    sma_fast_period: PositiveInt = 50
    sma_slow_period: PositiveInt = 200
    ema_period: PositiveInt = 20
    rsi_period: PositiveInt = 14
    macd_fast_period: PositiveInt = 12
    macd_slow_period: PositiveInt = 26
    macd_signal_period: PositiveInt = 9
    bb_period: PositiveInt = 20
    bb_mult: float = 2.0
    atr_period: PositiveInt = 14
    keltner_ema_period: PositiveInt = 20
    keltner_atr_period: PositiveInt = 10
    keltner_mult: float = 2.0
    chaikin_period: PositiveInt = 10
    chaikin_lag: PositiveInt = 10
    donchian_period: PositiveInt = 20
    psar_step: float = 0.02
    psar_max_step: float = 0.2

    # Sub-score weights (trend + momentum + mean reversion + volatility = 1)
    trend_weight: float = 0.4
    momentum_weight: float = 0.3
    mean_reversion_weight: float = 0.2
    volatility_weight: float = 0.1

    # Trend: SMA gap normalized by ~2% of price, slope by ~1% of price
    trend_gap_scale: float = 0.02
    trend_slope_scale: float = 0.01
    trend_slope_lookback: PositiveInt = 5
    trend_slope_factor: float = 0.3

    # Momentum: MACD gap normalized by ~0.5% of price
    macd_gap_scale: float = 0.005
    macd_factor: float = 0.7
    rsi_factor: float = 0.3
    rsi_bullish_level: float = 55.0
    rsi_bearish_level: float = 45.0

    # Mean reversion
    band_touch_score: float = 0.8
    use_rsi_extremes: bool = True
    rsi_extreme_score: float = 0.6
    rsi_oversold: float = 30.0
    rsi_overbought: float = 70.0

    # Volatility squeeze: width at or below the trailing 20th percentile
    squeeze_window: PositiveInt = 60
    squeeze_percentile: float = 20.0
    squeeze_bias: float = 0.3

    # Signal thresholds
    buy_threshold: float = 0.20
    sell_threshold: float = -0.20

    # Backtest / reporting
    default_lookahead: PositiveInt = 5
    min_trials: int = 20
    max_reasons: PositiveInt = 3

    @model_validator(mode="after")
    def _validate(self):
        if self.sell_threshold >= self.buy_threshold:
            raise ValueError(
                f"sell_threshold ({self.sell_threshold}) must be below "
                f"buy_threshold ({self.buy_threshold})"
            )
        if self.macd_fast_period >= self.macd_slow_period:
            raise ValueError(
                "macd_fast_period must be shorter than macd_slow_period"
            )
        if not 0.0 <= self.squeeze_percentile <= 100.0:
            raise ValueError(
                f"squeeze_percentile must be within [0, 100], got {self.squeeze_percentile}"
            )
        if self.min_trials < 0:
            raise ValueError(f"min_trials must be >= 0, got {self.min_trials}")
        return self

    @property
    def warmup_bars(self) -> int:
        """Largest warm-up requirement among the scored indicators."""
        return max(
            self.sma_slow_period,
            self.sma_fast_period,
            self.macd_slow_period + self.macd_signal_period,
            self.bb_period + 1,
            self.rsi_period + 1,
        )


DEFAULT_SCORING_CONFIG = ScoringConfig()
