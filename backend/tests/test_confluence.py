"""Tests for the confluence scorer and signal classifier."""

import pytest

from trend_core.models import ScoreRecord, ScoringConfig, Signal
from trend_core.scoring import ConfluenceScorer, classify, floor_percentile


# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------

CHANNEL_NAMES = (
    "sma_fast", "sma_slow", "rsi", "macd", "macd_signal",
    "bb_upper", "bb_lower", "bb_width",
)


def make_channels(n: int = 1, **values) -> dict:
    """Build indicator channels of length ``n``.

    A scalar fills the whole channel; a list is used as-is. Channels not
    given are all None.
    """
    channels = {name: [None] * n for name in CHANNEL_NAMES}
    for name, value in values.items():
        channels[name] = list(value) if isinstance(value, list) else [value] * n
    return channels


class TestFloorPercentile:
    """Tests for the lower-rank percentile."""

    def test_median(self):
        assert floor_percentile([5.0, 1.0, 3.0, None, 2.0, 4.0], 50) == 3.0

    def test_bounds(self):
        values = [4.0, 1.0, 9.0]
        assert floor_percentile(values, 0) == 1.0
        assert floor_percentile(values, 100) == 9.0

    def test_no_interpolation(self):
        # floor(0.2 * 3) = 0 -> smallest value
        assert floor_percentile([10.0, 20.0, 30.0, 40.0], 20) == 10.0

    def test_empty(self):
        assert floor_percentile([None, None], 20) is None


class TestConfluenceScorer:
    """Tests for ConfluenceScorer.score_at."""

    def test_price_unavailable(self):
        scorer = ConfluenceScorer()
        record = scorer.score_at(0, [None], make_channels())
        assert record.score == 0.0
        assert record.reasons == ["Price unavailable"]

    def test_nothing_ready(self):
        """With no indicators every family reports not ready."""
        record = ConfluenceScorer().score_at(0, [100.0], make_channels())
        assert record.score == 0.0
        assert record.reasons == [
            "MA50/MA200 not ready",
            "MACD not ready",
            "RSI not ready",
            "Bollinger not ready",
        ]

    def test_fast_ma_only(self):
        record = ConfluenceScorer().score_at(0, [100.0], make_channels(sma_fast=99.0))
        assert record.trend == 0.0
        assert record.reasons[0] == "Price > MA50 (MA200 not ready)"

    def test_trend_gap(self):
        """A gap of 2% of price saturates the trend sub-score."""
        record = ConfluenceScorer().score_at(
            0, [100.0], make_channels(sma_fast=102.0, sma_slow=100.0)
        )
        assert record.trend == pytest.approx(1.0)
        assert record.score == pytest.approx(0.4)
        assert record.reasons[0] == "MA50 > MA200"

    def test_trend_slope(self):
        """SMA50 slope over 5 bars adds 0.3 x the normalized slope."""
        fast = [101.0] * 10
        fast[4] = 100.0
        record = ConfluenceScorer().score_at(
            9, [100.0] * 10, make_channels(10, sma_fast=fast, sma_slow=100.0)
        )
        # gap 1 / 2 = 0.5, slope 1 / 1 = 1 -> 0.5 + 0.3
        assert record.trend == pytest.approx(0.8)

    def test_bearish_trend(self):
        record = ConfluenceScorer().score_at(
            0, [100.0], make_channels(sma_fast=97.0, sma_slow=100.0)
        )
        assert record.trend == pytest.approx(-1.0)
        assert "MA50 < MA200" in record.reasons

    def test_momentum(self):
        record = ConfluenceScorer().score_at(
            0, [100.0], make_channels(macd=0.25, macd_signal=0.0, rsi=60.0)
        )
        # 0.7 * (0.25 / 0.5) + 0.3 * (10 / 50)
        assert record.momentum == pytest.approx(0.41)
        assert record.score == pytest.approx(0.3 * 0.41)
        assert "MACD > Signal" in record.reasons
        assert "RSI > 50" in record.reasons

    def test_rsi_dead_zone(self):
        """RSI between 45 and 55 scores but adds no reason."""
        record = ConfluenceScorer().score_at(0, [100.0], make_channels(rsi=52.0))
        assert record.momentum == pytest.approx(0.3 * 0.04)
        assert not any(r.startswith("RSI") for r in record.reasons)

    def test_oversold_band_touch(self):
        """Lower band touch and RSI oversold both push the score up."""
        record = ConfluenceScorer().score_at(
            0, [100.0], make_channels(bb_upper=110.0, bb_lower=100.5, rsi=25.0)
        )
        assert record.mean_reversion == pytest.approx(1.0)
        assert record.reasons == [
            "MA50/MA200 not ready",
            "MACD not ready",
            "RSI < 50",
            "Price ≤ Lower Band",
            "RSI ≤ 30 (Oversold)",
        ]

    def test_overbought_band_touch(self):
        record = ConfluenceScorer().score_at(
            0, [111.0], make_channels(bb_upper=110.0, bb_lower=100.0, rsi=75.0)
        )
        assert record.mean_reversion == pytest.approx(-1.0)
        assert "Price ≥ Upper Band" in record.reasons
        assert "RSI ≥ 70 (Overbought)" in record.reasons

    def test_rsi_extremes_disabled(self):
        scorer = ConfluenceScorer(ScoringConfig(use_rsi_extremes=False))
        record = scorer.score_at(
            0, [100.0], make_channels(bb_upper=110.0, bb_lower=100.5, rsi=25.0)
        )
        assert record.mean_reversion == pytest.approx(0.8)
        assert "RSI ≤ 30 (Oversold)" not in record.reasons

    def test_volatility_squeeze(self):
        """Width at its trailing 20th percentile biases toward MACD."""
        widths = [0.1] * 60 + [0.01]
        channels = make_channels(61, bb_width=widths, macd=1.0, macd_signal=0.0)
        record = ConfluenceScorer().score_at(60, [100.0] * 61, channels)

        assert record.volatility == pytest.approx(0.3)
        assert "Volatility squeeze (narrow Bollinger)" in record.reasons

    def test_volatility_needs_history(self):
        widths = [0.1] * 59 + [0.01]
        channels = make_channels(60, bb_width=widths, macd=1.0, macd_signal=0.0)
        record = ConfluenceScorer().score_at(59, [100.0] * 60, channels)
        assert record.volatility == 0.0

    def test_no_squeeze_when_wide(self):
        widths = [0.1] * 60 + [0.2]
        channels = make_channels(61, bb_width=widths, macd=1.0, macd_signal=0.0)
        record = ConfluenceScorer().score_at(60, [100.0] * 61, channels)
        assert record.volatility == 0.0
        assert "Volatility squeeze (narrow Bollinger)" not in record.reasons

    def test_score_clamped(self):
        """Maximal bullish readings stay within [-1, 1]."""
        fast = [110.0] * 10
        fast[4] = 90.0
        channels = make_channels(
            10, sma_fast=fast, sma_slow=80.0, macd=5.0, macd_signal=0.0,
            rsi=25.0, bb_upper=120.0, bb_lower=101.0,
        )
        record = ConfluenceScorer().score_at(9, [100.0] * 10, channels)
        assert -1.0 <= record.score <= 1.0
        assert record.score == pytest.approx(0.4 + 0.3 * (0.7 - 0.15) + 0.2)


class TestClassify:
    """Tests for the signal classifier."""

    def test_thresholds_inclusive(self):
        assert classify(0.20) == Signal.BUY
        assert classify(-0.20) == Signal.SELL

    def test_hold_band(self):
        assert classify(0.19) == Signal.HOLD
        assert classify(-0.19) == Signal.HOLD
        assert classify(0.0) == Signal.HOLD

    def test_score_record(self):
        assert classify(ScoreRecord(score=0.9)) == Signal.BUY

    def test_custom_thresholds(self):
        cfg = ScoringConfig(buy_threshold=0.35, sell_threshold=-0.35)
        assert classify(0.3, cfg) == Signal.HOLD
        assert classify(-0.4, cfg) == Signal.SELL
