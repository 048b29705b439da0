"""Tests for the Backtester replay engine."""

import math
from datetime import date, timedelta

import pytest

from trend_backtest.engine import Backtester, run_backtest
from trend_core.errors import EmptySeriesError, EngineError, InvalidLookaheadError
from trend_core.models import ScoringConfig, Series, Signal


# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------

def make_series(closes: list, symbol: str = "TEST") -> Series:
    start = date(2023, 1, 2)
    return Series.from_bars(
        [{"date": start + timedelta(days=i), "close": c} for i, c in enumerate(closes)],
        symbol=symbol,
    )


def rise_then_fall(up: int = 300, down: int = 150) -> list[float]:
    """Climb by 1 per bar, then fall by 1 per bar."""
    closes = [100.0 + i for i in range(up)]
    peak = closes[-1]
    closes += [peak - (j + 1) for j in range(down)]
    return closes


class TestValidation:
    """Caller misuse raises EngineError subclasses."""

    def test_empty_series(self):
        with pytest.raises(EmptySeriesError):
            run_backtest(Series.from_bars([]), 5)

    @pytest.mark.parametrize("lookahead", [0, -1, 10, 11])
    def test_lookahead_out_of_range(self, lookahead):
        series = make_series([100.0] * 10)
        with pytest.raises(InvalidLookaheadError) as exc_info:
            run_backtest(series, lookahead)
        assert exc_info.value.lookahead == lookahead
        assert isinstance(exc_info.value, EngineError)
        assert isinstance(exc_info.value, ValueError)

    def test_largest_valid_lookahead(self):
        result = run_backtest(make_series([100.0] * 10), 9)
        assert result.total == 0


class TestBacktester:
    """Trial detection and effectiveness."""

    def test_flat_series_has_no_trials(self):
        result = run_backtest(make_series([100.0] * 300), 5)

        assert result.total == 0
        assert result.hits == 0
        assert result.effectiveness == 0
        assert result.trials == []
        assert not result.is_meaningful

    def test_too_short_to_warm_up(self):
        """Without 200 bars no index is ever scored."""
        result = run_backtest(make_series([100.0 + i for i in range(150)]), 5)
        assert result.total == 0

    def test_steady_rise_is_one_trial(self):
        """Repeated BUYs count once: the first ready bar."""
        result = run_backtest(make_series([100.0 + i for i in range(300)]), 5)

        assert result.total == 1
        assert result.hits == 1
        assert result.effectiveness == 100
        trial = result.trials[0]
        assert trial.index == 199
        assert trial.side == Signal.BUY
        assert trial.entry_price == 299.0
        assert trial.exit_price == 304.0
        assert trial.date == date(2023, 1, 2) + timedelta(days=199)
        assert result.buy_trials == 1
        assert result.sell_trials == 0

    def test_reversal_adds_sell_trial(self):
        result = run_backtest(make_series(rise_then_fall()), 5)

        assert result.total >= 2
        assert result.trials[0].side == Signal.BUY
        assert result.trials[1].side == Signal.SELL
        assert result.trials[1].index >= 300
        assert result.trials[1].hit

    def test_sides_alternate(self):
        """Consecutive trials are always on opposite sides."""
        closes = [200.0 + 40.0 * math.sin(i / 15.0) + i * 0.05 for i in range(600)]
        result = run_backtest(make_series(closes), 5)

        for prev, cur in zip(result.trials, result.trials[1:]):
            assert prev.side != cur.side
            assert cur.index > prev.index

    def test_invariants(self):
        closes = [200.0 + 40.0 * math.sin(i / 15.0) + i * 0.05 for i in range(600)]
        result = run_backtest(make_series(closes), 10)

        assert 0 <= result.effectiveness <= 100
        assert 0 <= result.hits <= result.total
        assert result.total == len(result.trials)
        assert result.buy_trials + result.sell_trials == result.total
        assert result.buy_hits + result.sell_hits == result.hits
        assert all(t.index + 10 < 600 for t in result.trials)
        assert result.lookahead == 10

    def test_missing_exit_close_never_hits(self):
        """A trial with no close at t + lookahead counts but misses."""
        closes = [100.0 + i for i in range(300)]
        closes[204] = None
        result = run_backtest(make_series(closes), 5)

        assert result.total == 1
        assert result.hits == 0
        assert result.trials[0].exit_price is None
        assert result.effectiveness == 0

    def test_default_lookahead_from_config(self):
        cfg = ScoringConfig(default_lookahead=3)
        result = Backtester(cfg).run(make_series([100.0 + i for i in range(300)]))
        assert result.lookahead == 3

    def test_run_backtest_uses_config_lookahead(self):
        """run_backtest and Backtester.run share the configured default."""
        series = make_series([100.0 + i for i in range(300)])

        assert run_backtest(series).lookahead == 5
        cfg = ScoringConfig(default_lookahead=3)
        result = run_backtest(series, config=cfg)
        assert result.lookahead == 3
        assert result.trials[0].exit_price == 302.0

    def test_min_trials_from_config(self):
        cfg = ScoringConfig(min_trials=1)
        result = Backtester(cfg).run(make_series([100.0 + i for i in range(300)]), 5)
        assert result.min_trials == 1
        assert result.is_meaningful
