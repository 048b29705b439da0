"""Tests for the timeframe window selector."""

from datetime import date, timedelta

import pytest

from trend_core.errors import EngineError, UnknownTimeframeError
from trend_core.models import Bar, Series
from trend_core.window import TIMEFRAMES, list_timeframes, select_window, window_size


def make_series(n: int) -> Series:
    start = date(2023, 1, 2)
    return Series.from_bars(
        [Bar(date=start + timedelta(days=i), close=100.0 + i) for i in range(n)],
        symbol="SPY",
    )


class TestWindowSize:
    """Tests for timeframe -> bar count."""

    def test_known_sizes(self):
        assert window_size("5D") == 6
        assert window_size("1M") == 22
        assert window_size("3M") == 66
        assert window_size("6M") == 132
        assert window_size("1Y") == 264
        assert window_size("ALL") is None

    def test_case_insensitive(self):
        assert window_size(" 3m ") == 66

    def test_unknown(self):
        with pytest.raises(UnknownTimeframeError, match="Unknown timeframe '2W'"):
            window_size("2W")

    def test_unknown_is_engine_and_key_error(self):
        with pytest.raises(EngineError):
            window_size("nope")
        with pytest.raises(KeyError):
            window_size("nope")

    def test_list_order(self):
        assert list_timeframes() == ["5D", "1M", "3M", "6M", "1Y", "ALL"]
        assert set(list_timeframes()) == set(TIMEFRAMES)


class TestSelectWindow:
    """Tests for select_window()."""

    def test_trailing_bars(self):
        series = make_series(300)
        window = select_window(series, "1M")
        assert len(window) == 22
        assert window.last_date == series.last_date
        assert window[0].close == series[278].close

    def test_all_returns_full_series(self):
        series = make_series(50)
        assert select_window(series, "ALL") is series
        assert select_window(series) is series

    def test_short_series_unchanged(self):
        series = make_series(10)
        assert len(select_window(series, "1Y")) == 10

    def test_five_days_is_six_bars(self):
        assert len(select_window(make_series(30), "5D")) == 6
