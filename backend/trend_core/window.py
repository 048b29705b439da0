"""Window selector: trailing sub-series by named timeframe.

"Current" indicator values are read from a trailing window so that they
reflect recent history only; the backtest always replays the full series.

Bar counts are trading days:
    5D = 6 (five daily changes), 1M = 22, 3M = 66, 6M = 132, 1Y = 264,
    ALL = the whole series.
"""

from __future__ import annotations

from trend_core.errors import UnknownTimeframeError
from trend_core.models.bar import Series

# timeframe -> trailing bar count (None = full series)
TIMEFRAMES: dict[str, int | None] = {
    "5D": 6,
    "1M": 22,
    "3M": 66,
    "6M": 132,
    "1Y": 264,
    "ALL": None,
}

DEFAULT_TIMEFRAME = "ALL"


def list_timeframes() -> list[str]:
    """Return timeframe names from shortest to longest."""
    return list(TIMEFRAMES)


def window_size(timeframe: str) -> int | None:
    """Return the trailing bar count for a timeframe (None = full series).

    Raises:
        UnknownTimeframeError: If the timeframe name is not known.
    """
    key = timeframe.strip().upper()
    if key not in TIMEFRAMES:
        available = ", ".join(TIMEFRAMES)
        raise UnknownTimeframeError(
            f"Unknown timeframe '{timeframe}'. Available: {available}"
        )
    return TIMEFRAMES[key]


def select_window(series: Series, timeframe: str = DEFAULT_TIMEFRAME) -> Series:
    """
    Slice a series to the trailing window of a named timeframe.

    A series shorter than the window is returned unchanged.

    Args:
        series: Full bar series
        timeframe: One of TIMEFRAMES (case-insensitive)

    Returns:
        Series holding the trailing bars
    """
    size = window_size(timeframe)
    if size is None:
        return series
    return series.tail(size)
