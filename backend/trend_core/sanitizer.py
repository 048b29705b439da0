"""Series sanitizer: raw bars to parallel numeric channels.

Bars arrive from storage or an API with string-typed numbers, missing
fields, and the occasional junk value. The sanitizer only parses; it
never drops or reorders bars, so channel index ``i`` is always bar ``i``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from trend_core.models.bar import Bar, Series
from trend_core.nullable import Channel

logger = logging.getLogger(__name__)

# Source rows use either plain OHLCV keys or the *Price column names
_FIELD_KEYS: dict[str, tuple[str, ...]] = {
    "open": ("open", "OpenPrice", "Open"),
    "high": ("high", "HighPrice", "High"),
    "low": ("low", "LowPrice", "Low"),
    "close": ("close", "ClosePrice", "Close"),
    "volume": ("volume", "Volume"),
    "date": ("date", "Date"),
}


@dataclass(slots=True)
class PriceChannels:
    """Parallel numeric channels, one entry per input bar."""

    close: Channel = field(default_factory=list)
    high: Channel = field(default_factory=list)
    low: Channel = field(default_factory=list)
    volume: Channel = field(default_factory=list)
    dates: list[date | None] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.close)

    @property
    def has_ranges(self) -> bool:
        """True if at least one bar has both high and low."""
        return any(h is not None and l is not None for h, l in zip(self.high, self.low))


def to_number(value: Any) -> float | None:
    """Parse a raw field value as a finite float.

    Accepts ints, floats, Decimals and numeric strings (surrounding
    whitespace and thousands separators allowed). Anything else,
    including booleans, NaN and infinities, becomes None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return None
    elif not isinstance(value, (int, float, Decimal)):
        return None
    try:
        number = float(value)
    except (OverflowError, ValueError):
        # too large for a float, or a signaling NaN Decimal
        return None
    return number if math.isfinite(number) else None


def _get_field(bar: Bar | Mapping[str, Any], name: str) -> Any:
    if isinstance(bar, Bar):
        return getattr(bar, name)
    for key in _FIELD_KEYS[name]:
        if key in bar:
            return bar[key]
    return None


def sanitize(bars: Series | Iterable[Bar | Mapping[str, Any]]) -> PriceChannels:
    """Normalize bars into close/high/low/volume channels.

    Args:
        bars: A Series, or any iterable of Bar models / raw mappings

    Returns:
        PriceChannels aligned 1:1 with the input order
    """
    channels = PriceChannels()
    for bar in bars:
        channels.close.append(to_number(_get_field(bar, "close")))
        channels.high.append(to_number(_get_field(bar, "high")))
        channels.low.append(to_number(_get_field(bar, "low")))
        channels.volume.append(to_number(_get_field(bar, "volume")))
        raw_date = _get_field(bar, "date")
        channels.dates.append(raw_date if isinstance(raw_date, date) else None)

    missing = sum(1 for c in channels.close if c is None)
    if missing:
        logger.debug("Sanitized %d bars, %d without a usable close", len(channels), missing)
    return channels


def drop_non_trading(
    bars: Iterable[Bar | Mapping[str, Any]],
) -> list[Bar | Mapping[str, Any]]:
    """Remove zero-volume bars (holidays, suspended sessions).

    Bars without a volume value are kept. This is a caller-side pre-filter;
    sanitize() itself never drops bars.
    """
    kept = []
    for bar in bars:
        volume = to_number(_get_field(bar, "volume"))
        if volume is not None and volume == 0:
            continue
        kept.append(bar)
    return kept
