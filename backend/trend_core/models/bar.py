"""Daily bar and series models."""

from __future__ import annotations

import datetime as dt
import hashlib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from trend_core.errors import SeriesOrderError


class Bar(BaseModel):
    """One dated OHLCV observation.

    Numeric fields keep the caller's raw value (number, numeric string or
    ``None``). Parsing is left to the sanitizer so that an unparsable
    field degrades to "no value" instead of rejecting the whole bar.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    date: dt.date = Field(validation_alias=AliasChoices("date", "Date"))
    open: Any = Field(default=None, validation_alias=AliasChoices("open", "OpenPrice", "Open"))
    high: Any = Field(default=None, validation_alias=AliasChoices("high", "HighPrice", "High"))
    low: Any = Field(default=None, validation_alias=AliasChoices("low", "LowPrice", "Low"))
    close: Any = Field(default=None, validation_alias=AliasChoices("close", "ClosePrice", "Close"))
    volume: Any = Field(default=None, validation_alias=AliasChoices("volume", "Volume"))

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Any:
        # API rows carry midnight timestamps ("2024-01-02T00:00:00.000Z")
        if isinstance(value, dt.datetime):
            return value.date()
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value


def _to_bar(item: Bar | Mapping[str, Any]) -> Bar:
    if isinstance(item, Bar):
        return item
    return Bar.model_validate(item)


@dataclass(frozen=True, slots=True)
class Series:
    """Ordered, read-only sequence of bars for one instrument.

    Bars must be strictly ascending by date (no duplicates). The series
    owns its bars: a list passed in is copied into a tuple.
    """

    symbol: str
    bars: tuple[Bar, ...]

    def __post_init__(self) -> None:
        bars = tuple(_to_bar(b) for b in self.bars)
        for prev, cur in zip(bars, bars[1:]):
            if cur.date <= prev.date:
                raise SeriesOrderError(
                    f"{self.symbol}: bars must be strictly ascending by date, "
                    f"got {cur.date} after {prev.date}"
                )
        object.__setattr__(self, "bars", bars)

    @classmethod
    def from_bars(
        cls, bars: Iterable[Bar | Mapping[str, Any]], symbol: str = ""
    ) -> Series:
        """Build a series from Bar models or raw mappings."""
        return cls(symbol=symbol, bars=tuple(bars))

    def __len__(self) -> int:
        return len(self.bars)

    def __iter__(self):
        return iter(self.bars)

    def __getitem__(self, index: int) -> Bar:
        return self.bars[index]

    @property
    def first_date(self) -> dt.date | None:
        return self.bars[0].date if self.bars else None

    @property
    def last_date(self) -> dt.date | None:
        return self.bars[-1].date if self.bars else None

    def tail(self, n: int) -> Series:
        """Return a new series holding the trailing ``n`` bars."""
        if n >= len(self.bars):
            return self
        return Series(symbol=self.symbol, bars=self.bars[len(self.bars) - n :])

    @property
    def content_hash(self) -> str:
        """Deterministic hash of the bar contents, used as a cache key."""
        digest = hashlib.sha256(self.symbol.encode())
        for bar in self.bars:
            # Raw fields may hold values JSON cannot encode
            digest.update(bar.model_dump_json(fallback=repr).encode())
        return digest.hexdigest()[:32]
