"""Bar file loader.

Reads daily bars from CSV or JSON files into raw row dicts. Values are
left as strings/numbers exactly as found; the sanitizer decides what is
parseable.

Supported layouts:
- CSV with a header row (date, open, high, low, close, volume, or the
  Date/ClosePrice/... column names)
- JSON list of bar objects
- JSON object with a "series" or "data" list (and an optional "symbol")
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Any

import orjson

from trend_core.models.bar import Series
from trend_core.sanitizer import drop_non_trading

logger = logging.getLogger(__name__)

_LIST_KEYS = ("series", "data")


class BarFileError(ValueError):
    """Raised when a bar file cannot be read or has an unknown layout."""


def _read_csv(path: Path) -> list[dict[str, Any]]:
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        return [
            {key.strip(): value for key, value in row.items() if key is not None}
            for row in reader
        ]


def _read_json(path: Path) -> tuple[list[dict[str, Any]], str | None]:
    try:
        payload = orjson.loads(path.read_bytes())
    except orjson.JSONDecodeError as e:
        raise BarFileError(f"{path}: invalid JSON ({e})") from e

    if isinstance(payload, list):
        return payload, None
    if isinstance(payload, dict):
        for key in _LIST_KEYS:
            rows = payload.get(key)
            if isinstance(rows, list):
                symbol = payload.get("symbol")
                return rows, symbol if isinstance(symbol, str) else None
    raise BarFileError(
        f"{path}: expected a list of bars or an object with a 'series'/'data' list"
    )


def _read(path: Path) -> tuple[list[dict[str, Any]], str | None]:
    if not path.exists():
        raise BarFileError(f"{path}: file not found")
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return _read_csv(path), None
    if suffix == ".json":
        return _read_json(path)
    raise BarFileError(f"{path}: unsupported file type '{suffix}' (expected .csv or .json)")


def load_bars(path: Path | str) -> list[dict[str, Any]]:
    """
    Load raw bar rows from a CSV or JSON file.

    Raises:
        BarFileError: If the file is missing, unreadable, or has an
            unsupported extension or layout.
    """
    rows, _ = _read(Path(path))
    logger.info("Loaded %d bars from %s", len(rows), path)
    return rows


def load_series(
    path: Path | str,
    symbol: str | None = None,
    drop_zero_volume: bool = False,
) -> Series:
    """
    Load a bar file into a Series.

    The symbol defaults to the JSON "symbol" field, then the file stem.

    Raises:
        BarFileError: As load_bars.
        SeriesOrderError: If the dates are not strictly ascending.
    """
    path = Path(path)
    rows, file_symbol = _read(path)
    if drop_zero_volume:
        kept = drop_non_trading(rows)
        logger.info("Dropped %d non-trading bars from %s", len(rows) - len(kept), path)
        rows = kept
    logger.info("Loaded %d bars from %s", len(rows), path)
    return Series.from_bars(rows, symbol=symbol or file_symbol or path.stem)
