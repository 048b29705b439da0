"""Nullable numeric channel helpers.

A channel is a list with one entry per bar; ``None`` (NO_VALUE) marks a
warm-up gap or an undefined computation. Helpers here propagate ``None``
instead of coercing it to zero.
"""

from __future__ import annotations

import math
from typing import Callable, Optional, Sequence

NO_VALUE = None

Value = Optional[float]
Channel = list[Optional[float]]


def is_defined(value: Value) -> bool:
    """Check that a value is a finite number (not None/NaN/inf)."""
    return value is not None and math.isfinite(value)


def empty_channel(length: int) -> Channel:
    """Return a channel of ``length`` NO_VALUE entries."""
    return [NO_VALUE] * length


def combine(fn: Callable[..., float], *channels: Sequence[Value]) -> Channel:
    """Apply ``fn`` index by index where every input is defined.

    Indices where any input is NO_VALUE, or where ``fn`` returns a
    non-finite result, yield NO_VALUE.
    """
    out: Channel = []
    for values in zip(*channels):
        if all(v is not None for v in values):
            result = fn(*values)
            out.append(result if is_defined(result) else NO_VALUE)
        else:
            out.append(NO_VALUE)
    return out


def safe_div(numerator: Value, denominator: Value) -> Value:
    """Divide, returning NO_VALUE for missing operands or a zero denominator."""
    if numerator is None or denominator is None or denominator == 0:
        return NO_VALUE
    return numerator / denominator


def clamp(x: float, lo: float = -1.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, x))


def sign(x: float) -> int:
    if x > 0:
        return 1
    if x < 0:
        return -1
    return 0


def value_at(channel: Sequence[Value], index: int) -> Value:
    """Read a channel entry, NO_VALUE when the index is out of range."""
    if 0 <= index < len(channel):
        return channel[index]
    return NO_VALUE
