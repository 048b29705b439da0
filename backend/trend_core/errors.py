"""Caller-misuse errors raised by the engine.

Insufficient history and unparsable values are not errors: they surface
as ``None`` entries in indicator channels. Only requests where no
meaningful computation is possible raise.
"""


class EngineError(ValueError):
    """Base class for engine errors caused by invalid caller input."""


class EmptySeriesError(EngineError):
    """Raised when an operation needs at least one bar."""


class InvalidLookaheadError(EngineError):
    """Raised when the backtest lookahead does not fit inside the series."""

    def __init__(self, lookahead: int, length: int):
        self.lookahead = lookahead
        self.length = length
        super().__init__(
            f"lookahead must be in [1, {length - 1}] for a series of "
            f"{length} bars, got {lookahead}"
        )


class SeriesOrderError(EngineError):
    """Raised when bars are not strictly ascending by date."""


class UnknownTimeframeError(EngineError, KeyError):
    """Raised when a window is requested by an unknown timeframe name."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
