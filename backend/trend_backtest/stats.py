"""Statistics calculator for backtest trials.

Computes the overall effectiveness (hit rate in percent) and the
per-side breakdown of the trials collected by the Backtester.

Effectiveness convention:
  effectiveness = round(100 * hits / total), halves rounding up
  total = 0 -> 0
A result with fewer than ``min_trials`` trials is still computed but
reported as "insufficient signals".
"""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass, field

from trend_core.models.signal import Signal

INSUFFICIENT_SIGNALS = "insufficient signals"


def effectiveness_pct(hits: int, total: int) -> int:
    """Hit rate as an integer percentage, half rounding up (0 when total is 0)."""
    if total <= 0:
        return 0
    return int(math.floor(100.0 * hits / total + 0.5))


@dataclass(slots=True)
class Trial:
    """One BUY/SELL side change and its forward outcome."""

    index: int
    side: Signal
    score: float
    entry_price: float | None
    exit_price: float | None
    date: dt.date | None = None
    hit: bool = False


@dataclass
class SideStats:
    side: str  # "BUY" or "SELL"
    total: int = 0
    hits: int = 0

    @property
    def effectiveness(self) -> int:
        return effectiveness_pct(self.hits, self.total)


@dataclass
class BacktestResult:
    """Complete backtest results."""

    lookahead: int
    min_trials: int = 20

    # All trials, in index order
    trials: list[Trial] = field(default_factory=list)

    # Overall
    total: int = 0
    hits: int = 0
    effectiveness: int = 0

    # Breakdown
    buy_trials: int = 0
    buy_hits: int = 0
    sell_trials: int = 0
    sell_hits: int = 0

    @property
    def is_meaningful(self) -> bool:
        """True once enough trials were collected to report a percentage."""
        return self.total >= self.min_trials

    @property
    def by_side(self) -> list[SideStats]:
        return [
            SideStats(side=Signal.BUY.value, total=self.buy_trials, hits=self.buy_hits),
            SideStats(side=Signal.SELL.value, total=self.sell_trials, hits=self.sell_hits),
        ]

    def summary(self) -> str:
        """One-line effectiveness text for display."""
        if not self.is_meaningful:
            return f"{INSUFFICIENT_SIGNALS} ({self.hits}/{self.total} hits, {self.lookahead}-bar lookahead)"
        return f"{self.effectiveness}% ({self.hits}/{self.total} hits, {self.lookahead}-bar lookahead)"


class StatisticsCalculator:
    """Calculate backtest statistics from a list of trials."""

    def calculate(
        self,
        trials: list[Trial],
        lookahead: int,
        min_trials: int = 20,
    ) -> BacktestResult:
        result = BacktestResult(lookahead=lookahead, min_trials=min_trials, trials=trials)
        self._calc_overall(result)
        self._calc_by_side(result)
        return result

    def _calc_overall(self, result: BacktestResult) -> None:
        result.total = len(result.trials)
        result.hits = sum(1 for t in result.trials if t.hit)
        result.effectiveness = effectiveness_pct(result.hits, result.total)

    def _calc_by_side(self, result: BacktestResult) -> None:
        for trial in result.trials:
            if trial.side == Signal.BUY:
                result.buy_trials += 1
                result.buy_hits += trial.hit
            elif trial.side == Signal.SELL:
                result.sell_trials += 1
                result.sell_hits += trial.hit
