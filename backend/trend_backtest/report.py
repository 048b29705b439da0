"""Report formatting for trend analyses.

Outputs results to console (formatted tables) and JSON files.
"""

from __future__ import annotations

import json
from datetime import date
from enum import Enum

from trend_backtest.analyzer import TrendAnalysis
from trend_backtest.stats import INSUFFICIENT_SIGNALS


class ReportEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, date):
            return obj.isoformat()
        return super().default(obj)


def _fmt(value: float | None, spec: str = ".2f") -> str:
    return "n/a" if value is None else format(value, spec)


class ReportFormatter:
    """Format trend analyses for display and export."""

    @staticmethod
    def print_console(analysis: TrendAnalysis) -> None:
        """Print formatted report to console."""
        s = analysis.snapshot
        sig = analysis.signal
        bt = analysis.backtest

        print("\n" + "=" * 70)
        print(f"  TREND ANALYSIS — {analysis.symbol or 'series'} ({analysis.timeframe})")
        print("=" * 70)
        as_of = analysis.as_of.isoformat() if analysis.as_of else "n/a"
        print(f"  As of:       {as_of}")
        print(f"  Price:       {_fmt(s.price)}")

        # Signal
        print("\n" + "-" * 70)
        print("  SIGNAL")
        print("-" * 70)
        print(f"  Signal:      {sig.signal.value}")
        print(f"  Score:       {sig.score:+.3f}")
        print(f"  Confidence:  {analysis.confidence * 100:.0f}%")
        print(f"  Reasons:     {analysis.reason_text}")

        # Indicator summaries
        print("\n" + "-" * 70)
        print("  INDICATORS")
        print("-" * 70)
        print(f"  {'Indicator':<12} {'Reading':<30} {'Bias':>8}")
        for summary in analysis.summaries:
            print(f"  {summary.name:<12} {summary.label:<30} {summary.bias:>8}")

        # Snapshot values
        print("\n" + "-" * 70)
        print("  VALUES")
        print("-" * 70)
        values = s.display_values(analysis.config)
        for name, value in values.items():
            print(f"  {name:<20} {_fmt(value, '>12.4f'):>12}")

        # Backtest
        print("\n" + "-" * 70)
        print(f"  BACKTEST ({bt.lookahead}-bar lookahead, full history)")
        print("-" * 70)
        print(f"  Trials:         {bt.total}")
        print(f"  Hits:           {bt.hits}")
        if bt.is_meaningful:
            print(f"  Effectiveness:  {bt.effectiveness}%")
        else:
            print(f"  Effectiveness:  {INSUFFICIENT_SIGNALS} (< {bt.min_trials} trials)")
        print(f"\n  {'Side':<12} {'Trials':>6} {'Hits':>6} {'Hit%':>6}")
        for side in bt.by_side:
            print(f"  {side.side:<12} {side.total:>6} {side.hits:>6} {side.effectiveness:>5}%")

        print("\n" + "=" * 70)

    @staticmethod
    def to_dict(analysis: TrendAnalysis) -> dict:
        """Convert an analysis to a JSON-serializable dict."""
        bt = analysis.backtest
        return {
            "metadata": {
                "symbol": analysis.symbol,
                "timeframe": analysis.timeframe,
                "as_of": analysis.as_of,
            },
            "signal": {
                "signal": analysis.signal.signal,
                "score": round(analysis.signal.score, 4),
                "confidence": round(analysis.confidence, 4),
                "reasons": analysis.signal.reasons,
                "reason_text": analysis.reason_text,
            },
            "indicators": {
                "index": analysis.snapshot.index,
                "price": analysis.snapshot.price,
                **analysis.snapshot.display_values(analysis.config),
            },
            "summaries": [
                {"name": s.name, "label": s.label, "bias": s.bias}
                for s in analysis.summaries
            ],
            "backtest": {
                "lookahead": bt.lookahead,
                "total": bt.total,
                "hits": bt.hits,
                "effectiveness": bt.effectiveness,
                "is_meaningful": bt.is_meaningful,
                "summary": bt.summary(),
                "by_side": [
                    {
                        "side": s.side,
                        "total": s.total,
                        "hits": s.hits,
                        "effectiveness": s.effectiveness,
                    }
                    for s in bt.by_side
                ],
                "trials": [
                    {
                        "index": t.index,
                        "date": t.date,
                        "side": t.side,
                        "score": round(t.score, 4),
                        "entry_price": t.entry_price,
                        "exit_price": t.exit_price,
                        "hit": t.hit,
                    }
                    for t in bt.trials
                ],
            },
        }

    @staticmethod
    def save_json(analysis: TrendAnalysis, filepath: str) -> None:
        """Save an analysis to a JSON file."""
        data = ReportFormatter.to_dict(analysis)
        with open(filepath, "w") as f:
            json.dump(data, f, indent=2, cls=ReportEncoder)
        print(f"\nResults saved to {filepath}")
