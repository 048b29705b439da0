"""CLI entry point for trend analysis and backtesting.

Reads daily bars from a CSV or JSON file, prints the current signal for
the requested timeframe and the full-history backtest.

Usage:
    python -m trend_backtest --bars spy.csv
    python -m trend_backtest --bars spy.json --timeframe 3M --lookahead 10
    python -m trend_backtest --bars spy.csv --config scoring.yaml --output spy.json
"""

import argparse
import logging
import sys

from pydantic import ValidationError

from trend_core.errors import EngineError
from trend_core.window import list_timeframes

from trend_backtest.analyzer import TrendAnalyzer
from trend_backtest.config import ConfigFileError, get_settings, load_scoring_config
from trend_backtest.loader import BarFileError, load_series
from trend_backtest.report import ReportFormatter

logger = logging.getLogger("trend_backtest")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Market trend signal and backtest",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m trend_backtest --bars spy.csv
  python -m trend_backtest --bars spy.json --timeframe 3M --lookahead 10
  python -m trend_backtest --bars spy.csv --config scoring.yaml --output spy.json
        """,
    )
    parser.add_argument(
        "--bars",
        type=str,
        required=True,
        help="Bar file (.csv or .json)",
    )
    parser.add_argument(
        "--symbol",
        type=str,
        default=None,
        help="Instrument name (default: from the file)",
    )
    parser.add_argument(
        "--timeframe",
        type=str,
        default=settings.default_timeframe,
        help=f"Window for current values: {', '.join(list_timeframes())} "
             f"(default: {settings.default_timeframe})",
    )
    parser.add_argument(
        "--lookahead",
        type=int,
        default=settings.lookahead,
        help="Backtest lookahead in bars (default: from scoring config)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=str(settings.config_path) if settings.config_path else None,
        help="Scoring config YAML file",
    )
    parser.add_argument(
        "--drop-non-trading",
        action="store_true",
        help="Drop zero-volume bars before analysis",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output file path for JSON results",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = load_scoring_config(args.config)
        series = load_series(args.bars, symbol=args.symbol, drop_zero_volume=args.drop_non_trading)
        analysis = TrendAnalyzer(config).analyze(series, args.timeframe, args.lookahead)
    except (EngineError, BarFileError, ConfigFileError, ValidationError) as e:
        logger.error("%s", e)
        sys.exit(1)

    ReportFormatter.print_console(analysis)

    if args.output:
        ReportFormatter.save_json(analysis, args.output)


if __name__ == "__main__":
    main()
