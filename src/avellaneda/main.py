"""Entry point for the Avellaneda-Stoikov quoting toolkit.

Usage:
    python -m avellaneda quote --mid 100 --volatility 0.2 --inventory 5
    python -m avellaneda volatility data/bars.csv --method parkinson
    python -m avellaneda --config config/avellaneda.yaml backtest data/ticks.csv
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from decimal import Decimal, InvalidOperation

from pydantic import ValidationError

from avellaneda.backtest import BacktestEngine, VecDataSource, load_bars, load_ticks
from avellaneda.core.config import AppConfig, load_config
from avellaneda.core.session import QuotingSession
from avellaneda.domain.errors import MarketMakerError
from avellaneda.monitoring.metrics import init_metrics
from avellaneda.strategy import avellaneda_stoikov
from avellaneda.strategy.volatility import VolatilityEstimator

logger = logging.getLogger(__name__)


def setup_logging(level: str, log_file: str | None = None) -> None:
    """Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file to write logs to
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        handlers=handlers,
    )


def _decimal(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation as e:
        raise argparse.ArgumentTypeError(f"invalid decimal value: {value!r}") from e


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="avellaneda",
        description="Avellaneda-Stoikov market making toolkit",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Path to configuration file",
    )

    parser.add_argument(
        "--log-level",
        "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    parser.add_argument(
        "--log-file",
        type=str,
        help="Log file path",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    quote = subparsers.add_parser("quote", help="Compute a single optimal quote (min_spread applied)")
    quote.add_argument("--mid", type=_decimal, required=True, help="Mid price")
    quote.add_argument("--volatility", type=_decimal, required=True, help="Annualized volatility")
    quote.add_argument("--inventory", type=_decimal, default=Decimal("0"), help="Signed inventory")
    quote.add_argument(
        "--time-ms",
        type=int,
        help="Time to terminal horizon in ms (default: configured terminal time)",
    )

    volatility = subparsers.add_parser("volatility", help="Estimate volatility from OHLCV bars")
    volatility.add_argument("file", help="CSV or JSON file of OHLCV bars")
    volatility.add_argument(
        "--method",
        choices=["simple", "ewma", "parkinson"],
        default="simple",
        help="Estimator",
    )
    volatility.add_argument(
        "--lambda",
        dest="lambda_",
        type=_decimal,
        default=Decimal("0.94"),
        help="EWMA decay factor",
    )
    volatility.add_argument(
        "--annualization-factor",
        type=_decimal,
        help="Multiplier applied to per-period volatility (default: sqrt(252))",
    )

    backtest = subparsers.add_parser("backtest", help="Replay market ticks through a quoting session")
    backtest.add_argument("file", help="CSV or JSON file of market ticks")
    backtest.add_argument(
        "--metrics-port",
        type=int,
        help="Expose Prometheus metrics on this port while running",
    )

    return parser.parse_args(argv)


def run_quote(args: argparse.Namespace, config: AppConfig) -> int:
    """Compute and print one quote from the configured model parameters.

    The configured min_spread is applied the same way a quoting session
    applies it, so the printed spread is the quoted ask - bid.
    """
    strategy_config = config.strategy.to_strategy_config()
    time_ms = args.time_ms if args.time_ms is not None else strategy_config.terminal_time

    reservation = avellaneda_stoikov.calculate_reservation_price(
        args.mid,
        args.inventory,
        strategy_config.risk_aversion,
        args.volatility,
        time_ms,
    )
    spread = avellaneda_stoikov.calculate_optimal_spread(
        strategy_config.risk_aversion,
        args.volatility,
        time_ms,
        strategy_config.order_intensity,
    )
    bid, ask = avellaneda_stoikov.quotes_from_spread(reservation, spread)
    bid, ask = avellaneda_stoikov.apply_min_spread(bid, ask, strategy_config.min_spread)

    print(f"reservation: {reservation}")
    print(f"spread:      {ask - bid}")
    print(f"bid:         {bid}")
    print(f"ask:         {ask}")
    return 0


def run_volatility(args: argparse.Namespace) -> int:
    """Estimate and print volatility for a bar file."""
    bars = load_bars(args.file)
    estimator = VolatilityEstimator(args.annualization_factor)

    if args.method == "parkinson":
        result = estimator.calculate_parkinson(
            [bar.high for bar in bars],
            [bar.low for bar in bars],
        )
    elif args.method == "ewma":
        result = estimator.calculate_ewma([bar.close for bar in bars], args.lambda_)
    else:
        result = estimator.calculate_simple([bar.close for bar in bars])

    logger.info(f"Estimated {args.method} volatility over {len(bars)} bars")
    print(f"{args.method} volatility: {result}")
    return 0


def run_backtest(args: argparse.Namespace, config: AppConfig) -> int:
    """Replay a tick file through a session built from config."""
    ticks = load_ticks(args.file)

    metrics = None
    metrics_port = args.metrics_port if args.metrics_port is not None else (
        config.metrics.port if config.metrics.enabled else None
    )
    if metrics_port is not None:
        metrics = init_metrics(prefix=config.metrics.prefix)
        metrics.start_server(metrics_port, config.metrics.host)

    session = QuotingSession.from_app_config(config, metrics=metrics)
    engine = BacktestEngine(session, fill_size=config.backtest.fill_size)
    result = engine.run(VecDataSource(ticks))

    print(f"ticks:          {result.total_ticks}")
    print(f"quotes:         {result.quotes_generated} ({result.fallback_quotes} fallback)")
    print(f"fills:          {result.total_fills}")
    print(f"final position: {result.final_position}")
    print(f"realized PnL:   {result.realized_pnl}")
    print(f"unrealized PnL: {result.unrealized_pnl}")
    print(f"total PnL:      {result.total_pnl}")
    print(f"max drawdown:   {result.max_drawdown}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValidationError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    if args.log_level:
        config.log_level = args.log_level

    if args.log_file:
        config.log_file = args.log_file

    setup_logging(config.log_level, config.log_file)

    try:
        if args.command == "quote":
            return run_quote(args, config)
        if args.command == "volatility":
            return run_volatility(args)
        return run_backtest(args, config)
    except (MarketMakerError, FileNotFoundError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
