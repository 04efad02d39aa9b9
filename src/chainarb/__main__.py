"""
Entry point for the chainarb engines.

Usage:
    python -m chainarb feed --ticks 3
    python -m chainarb allocate --user 0xabc --bot my-bot --amount 1000
    chainarb ...  # if installed via pip
"""

import argparse
import asyncio
import sys
from collections.abc import Coroutine
from typing import Any


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="chainarb",
        description="Arbitrage opportunity valuation and bot collateral allocation",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    feed = subparsers.add_parser("feed", help="Run the valuation engine over the sample opportunities")
    feed.add_argument("--ticks", type=int, default=3, help="Number of ticks to run (default: 3)")
    feed.add_argument("--interval", type=float, default=None, help="Seconds between ticks")

    allocate = subparsers.add_parser("allocate", help="Allocate collateral for one trading bot")
    allocate.add_argument("--user", required=True, help="User wallet address")
    allocate.add_argument("--bot", required=True, help="Bot name")
    allocate.add_argument("--amount", type=float, required=True, help="Collateral amount (USD)")
    allocate.add_argument(
        "--strategy", default="arbitrage", choices=["arbitrage", "dca", "grid"], help="Bot strategy"
    )
    allocate.add_argument(
        "--risk", default="medium", choices=["low", "medium", "high"], help="Risk tolerance"
    )
    allocate.add_argument(
        "--chains", nargs="+", default=["Ethereum"], help="Supported chains (default: Ethereum)"
    )
    allocate.add_argument("--pairs", nargs="*", default=[], help="Trading pairs, e.g. WETH/USDC")
    allocate.add_argument("--token", default="USDC", help="Preferred collateral token")
    allocate.add_argument("--deadline", type=float, default=None, help="Deadline in seconds")

    return parser


async def run_feed(args: argparse.Namespace) -> int:
    """Run the valuation engine for a fixed number of ticks."""
    from chainarb.config.settings import get_settings
    from chainarb.market import (
        HttpPriceOracle,
        InMemoryOpportunityStore,
        SimulatedPriceOracle,
        seed_opportunities,
    )
    from chainarb.telemetry.metrics import MetricsCollector
    from chainarb.utils.time import format_duration_ms
    from chainarb.valuation import ValuationEngine

    settings = get_settings()
    metrics = MetricsCollector()
    oracle = (
        HttpPriceOracle(settings.price_feed_url, timeout_s=settings.oracle_timeout_s)
        if settings.price_feed_url
        else SimulatedPriceOracle()
    )
    store = InMemoryOpportunityStore(seed_opportunities())
    engine = ValuationEngine.from_settings(settings, store, oracle, metrics=metrics)
    interval = args.interval if args.interval is not None else settings.valuation_interval_s

    try:
        for tick in range(args.ticks):
            report = await engine.trigger_update()
            print(
                f"Tick {tick + 1}: examined={report.examined} updated={report.updated} "
                f"unchanged={report.unchanged} failed={report.failed} "
                f"({format_duration_ms(report.duration_ms)})"
            )
            if tick + 1 < args.ticks:
                await asyncio.sleep(interval)
    finally:
        if isinstance(oracle, HttpPriceOracle):
            await oracle.close()

    print()
    for opp in store.all():
        print(
            f"  {opp.id:<6} {opp.token_pair:<10} {opp.source_venue}/{opp.source_chain} -> "
            f"{opp.target_venue}/{opp.target_chain}  "
            f"{opp.profit_percentage:+.4f}%  ${opp.potential_profit:,.2f}"
        )
    print(f"\nWrites: {metrics.valuation_stats.writes}  Failures: {metrics.valuation_stats.failures}")
    return 0


async def run_allocate(args: argparse.Namespace) -> int:
    """Run a single allocation and print the result JSON."""
    from chainarb.allocation import AllocationEngine
    from chainarb.config.settings import get_settings
    from chainarb.core.types import AllocationRequest

    engine = AllocationEngine.from_settings(get_settings())
    request = AllocationRequest(
        user_address=args.user,
        bot_name=args.bot,
        strategy=args.strategy,
        trading_pairs=args.pairs,
        supported_chains=args.chains,
        collateral_amount=args.amount,
        preferred_collateral_token=args.token,
        risk_tolerance=args.risk,
    )
    result = await engine.allocate(request, deadline_s=args.deadline)
    print(result.to_json().decode())
    return 0 if result.success else 1


def _run(coro: Coroutine[Any, Any, int], use_uvloop: bool) -> int:
    """Run the coroutine on uvloop where enabled and supported."""
    if use_uvloop and sys.platform != "win32":
        import uvloop

        return uvloop.run(coro)
    return asyncio.run(coro)


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success).
    """
    from chainarb.config.settings import get_settings
    from chainarb.telemetry.logger import setup_logging

    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except Exception as e:
        print(f"Configuration error: {e}")
        print("\nCheck CHAINARB_* environment variables and your .env file.")
        return 1

    async_logger = setup_logging(settings.log_level, settings.log_file)
    handler = run_feed if args.command == "feed" else run_allocate

    try:
        return _run(handler(args), settings.use_uvloop)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 0
    finally:
        async_logger.stop()


if __name__ == "__main__":
    sys.exit(main())
