"""
Recalculate the settlement ledger from a date, outside any request.

Usage:
    storeledger-recalculate --from 2024-03-01
"""

import argparse
import asyncio
import sys
from datetime import date

from storeledger.core.cascade import CascadeResult, cascade_from
from storeledger.core.db import AsyncSessionLocal, dispose_engine
from storeledger.core.logging import configure_logging, get_logger

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Recalculate ledger days from a date onward")
    parser.add_argument(
        "--from",
        dest="from_date",
        required=True,
        type=date.fromisoformat,
        help="First day to recalculate (YYYY-MM-DD)",
    )
    return parser.parse_args(argv)


async def recalculate(from_date: date) -> CascadeResult:
    try:
        async with AsyncSessionLocal() as db:
            return await cascade_from(db, from_date)
    finally:
        await dispose_engine()


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = parse_args(argv)
    logger.info("recalculate.start", from_date=args.from_date.isoformat())

    result = asyncio.run(recalculate(args.from_date))

    if not result.ok:
        print(
            f"Recalculation stopped on {result.failed_date.isoformat()}: {result.error}",
            file=sys.stderr,
        )
        print(f"Days committed before the failure: {len(result.committed_dates)}", file=sys.stderr)
        return 1

    print(
        f"Recalculated {len(result.committed_dates)} day(s) from {args.from_date.isoformat()}"
        f" ({len(result.opening_balance_dates)} opening-balance day(s) kept)"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
