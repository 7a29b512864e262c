"""
Health check endpoint.

Besides database connectivity it reports where the ledger stands: the
latest computed day and whether an opening-balance anchor exists. Always
answers 200; `status` is "degraded" only when the database is unreachable.
"""

import time
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.core.db import get_db
from storeledger.models import LedgerDay

router = APIRouter(tags=["health"])

_app_start_time: datetime | None = None


def set_app_start_time(start_time: datetime) -> None:
    global _app_start_time
    _app_start_time = start_time


def get_uptime_seconds() -> int:
    if _app_start_time is None:
        return 0
    return int((datetime.now() - _app_start_time).total_seconds())


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


async def check_database(db: AsyncSession) -> dict[str, Any]:
    start = time.perf_counter()
    try:
        await db.execute(text("SELECT 1"))
    except Exception as exc:
        return {"status": "down", "response_time_ms": _elapsed_ms(start), "error": type(exc).__name__}
    return {"status": "ok", "response_time_ms": _elapsed_ms(start)}


async def check_ledger(db: AsyncSession) -> dict[str, Any]:
    """Latest ledger day and opening-balance presence; informational only."""
    try:
        latest = (await db.execute(select(func.max(LedgerDay.date)))).scalar_one_or_none()
        anchors = (
            await db.execute(
                select(func.count()).select_from(LedgerDay).where(LedgerDay.is_opening_balance.is_(True))
            )
        ).scalar_one()
    except Exception as exc:
        return {"status": "unknown", "error": type(exc).__name__}

    return {
        "status": "ok" if latest is not None else "empty",
        "latest_day": latest.isoformat() if latest is not None else None,
        "has_opening_balance": anchors > 0,
    }


@router.get("/health", status_code=status.HTTP_200_OK, summary="Health check")
async def health_check(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    """
    Example response:
        {
            "status": "ok",
            "uptime_seconds": 3600,
            "checks": {
                "database": {"status": "ok", "response_time_ms": 5},
                "ledger": {"status": "ok", "latest_day": "2024-03-31", "has_opening_balance": true}
            }
        }
    """
    checks: dict[str, Any] = {"database": await check_database(db)}
    if checks["database"]["status"] == "ok":
        checks["ledger"] = await check_ledger(db)

    return JSONResponse(
        content={
            "status": "ok" if checks["database"]["status"] == "ok" else "degraded",
            "uptime_seconds": get_uptime_seconds(),
            "checks": checks,
        },
        status_code=status.HTTP_200_OK,
    )
