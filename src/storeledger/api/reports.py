"""Reporting API endpoints."""

from datetime import date as date_type

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.core.db import get_db
from storeledger.core.errors import ValidationError
from storeledger.core.income_statement import compare_with_previous_period, income_statement
from storeledger.models.enums import Channel
from storeledger.models.report_schemas import IncomeStatement, IncomeStatementComparison

router = APIRouter(prefix="/reports", tags=["reports"])


def _check_range(from_date: date_type, to_date: date_type) -> None:
    if from_date > to_date:
        raise ValidationError("from_date must be on or before to_date")


@router.get("/income-statement", response_model=IncomeStatement)
async def get_income_statement(
    from_date: date_type = Query(...),
    to_date: date_type = Query(...),
    channel: Channel | None = Query(None, description="Omit for the whole business"),
    db: AsyncSession = Depends(get_db),
):
    _check_range(from_date, to_date)
    return await income_statement(db, from_date, to_date, channel)


@router.get("/income-statement/comparison", response_model=IncomeStatementComparison)
async def get_income_statement_comparison(
    from_date: date_type = Query(...),
    to_date: date_type = Query(...),
    channel: Channel | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """The range next to the equally long period right before it."""
    _check_range(from_date, to_date)
    return await compare_with_previous_period(db, from_date, to_date, channel)
