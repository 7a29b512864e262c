"""Pydantic schemas for the income statement report."""

from datetime import date as date_type
from decimal import Decimal

from pydantic import BaseModel

from storeledger.models.enums import Channel


class IncomeStatement(BaseModel):
    """
    Profit and loss over a date range, for one channel or for the business.

    operating_result = gross_margin - returns_loss - channel_expenses
                       - general_expenses + other_income

    Personal expenses are listed but stay out of the operating result.
    """

    start_date: date_type
    end_date: date_type
    channel: Channel | None

    sale_count: int
    gross_sales: Decimal
    commissions: Decimal
    net_sales: Decimal
    product_cost: Decimal
    shipping_cost: Decimal
    gross_margin: Decimal

    returns_loss: Decimal
    channel_expenses: Decimal
    general_expenses: Decimal
    other_income: Decimal
    operating_result: Decimal
    operating_margin: Decimal

    personal_expenses: Decimal
    result_after_personal: Decimal


class IncomeStatementComparison(BaseModel):
    """A period next to the equally long period right before it."""

    current: IncomeStatement
    previous: IncomeStatement
    gross_sales_change: Decimal
    operating_result_change: Decimal
