"""
Income statement: sales margin, returns, expenses and other income over a
date range, for the whole business or a single sales channel.

Manual entries split by their channel tag. In a channel view, entries tagged
with that channel are channel expenses and entries tagged `general` are
general expenses; entries of the other channels are left out. In the
business view every channel-tagged entry counts as a channel expense.
"""

from datetime import date as date_type
from datetime import timedelta
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.core.entries_aggregator import aggregate_entries
from storeledger.core.logging import get_logger
from storeledger.models.enums import Channel, EntryChannel
from storeledger.models.ledger_entry import ManualLedgerEntry
from storeledger.models.report_schemas import IncomeStatement, IncomeStatementComparison
from storeledger.models.return_ledger_delta import ReturnLedgerDelta
from storeledger.models.sale import Sale
from storeledger.models.sale_return import SaleReturn
from storeledger.utils.money import ZERO, round_money, round_ratio, to_decimal

logger = get_logger(__name__)


def previous_period(start_date: date_type, end_date: date_type) -> tuple[date_type, date_type]:
    """The equally long range ending the day before `start_date`."""
    length = (end_date - start_date).days + 1
    return start_date - timedelta(days=length), start_date - timedelta(days=1)


def split_entries(
    entries: Iterable[ManualLedgerEntry], channel: Channel | None
) -> tuple[list[ManualLedgerEntry], list[ManualLedgerEntry]]:
    """(channel entries, general entries) for the requested view."""
    channel_entries = []
    general_entries = []
    for entry in entries:
        if entry.channel == EntryChannel.GENERAL:
            general_entries.append(entry)
        elif channel is None or entry.channel.value == channel.value:
            channel_entries.append(entry)
    return channel_entries, general_entries


def build_income_statement(
    start_date: date_type,
    end_date: date_type,
    channel: Channel | None,
    sales: Iterable[Sale],
    entries: Iterable[ManualLedgerEntry],
    return_losses: Iterable[Decimal],
) -> IncomeStatement:
    """Pure assembly of the statement from already-filtered rows."""
    sale_count = 0
    gross = commissions = net = cost = shipping = margin = ZERO
    for sale in sales:
        sale_count += 1
        gross += to_decimal(sale.gross_price)
        commissions += to_decimal(sale.commission) + to_decimal(sale.vat) + to_decimal(sale.tax)
        net += to_decimal(sale.net_price)
        cost += to_decimal(sale.product_cost)
        shipping += to_decimal(sale.shipping_cost)
        margin += to_decimal(sale.margin)

    returns_loss = sum((to_decimal(loss) for loss in return_losses), ZERO)

    channel_entries, general_entries = split_entries(entries, channel)
    channel_totals = aggregate_entries(channel_entries)
    general_totals = aggregate_entries(general_entries)

    other_income = channel_totals.income_total + general_totals.income_total
    personal = channel_totals.personal_expense_total + general_totals.personal_expense_total
    operating = (
        margin
        - returns_loss
        - channel_totals.expense_total
        - general_totals.expense_total
        + other_income
    )

    return IncomeStatement(
        start_date=start_date,
        end_date=end_date,
        channel=channel,
        sale_count=sale_count,
        gross_sales=round_money(gross),
        commissions=round_money(commissions),
        net_sales=round_money(net),
        product_cost=round_money(cost),
        shipping_cost=round_money(shipping),
        gross_margin=round_money(margin),
        returns_loss=round_money(returns_loss),
        channel_expenses=channel_totals.expense_total,
        general_expenses=general_totals.expense_total,
        other_income=round_money(other_income),
        operating_result=round_money(operating),
        operating_margin=round_ratio(operating / net) if net > 0 else Decimal("0"),
        personal_expenses=round_money(personal),
        result_after_personal=round_money(operating - personal),
    )


async def income_statement(
    db: AsyncSession,
    start_date: date_type,
    end_date: date_type,
    channel: Channel | None = None,
) -> IncomeStatement:
    sales_stmt = select(Sale).where(Sale.date >= start_date, Sale.date <= end_date)
    if channel is not None:
        sales_stmt = sales_stmt.where(Sale.channel == channel)
    sales = (await db.execute(sales_stmt)).scalars().all()

    entries_stmt = select(ManualLedgerEntry).where(
        ManualLedgerEntry.date >= start_date, ManualLedgerEntry.date <= end_date
    )
    entries = (await db.execute(entries_stmt)).scalars().all()

    # Losses land on the return's completion date, under the sale's channel
    losses_stmt = (
        select(ReturnLedgerDelta.realized_loss)
        .join(SaleReturn, SaleReturn.id == ReturnLedgerDelta.return_id)
        .join(Sale, Sale.id == SaleReturn.sale_id)
        .where(ReturnLedgerDelta.date >= start_date, ReturnLedgerDelta.date <= end_date)
    )
    if channel is not None:
        losses_stmt = losses_stmt.where(Sale.channel == channel)
    losses = (await db.execute(losses_stmt)).scalars().all()

    statement = build_income_statement(start_date, end_date, channel, sales, entries, losses)
    logger.info(
        "report.income_statement",
        start_date=start_date.isoformat(),
        end_date=end_date.isoformat(),
        channel=channel.value if channel else None,
        sale_count=statement.sale_count,
        operating_result=str(statement.operating_result),
    )
    return statement


async def compare_with_previous_period(
    db: AsyncSession,
    start_date: date_type,
    end_date: date_type,
    channel: Channel | None = None,
) -> IncomeStatementComparison:
    current = await income_statement(db, start_date, end_date, channel)
    previous = await income_statement(db, *previous_period(start_date, end_date), channel)
    return IncomeStatementComparison(
        current=current,
        previous=previous,
        gross_sales_change=current.gross_sales - previous.gross_sales,
        operating_result_change=current.operating_result - previous.operating_result,
    )
