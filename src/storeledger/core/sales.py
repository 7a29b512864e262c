"""Sale lifecycle: pricing, persistence and the ledger cascade it triggers."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.core.cascade import CascadeResult, cascade_from
from storeledger.core.errors import ConflictError
from storeledger.core.ledger_days import ensure_ledger_day
from storeledger.core.logging import get_logger
from storeledger.core.pricing import SaleFigures, generate_sale_code, price_sale
from storeledger.core.returns_impact import sync_sale_return_deltas
from storeledger.models.sale import Sale
from storeledger.models.sale_return import SaleReturn
from storeledger.models.sale_schemas import SaleCreate, SaleUpdate
from storeledger.utils.datetime import earliest

logger = get_logger(__name__)

# Fields that change what a sale contributes to the ledger
SALE_FINANCIAL_FIELDS = (
    "date",
    "channel",
    "payment_method",
    "condition",
    "product_id",
    "quantity",
    "gross_price",
    "shipping_cost",
)

# Fields an update may clear by sending null
SALE_CLEARABLE_FIELDS = ("tracking_url", "courier", "external_order_id")


def _apply_changes(sale: Sale, changes: dict) -> None:
    for field, value in changes.items():
        if value is not None or field in SALE_CLEARABLE_FIELDS:
            setattr(sale, field, value)


def _apply_figures(sale: Sale, figures: SaleFigures) -> None:
    sale.commission = figures.commission
    sale.vat = figures.vat
    sale.tax = figures.tax
    sale.net_price = figures.net_price
    sale.product_cost = figures.product_cost
    sale.margin = figures.margin
    sale.margin_on_price = figures.margin_on_price
    sale.margin_on_cost = figures.margin_on_cost


async def create_sale(db: AsyncSession, data: SaleCreate) -> tuple[Sale, CascadeResult]:
    """
    Price and store a sale, then cascade from its date.

    Pricing runs first, so a missing product or rate aborts before anything
    is written.
    """
    figures = await price_sale(
        db,
        channel=data.channel,
        payment_method=data.payment_method,
        condition=data.condition,
        product_id=data.product_id,
        quantity=data.quantity,
        gross_price=data.gross_price,
        shipping_cost=data.shipping_cost,
    )

    sale = Sale(sale_code=generate_sale_code(), **data.model_dump())
    _apply_figures(sale, figures)
    db.add(sale)
    await ensure_ledger_day(db, sale.date)
    await db.commit()
    await db.refresh(sale)

    logger.info(
        "sale.created",
        sale_id=str(sale.id),
        sale_code=sale.sale_code,
        date=sale.date.isoformat(),
        channel=sale.channel.value,
        payment_method=sale.payment_method.value,
        gross_price=str(sale.gross_price),
    )

    result = await cascade_from(db, sale.date)
    return sale, result


async def update_sale(
    db: AsyncSession, sale: Sale, data: SaleUpdate
) -> tuple[Sale, CascadeResult | None]:
    """
    Apply a partial update.

    Only a change to a financial field reprices the sale and cascades, from
    the earlier of the old and new dates. Cosmetic edits (buyer, tracking,
    courier...) are saved without touching the ledger.
    """
    changes = data.model_dump(exclude_unset=True)
    changed_financial = [
        field
        for field in SALE_FINANCIAL_FIELDS
        if field in changes and changes[field] is not None and changes[field] != getattr(sale, field)
    ]

    if not changed_financial:
        _apply_changes(sale, changes)
        await db.commit()
        await db.refresh(sale)
        logger.info("sale.updated", sale_id=str(sale.id), fields=sorted(changes.keys()))
        return sale, None

    merged = {field: getattr(sale, field) for field in SALE_FINANCIAL_FIELDS}
    merged.update({k: v for k, v in changes.items() if k in SALE_FINANCIAL_FIELDS and v is not None})

    # Reprice before writing anything
    figures = await price_sale(
        db,
        channel=merged["channel"],
        payment_method=merged["payment_method"],
        condition=merged["condition"],
        product_id=merged["product_id"],
        quantity=merged["quantity"],
        gross_price=merged["gross_price"],
        shipping_cost=merged["shipping_cost"],
    )

    old_date = sale.date
    _apply_changes(sale, changes)
    _apply_figures(sale, figures)

    await ensure_ledger_day(db, sale.date)
    await db.flush()
    return_dates = await sync_sale_return_deltas(db, sale.id)
    await db.commit()
    await db.refresh(sale)

    logger.info(
        "sale.updated",
        sale_id=str(sale.id),
        fields=sorted(changes.keys()),
        financial_fields=changed_financial,
        old_date=old_date.isoformat(),
        new_date=sale.date.isoformat(),
    )

    result = await cascade_from(db, earliest(old_date, sale.date, *return_dates))
    return sale, result


async def delete_sale(db: AsyncSession, sale: Sale) -> CascadeResult:
    """Delete a sale without returns and cascade from its date."""
    return_count = await db.scalar(
        select(func.count()).select_from(SaleReturn).where(SaleReturn.sale_id == sale.id)
    )
    if return_count:
        raise ConflictError(
            "Sale has returns; delete them first",
            details={"sale_id": str(sale.id), "return_count": return_count},
        )

    sale_date = sale.date
    sale_id = str(sale.id)
    await db.delete(sale)
    await db.commit()

    logger.info("sale.deleted", sale_id=sale_id, date=sale_date.isoformat())

    return await cascade_from(db, sale_date)
