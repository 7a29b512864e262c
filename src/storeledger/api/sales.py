"""Sales API endpoints."""

from datetime import date as date_type
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.core.db import get_db
from storeledger.core.errors import NotFoundError, ValidationError
from storeledger.core.pricing import price_sale
from storeledger.core.sales import create_sale, delete_sale, update_sale
from storeledger.core.sales_aggregator import settlement_contribution, settlement_route
from storeledger.models import Sale
from storeledger.models.enums import Channel, PaymentMethod
from storeledger.models.sale_schemas import (
    SaleCreate,
    SalePreview,
    SalePreviewRequest,
    SaleRead,
    SaleUpdate,
)

router = APIRouter(prefix="/sales", tags=["sales"])


async def _get_sale_or_404(db: AsyncSession, sale_id: UUID) -> Sale:
    sale = await db.get(Sale, sale_id)
    if sale is None:
        raise NotFoundError("Sale", str(sale_id))
    return sale


@router.get("", response_model=list[SaleRead])
async def list_sales(
    from_date: date_type | None = Query(None),
    to_date: date_type | None = Query(None),
    channel: Channel | None = Query(None),
    payment_method: PaymentMethod | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List sales, newest first, optionally filtered by date range and channel."""
    if from_date and to_date and from_date > to_date:
        raise ValidationError("from_date must be on or before to_date")

    stmt = select(Sale)
    if from_date is not None:
        stmt = stmt.where(Sale.date >= from_date)
    if to_date is not None:
        stmt = stmt.where(Sale.date <= to_date)
    if channel is not None:
        stmt = stmt.where(Sale.channel == channel)
    if payment_method is not None:
        stmt = stmt.where(Sale.payment_method == payment_method)
    stmt = stmt.order_by(Sale.date.desc(), Sale.created_at.desc())

    result = await db.execute(stmt)
    return result.scalars().all()


@router.post("/preview", response_model=SalePreview)
async def preview_sale(request: SalePreviewRequest, db: AsyncSession = Depends(get_db)):
    """Price a sale without saving it."""
    figures = await price_sale(
        db,
        channel=request.channel,
        payment_method=request.payment_method,
        condition=request.condition,
        product_id=request.product_id,
        quantity=request.quantity,
        gross_price=request.gross_price,
        shipping_cost=request.shipping_cost,
    )
    # Transient, never added to the session
    draft = Sale(
        channel=request.channel,
        payment_method=request.payment_method,
        gross_price=request.gross_price,
        shipping_cost=request.shipping_cost,
        commission=figures.commission,
        vat=figures.vat,
        tax=figures.tax,
    )
    return SalePreview(
        **figures.model_dump(),
        settlement_route=settlement_route(draft),
        settlement_amount=settlement_contribution(draft),
    )


@router.post("", response_model=SaleRead, status_code=status.HTTP_201_CREATED)
async def create_sale_endpoint(sale: SaleCreate, db: AsyncSession = Depends(get_db)):
    sale_obj, result = await create_sale(db, sale)
    result.raise_for_failure()
    return sale_obj


@router.get("/{sale_id}", response_model=SaleRead)
async def get_sale(sale_id: UUID, db: AsyncSession = Depends(get_db)):
    return await _get_sale_or_404(db, sale_id)


@router.patch("/{sale_id}", response_model=SaleRead)
async def update_sale_endpoint(
    sale_id: UUID,
    sale_update: SaleUpdate,
    db: AsyncSession = Depends(get_db),
):
    sale = await _get_sale_or_404(db, sale_id)
    sale, result = await update_sale(db, sale, sale_update)
    if result is not None:
        result.raise_for_failure()
    return sale


@router.delete("/{sale_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sale_endpoint(sale_id: UUID, db: AsyncSession = Depends(get_db)):
    sale = await _get_sale_or_404(db, sale_id)
    result = await delete_sale(db, sale)
    result.raise_for_failure()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
