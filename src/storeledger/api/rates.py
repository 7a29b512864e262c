"""Rate table API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.core.db import get_db
from storeledger.core.errors import ConflictError, NotFoundError
from storeledger.core.logging import get_logger
from storeledger.models import Rate
from storeledger.models.rate_schemas import RateCreate, RateRead, RateUpdate

logger = get_logger(__name__)

router = APIRouter(prefix="/rates", tags=["rates"])


async def _get_rate_or_404(db: AsyncSession, rate_id: UUID) -> Rate:
    rate = await db.get(Rate, rate_id)
    if rate is None:
        raise NotFoundError("Rate", str(rate_id))
    return rate


@router.get("", response_model=list[RateRead])
async def list_rates(db: AsyncSession = Depends(get_db)):
    stmt = select(Rate).order_by(Rate.channel, Rate.payment_method, Rate.condition)
    result = await db.execute(stmt)
    return result.scalars().all()


@router.post("", response_model=RateRead, status_code=status.HTTP_201_CREATED)
async def create_rate(rate: RateCreate, db: AsyncSession = Depends(get_db)):
    """Add a rate-table entry. One entry per channel + method + condition."""
    existing = await db.scalar(
        select(Rate.id).where(
            Rate.channel == rate.channel,
            Rate.payment_method == rate.payment_method,
            Rate.condition == rate.condition,
        )
    )
    if existing is not None:
        raise ConflictError(
            "A rate already exists for this channel, payment method and condition",
            details={"rate_id": str(existing)},
        )

    rate_obj = Rate(**rate.model_dump())
    db.add(rate_obj)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError("A rate already exists for this lookup key") from e
    await db.refresh(rate_obj)

    logger.info(
        "rate.created",
        rate_id=str(rate_obj.id),
        channel=rate_obj.channel.value,
        payment_method=rate_obj.payment_method.value,
        condition=rate_obj.condition.value,
    )
    return rate_obj


@router.put("/{rate_id}", response_model=RateRead)
async def update_rate(rate_id: UUID, rate_update: RateUpdate, db: AsyncSession = Depends(get_db)):
    """Change percentages or fixed fee. Existing sales keep their stored fees."""
    rate = await _get_rate_or_404(db, rate_id)

    changes = rate_update.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(rate, field, value)

    await db.commit()
    await db.refresh(rate)

    logger.info("rate.updated", rate_id=str(rate.id), fields=sorted(changes.keys()))
    return rate


@router.delete("/{rate_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rate(rate_id: UUID, db: AsyncSession = Depends(get_db)):
    rate = await _get_rate_or_404(db, rate_id)
    await db.delete(rate)
    await db.commit()

    logger.info("rate.deleted", rate_id=str(rate_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
