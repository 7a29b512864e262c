"""Product catalog API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.core.db import get_db
from storeledger.core.errors import ConflictError, NotFoundError
from storeledger.core.logging import get_logger
from storeledger.models import Product
from storeledger.models.product_schemas import ProductCreate, ProductRead, ProductUpdate

logger = get_logger(__name__)

router = APIRouter(prefix="/products", tags=["products"])


async def _get_product_or_404(db: AsyncSession, product_id: UUID) -> Product:
    product = await db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product", str(product_id))
    return product


@router.get("", response_model=list[ProductRead])
async def list_products(
    include_inactive: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    """List products ordered by SKU."""
    stmt = select(Product).order_by(Product.sku)
    if not include_inactive:
        stmt = stmt.where(Product.is_active)
    result = await db.execute(stmt)
    return result.scalars().all()


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
async def create_product(product: ProductCreate, db: AsyncSession = Depends(get_db)):
    existing = await db.scalar(select(Product.id).where(Product.sku == product.sku))
    if existing is not None:
        raise ConflictError(f"SKU {product.sku} already exists", details={"sku": product.sku})

    product_obj = Product(**product.model_dump())
    db.add(product_obj)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError(f"SKU {product.sku} already exists") from e
    await db.refresh(product_obj)

    logger.info("product.created", product_id=str(product_obj.id), sku=product_obj.sku)
    return product_obj


@router.get("/{product_id}", response_model=ProductRead)
async def get_product(product_id: UUID, db: AsyncSession = Depends(get_db)):
    return await _get_product_or_404(db, product_id)


@router.put("/{product_id}", response_model=ProductRead)
async def update_product(
    product_id: UUID,
    product_update: ProductUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Update product details.

    Unit cost changes apply to new sales only; stored sales keep the cost
    they were priced with.
    """
    product = await _get_product_or_404(db, product_id)

    changes = product_update.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(product, field, value)

    await db.commit()
    await db.refresh(product)

    logger.info("product.updated", product_id=str(product.id), fields=sorted(changes.keys()))
    return product
