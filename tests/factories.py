"""Factory classes for creating test objects."""

from datetime import date as date_type
from decimal import Decimal
from typing import Optional
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.core.pricing import calculate_sale
from storeledger.models.enums import (
    Channel,
    EntryChannel,
    EntryType,
    PaymentMethod,
    ProcessorState,
    RateCondition,
    ReturnStatus,
)
from storeledger.models.ledger_day import LedgerDay
from storeledger.models.ledger_entry import ManualLedgerEntry
from storeledger.models.product import Product
from storeledger.models.rate import Rate
from storeledger.models.sale import Sale
from storeledger.models.sale_return import SaleReturn


class ProductFactory:
    """Factory for creating Product objects."""

    @staticmethod
    async def create(
        session: AsyncSession,
        sku: Optional[str] = None,
        model: str = "Gym Bag Classic",
        unit_cost: Decimal = Decimal("2000.00"),
        sale_price: Decimal = Decimal("10000.00"),
        **kwargs,
    ) -> Product:
        product = Product(
            id=kwargs.get("id", uuid.uuid4()),
            sku=sku or f"SKU-{uuid.uuid4().hex[:8].upper()}",
            model=model,
            unit_cost=unit_cost,
            sale_price=sale_price,
            stock_own=kwargs.get("stock_own", 10),
            stock_fulfillment=kwargs.get("stock_fulfillment", 0),
            is_active=kwargs.get("is_active", True),
        )

        session.add(product)
        await session.commit()
        await session.refresh(product)

        return product


class RateFactory:
    """Factory for creating rate-table entries."""

    @staticmethod
    async def create(
        session: AsyncSession,
        channel: Channel = Channel.MARKETPLACE,
        payment_method: PaymentMethod = PaymentMethod.PROCESSOR,
        condition: RateCondition = RateCondition.NORMAL,
        commission_pct: Decimal = Decimal("15"),
        vat_pct: Decimal = Decimal("0"),
        tax_pct: Decimal = Decimal("5"),
        fixed_fee: Decimal = Decimal("0.00"),
    ) -> Rate:
        rate = Rate(
            channel=channel,
            payment_method=payment_method,
            condition=condition,
            commission_pct=commission_pct,
            vat_pct=vat_pct,
            tax_pct=tax_pct,
            fixed_fee=fixed_fee,
        )

        session.add(rate)
        await session.commit()
        await session.refresh(rate)

        return rate


class SaleFactory:
    """
    Factory for creating Sale objects directly, bypassing the ledger.

    Fees are priced from `rate` when given, otherwise taken from kwargs
    (all zero by default).
    """

    @staticmethod
    async def create(
        session: AsyncSession,
        product: Product,
        date: date_type = date_type(2024, 3, 1),
        channel: Channel = Channel.MARKETPLACE,
        payment_method: PaymentMethod = PaymentMethod.PROCESSOR,
        gross_price: Decimal = Decimal("10000.00"),
        shipping_cost: Decimal = Decimal("0.00"),
        rate: Optional[Rate] = None,
        **kwargs,
    ) -> Sale:
        sale = Sale(
            id=kwargs.get("id", uuid.uuid4()),
            sale_code=kwargs.get("sale_code", f"SL-TEST-{uuid.uuid4().hex[:8].upper()}"),
            date=date,
            buyer=kwargs.get("buyer", "Test Buyer"),
            channel=channel,
            payment_method=payment_method,
            condition=kwargs.get("condition", RateCondition.NORMAL),
            product_id=product.id,
            quantity=kwargs.get("quantity", 1),
            gross_price=gross_price,
            shipping_cost=shipping_cost,
        )

        if rate is not None:
            figures = calculate_sale(gross_price, shipping_cost, product.unit_cost, rate)
            for field, value in figures.model_dump().items():
                setattr(sale, field, value)
        else:
            sale.commission = kwargs.get("commission", Decimal("0.00"))
            sale.vat = kwargs.get("vat", Decimal("0.00"))
            sale.tax = kwargs.get("tax", Decimal("0.00"))
            sale.net_price = gross_price - sale.commission - sale.vat - sale.tax
            sale.product_cost = kwargs.get("product_cost", product.unit_cost)

        session.add(sale)
        await session.commit()
        await session.refresh(sale)

        return sale


class SaleReturnFactory:
    """Factory for creating SaleReturn objects (no delta sync)."""

    @staticmethod
    async def create(
        session: AsyncSession,
        sale: Sale,
        status: ReturnStatus = ReturnStatus.DELIVERED_REFUND,
        completed_date: Optional[date_type] = None,
        processor_state: ProcessorState = ProcessorState.AVAILABLE,
        **kwargs,
    ) -> SaleReturn:
        sale_return = SaleReturn(
            id=kwargs.get("id", uuid.uuid4()),
            sale_id=sale.id,
            claim_date=kwargs.get("claim_date", sale.date),
            completed_date=completed_date,
            status=status,
            refunded_amount=kwargs.get("refunded_amount"),
            outbound_shipping_cost=kwargs.get("outbound_shipping_cost", Decimal("0.00")),
            return_shipping_cost=kwargs.get("return_shipping_cost", Decimal("0.00")),
            new_shipment_cost=kwargs.get("new_shipment_cost", Decimal("0.00")),
            product_recoverable=kwargs.get("product_recoverable", True),
            opened_as_claim=kwargs.get("opened_as_claim", True),
            processor_state=processor_state,
            processor_retained=kwargs.get("processor_retained", False),
        )

        session.add(sale_return)
        await session.commit()
        await session.refresh(sale_return)

        return sale_return


class LedgerEntryFactory:
    """Factory for creating manual expense/income entries."""

    @staticmethod
    async def create(
        session: AsyncSession,
        date: date_type = date_type(2024, 3, 1),
        entry_type: EntryType = EntryType.EXPENSE,
        amount: Decimal = Decimal("500.00"),
        is_personal: bool = False,
        category: str = "Advertising",
        **kwargs,
    ) -> ManualLedgerEntry:
        entry = ManualLedgerEntry(
            id=kwargs.get("id", uuid.uuid4()),
            date=date,
            entry_type=entry_type,
            amount=amount,
            is_personal=is_personal,
            category=category,
            description=kwargs.get("description"),
            channel=kwargs.get("channel", EntryChannel.GENERAL),
        )

        session.add(entry)
        await session.commit()
        await session.refresh(entry)

        return entry


class LedgerDayFactory:
    """Factory for creating LedgerDay rows."""

    @staticmethod
    async def create(
        session: AsyncSession,
        date: date_type = date_type(2024, 3, 1),
        processor_available: Decimal = Decimal("0.00"),
        processor_pending: Decimal = Decimal("0.00"),
        processor_held: Decimal = Decimal("0.00"),
        platform_pending: Decimal = Decimal("0.00"),
        is_opening_balance: bool = False,
        **kwargs,
    ) -> LedgerDay:
        ledger_day = LedgerDay(
            date=date,
            processor_available=processor_available,
            processor_pending=processor_pending,
            processor_held=processor_held,
            platform_pending=platform_pending,
            processor_settled_today=kwargs.get("processor_settled_today", Decimal("0.00")),
            platform_settled_today=kwargs.get("platform_settled_today", Decimal("0.00")),
            tax_withheld_today=kwargs.get("tax_withheld_today", Decimal("0.00")),
            is_opening_balance=is_opening_balance,
            notes=kwargs.get("notes"),
        )

        session.add(ledger_day)
        await session.commit()
        await session.refresh(ledger_day)

        return ledger_day
