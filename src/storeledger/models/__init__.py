"""Domain models package."""

from storeledger.models.enums import (
    Channel,
    EntryChannel,
    EntryType,
    PaymentMethod,
    ProcessorState,
    RateCondition,
    ReturnResolution,
    ReturnStatus,
    SettlementRoute,
    ShippingStatus,
)
from storeledger.models.ledger_day import LedgerDay
from storeledger.models.ledger_entry import ManualLedgerEntry
from storeledger.models.product import Product
from storeledger.models.rate import Rate
from storeledger.models.return_ledger_delta import ReturnLedgerDelta
from storeledger.models.sale import Sale
from storeledger.models.sale_return import SaleReturn

__all__ = [
    "Channel",
    "EntryChannel",
    "EntryType",
    "LedgerDay",
    "ManualLedgerEntry",
    "PaymentMethod",
    "ProcessorState",
    "Product",
    "Rate",
    "RateCondition",
    "ReturnLedgerDelta",
    "ReturnResolution",
    "ReturnStatus",
    "Sale",
    "SaleReturn",
    "SettlementRoute",
    "ShippingStatus",
]
