"""
Enums for domain models.
Enums provide type safety and clarity. Validation for categorical fields.
"""

import enum


class Channel(str, enum.Enum):
    """Where a sale was made."""

    STOREFRONT = "storefront"
    MARKETPLACE = "marketplace"
    DIRECT = "direct"


class PaymentMethod(str, enum.Enum):
    """How the buyer paid."""

    PLATFORM_PAY = "platform_pay"  # storefront platform's own checkout
    PROCESSOR = "processor"
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"


class RateCondition(str, enum.Enum):
    """Commercial condition that selects a rate-table row."""

    NORMAL = "normal"
    TRANSFER = "transfer"
    INTEREST_FREE_INSTALLMENTS = "interest_free_installments"


class SettlementRoute(str, enum.Enum):
    """Ledger balance a sale's net amount flows into."""

    PROCESSOR_PENDING = "processor_pending"
    PLATFORM_PENDING = "platform_pending"
    PROCESSOR_AVAILABLE = "processor_available"
    NONE = "none"


class ShippingStatus(str, enum.Enum):
    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    RETURNED = "returned"
    CANCELLED = "cancelled"


class ReturnStatus(str, enum.Enum):
    """Return lifecycle states. Only DELIVERED_* states are terminal."""

    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    DELIVERED_REFUND = "delivered_refund"
    DELIVERED_EXCHANGE_SAME = "delivered_exchange_same"
    DELIVERED_EXCHANGE_OTHER = "delivered_exchange_other"
    DELIVERED_NO_REFUND = "delivered_no_refund"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_RESOLUTIONS

    @property
    def resolution(self) -> "ReturnResolution | None":
        return TERMINAL_RESOLUTIONS.get(self)


class ReturnResolution(str, enum.Enum):
    REFUND = "refund"
    EXCHANGE_SAME = "exchange_same"
    EXCHANGE_OTHER = "exchange_other"
    NO_REFUND = "no_refund"

    @property
    def is_exchange(self) -> bool:
        return self in (ReturnResolution.EXCHANGE_SAME, ReturnResolution.EXCHANGE_OTHER)


TERMINAL_RESOLUTIONS = {
    ReturnStatus.DELIVERED_REFUND: ReturnResolution.REFUND,
    ReturnStatus.DELIVERED_EXCHANGE_SAME: ReturnResolution.EXCHANGE_SAME,
    ReturnStatus.DELIVERED_EXCHANGE_OTHER: ReturnResolution.EXCHANGE_OTHER,
    ReturnStatus.DELIVERED_NO_REFUND: ReturnResolution.NO_REFUND,
}


class ProcessorState(str, enum.Enum):
    """Whether the original sale's funds had cleared when the return closed."""

    AVAILABLE = "available"
    PENDING = "pending"


class EntryType(str, enum.Enum):
    EXPENSE = "expense"
    INCOME = "income"


class EntryChannel(str, enum.Enum):
    STOREFRONT = "storefront"
    MARKETPLACE = "marketplace"
    DIRECT = "direct"
    GENERAL = "general"
