"""
Finance Domain Models (``erp_modules.finance.models``).

Responsibility
--------------
Value objects for accounts payable: the payable itself, the vendor
payments recorded against it, and the rule that derives a payable's
status from what has been paid.

Invariants enforced
-------------------
* All monetary fields use ``Decimal`` quantised to cents.
* ``calculate_payment_status`` is the only place the PENDING /
  PARTIALLY_PAID / PAID rule lives; selectors and the service both call
  it.  Paying exactly the total counts as fully paid.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from erp_kernel.domain.values import ZERO, quantize_money


class APStatus(str, Enum):
    """Accounts payable states."""
    PENDING = "PENDING"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


# Payables that accept another payment.
PAYABLE_STATUSES = frozenset({APStatus.PENDING, APStatus.PARTIALLY_PAID})


class PaymentMethod(str, Enum):
    """How money moved; shared by vendor payments and customer receipts."""
    BANK_TRANSFER = "BANK_TRANSFER"
    CHECK = "CHECK"
    CASH = "CASH"
    PROMISSORY_NOTE = "PROMISSORY_NOTE"
    OTHER = "OTHER"


class DisbursementCauseType(str, Enum):
    """What created the payment obligation."""
    PURCHASE_ORDER = "PURCHASE_ORDER"


def calculate_payment_status(total: Any, paid: Any) -> APStatus:
    """
    Derive the payment status from the amount due and the amount paid.

    Both amounts are compared at cent precision.
    """
    total_amount = quantize_money(total)
    paid_amount = quantize_money(paid)
    if paid_amount >= total_amount:
        return APStatus.PAID
    if paid_amount > ZERO:
        return APStatus.PARTIALLY_PAID
    return APStatus.PENDING


@dataclass(frozen=True)
class VendorPaymentView:
    id: UUID
    payment_date: date
    amount: Decimal
    payment_method: PaymentMethod
    reference_number: str | None
    notes: str | None
    recorded_by_id: UUID | None


@dataclass(frozen=True)
class AccountsPayableView:
    """
    One payable with its paid total and calculated status.

    ``stored_status`` is what the row says; ``calculated_status`` is what
    the payments say and is the one to trust.  ``payments`` is filled on
    the detail view only.
    """
    id: UUID
    cause_type: DisbursementCauseType
    cause_id: UUID
    cause_reference_number: str
    vendor_id: UUID
    vendor_name: str
    total_amount: Decimal
    total_paid: Decimal
    remaining_balance: Decimal
    currency: str
    due_date: date | None
    stored_status: APStatus
    calculated_status: APStatus
    days_overdue: int
    notes: str | None
    payments: tuple[VendorPaymentView, ...] = ()

    @property
    def is_overdue(self) -> bool:
        return self.days_overdue > 0
