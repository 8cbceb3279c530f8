"""
Invoice Domain Models.

Tax invoices issued to customers for a project, their line items and the
customer payments received against them (accounts receivable).
"""

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from erp_kernel.domain.values import CENT, ZERO, quantize_money, to_decimal
from erp_modules.finance.models import PaymentMethod

DEFAULT_TAX_RATE = Decimal("10.0")


class InvoiceStatus(str, Enum):
    """Tax invoice lifecycle states."""
    DRAFT = "DRAFT"
    ISSUED = "ISSUED"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


# Invoices that accept a customer payment.
RECEIVABLE_STATUSES = frozenset({
    InvoiceStatus.ISSUED,
    InvoiceStatus.PARTIALLY_PAID,
    InvoiceStatus.OVERDUE,
})

# Invoices that may be flagged OVERDUE once the due date passes.
OVERDUE_CANDIDATE_STATUSES = frozenset({InvoiceStatus.ISSUED, InvoiceStatus.PARTIALLY_PAID})


def calculate_tax(total_before_tax: Any, tax_rate: Any) -> Decimal:
    """``before * rate / 100`` rounded half-up to cents."""
    return (to_decimal(total_before_tax) * to_decimal(tax_rate) / Decimal("100")).quantize(
        CENT, rounding=ROUND_HALF_UP
    )


@dataclass(frozen=True)
class InvoiceLineInput:
    description: str
    quantity: Decimal
    unit_price: Decimal


@dataclass(frozen=True)
class InvoiceLineView:
    id: UUID
    sequence: int
    description: str
    quantity: Decimal
    unit_price: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class InvoicePaymentView:
    id: UUID
    payment_date: date
    amount: Decimal
    payment_method: PaymentMethod
    reference_number: str | None
    notes: str | None
    recorded_by_id: UUID | None


@dataclass(frozen=True)
class InvoiceView:
    """A tax invoice with its paid total derived from recorded payments."""
    id: UUID
    invoice_number: str
    project_id: UUID
    job_code: str
    customer_name: str
    delivery_id: UUID | None
    issue_date: date
    due_date: date
    issued_to_customer_date: date | None
    status: InvoiceStatus
    tax_rate: Decimal
    total_before_tax: Decimal
    total_tax: Decimal
    total_amount: Decimal
    total_paid: Decimal
    remaining_balance: Decimal
    days_overdue: int
    notes: str | None
    line_items: tuple[InvoiceLineView, ...] = ()
    payments: tuple[InvoicePaymentView, ...] = ()

    @property
    def is_fully_paid(self) -> bool:
        return self.remaining_balance <= ZERO


def line_total(quantity: Any, unit_price: Any) -> Decimal:
    return quantize_money(to_decimal(quantity) * to_decimal(unit_price))
