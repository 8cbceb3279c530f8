"""
Quotation Domain Models.

A quotation is a versioned price offer for a project.  Each version owns
its line items; the total is always the sum of the line totals.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID


class QuotationStatus(str, Enum):
    """Quotation lifecycle states."""
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    SENDING = "SENDING"
    SENT = "SENT"
    ACCEPTED = "ACCEPTED"


# A new version may be cut from a quotation in one of these states.
VERSIONABLE_STATUSES = frozenset({
    QuotationStatus.APPROVED,
    QuotationStatus.REJECTED,
    QuotationStatus.SENT,
    QuotationStatus.ACCEPTED,
})

# Quotations that commit the company to a price: deliveries and invoices
# may only be raised against these.
COMMITTED_STATUSES = frozenset({
    QuotationStatus.APPROVED,
    QuotationStatus.SENT,
    QuotationStatus.ACCEPTED,
})


@dataclass(frozen=True)
class QuotationLineInput:
    """Caller-supplied line item."""
    description: str
    quantity: Decimal
    unit_price: Decimal
    notes: str | None = None


@dataclass(frozen=True)
class QuotationLineView:
    id: UUID
    sequence: int
    description: str
    quantity: Decimal
    unit_price: Decimal
    line_total: Decimal
    notes: str | None


@dataclass(frozen=True)
class QuotationView:
    id: UUID
    project_id: UUID
    job_code: str
    version: int
    status: QuotationStatus
    quotation_date: date
    validity_days: int
    total_amount: Decimal
    notes: str | None
    rejection_reason: str | None
    approved_at: datetime | None
    accepted_at: datetime | None
    line_items: tuple[QuotationLineView, ...] = ()
