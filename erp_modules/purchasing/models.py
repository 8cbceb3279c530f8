"""
Purchasing Domain Models.

The nouns of purchasing: purchase requests, the RFQ items sent to vendors
for each request, and the purchase orders placed with the chosen vendor.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID


class PurchaseRequestStatus(str, Enum):
    """Purchase request lifecycle states."""
    DRAFT = "DRAFT"
    RFQ_SENT = "RFQ_SENT"
    VENDOR_SELECTED = "VENDOR_SELECTED"
    CLOSED = "CLOSED"
    CANCELED = "CANCELED"


class RfqItemStatus(str, Enum):
    """State of one vendor's quote request."""
    SENT = "SENT"
    REPLIED = "REPLIED"
    SELECTED = "SELECTED"
    REJECTED = "REJECTED"
    NO_RESPONSE = "NO_RESPONSE"


class PurchaseOrderStatus(str, Enum):
    """Purchase order lifecycle states."""
    DRAFT = "DRAFT"
    SENT = "SENT"
    CONFIRMED = "CONFIRMED"
    RECEIVED = "RECEIVED"
    CANCELED = "CANCELED"


# RFQ items a purchase order may be raised from.
ORDERABLE_RFQ_STATUSES = frozenset({RfqItemStatus.REPLIED, RfqItemStatus.SELECTED})


@dataclass(frozen=True)
class RfqItemView:
    item_id: str
    vendor_id: UUID
    vendor_name: str
    status: RfqItemStatus
    quoted_price: Decimal | None
    quoted_lead_time: int | None
    notes: str | None
    sent_at: datetime | None
    replied_at: datetime | None


@dataclass(frozen=True)
class PurchaseRequestView:
    """Flattened list row for a purchase request."""
    id: UUID
    request_number: str
    project_id: UUID | None
    job_code: str | None
    description: str
    quantity: Decimal
    uom: str
    required_date: date
    status: PurchaseRequestStatus
    rfq_item_count: int


@dataclass(frozen=True)
class PurchaseRequestDetailView:
    id: UUID
    request_number: str
    project_id: UUID | None
    job_code: str | None
    description: str
    quantity: Decimal
    uom: str
    required_date: date
    status: PurchaseRequestStatus
    rfq_items: tuple[RfqItemView, ...]

    @property
    def selected_item(self) -> RfqItemView | None:
        for item in self.rfq_items:
            if item.status == RfqItemStatus.SELECTED:
                return item
        return None


@dataclass(frozen=True)
class PurchaseOrderView:
    id: UUID
    po_number: str
    purchase_request_id: UUID
    request_number: str
    rfq_item_id: str
    project_id: UUID | None
    job_code: str | None
    vendor_id: UUID
    vendor_name: str
    order_date: date
    expected_delivery_date: date
    total_amount: Decimal
    currency: str
    status: PurchaseOrderStatus
    notes: str | None
