"""
Delivery Domain Models.

A delivery records goods handed over to the customer against a committed
quotation.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID


class DeliveryStatus(str, Enum):
    PENDING = "PENDING"
    DELIVERED = "DELIVERED"
    RETURNED = "RETURNED"


@dataclass(frozen=True)
class DeliveryLineInput:
    description: str
    quantity_delivered: Decimal


@dataclass(frozen=True)
class DeliveryLineView:
    id: UUID
    description: str
    quantity_delivered: Decimal


@dataclass(frozen=True)
class DeliveryView:
    id: UUID
    project_id: UUID
    quotation_id: UUID
    delivery_date: date
    status: DeliveryStatus
    delivered_by_id: UUID | None
    notes: str | None
    line_items: tuple[DeliveryLineView, ...] = ()
