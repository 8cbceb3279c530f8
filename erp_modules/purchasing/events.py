"""
Events published by the Purchasing module.

Consumers:
    PurchaseOrderConfirmedEvent -> finance (creates the accounts payable)
    PurchaseOrderReceivedEvent  -> purchasing (closes the purchase request)
    PurchaseOrderCanceledEvent  -> purchasing (reopens vendor selection)
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from erp_kernel.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class PurchaseOrderConfirmedEvent(DomainEvent):
    purchase_order_id: UUID
    vendor_id: UUID
    po_number: str
    total_amount: Decimal
    currency: str


@dataclass(frozen=True, kw_only=True)
class PurchaseOrderReceivedEvent(DomainEvent):
    purchase_order_id: UUID
    purchase_request_id: UUID
    po_number: str


@dataclass(frozen=True, kw_only=True)
class PurchaseOrderCanceledEvent(DomainEvent):
    purchase_order_id: UUID
    purchase_request_id: UUID
    rfq_item_id: str
    po_number: str
