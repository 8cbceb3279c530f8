"""
Purchasing Module (``erp_modules.purchasing``).

Purchase requests, RFQ rounds with vendor selection, and purchase orders.
Publishes the purchase order confirmed/received/canceled events and
listens to the received/canceled ones to keep the request in step.
"""

from erp_modules.purchasing.events import (
    PurchaseOrderCanceledEvent,
    PurchaseOrderConfirmedEvent,
    PurchaseOrderReceivedEvent,
)
from erp_modules.purchasing.handlers import PurchaseRequestEventHandler
from erp_modules.purchasing.models import (
    PurchaseOrderStatus,
    PurchaseOrderView,
    PurchaseRequestDetailView,
    PurchaseRequestStatus,
    PurchaseRequestView,
    RfqItemStatus,
    RfqItemView,
)
from erp_modules.purchasing.selectors import PurchaseOrderSelector, PurchaseRequestSelector
from erp_modules.purchasing.service import PurchaseOrderService, PurchaseRequestService

__all__ = [
    "PurchaseOrderCanceledEvent",
    "PurchaseOrderConfirmedEvent",
    "PurchaseOrderReceivedEvent",
    "PurchaseRequestEventHandler",
    "PurchaseOrderStatus",
    "PurchaseOrderView",
    "PurchaseRequestDetailView",
    "PurchaseRequestStatus",
    "PurchaseRequestView",
    "RfqItemStatus",
    "RfqItemView",
    "PurchaseOrderSelector",
    "PurchaseRequestSelector",
    "PurchaseOrderService",
    "PurchaseRequestService",
]
