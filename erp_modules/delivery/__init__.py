"""
Delivery Module (``erp_modules.delivery``).

Customer deliveries recorded against committed quotations.
"""

from erp_modules.delivery.models import DeliveryLineInput, DeliveryStatus, DeliveryView
from erp_modules.delivery.service import DeliveryService
from erp_modules.delivery.workflows import DELIVERY_WORKFLOW

__all__ = [
    "DeliveryLineInput",
    "DeliveryStatus",
    "DeliveryView",
    "DeliveryService",
    "DELIVERY_WORKFLOW",
]
