"""
Quotation Module (``erp_modules.quotation``).

Versioned customer quotations with an approval lifecycle.  Publishes
``QuotationAcceptedEvent``.
"""

from erp_modules.quotation.events import QuotationAcceptedEvent
from erp_modules.quotation.models import (
    QuotationLineInput,
    QuotationStatus,
    QuotationView,
)
from erp_modules.quotation.selectors import QuotationSelector
from erp_modules.quotation.service import QuotationService
from erp_modules.quotation.workflows import QUOTATION_WORKFLOW

__all__ = [
    "QuotationAcceptedEvent",
    "QuotationLineInput",
    "QuotationStatus",
    "QuotationView",
    "QuotationSelector",
    "QuotationService",
    "QUOTATION_WORKFLOW",
]
