"""
Invoice Module (``erp_modules.invoice``).

Customer tax invoices, customer payments and AR aging.
"""

from erp_modules.invoice.models import (
    InvoiceLineInput,
    InvoiceLineView,
    InvoicePaymentView,
    InvoiceStatus,
    InvoiceView,
    calculate_tax,
)
from erp_modules.invoice.selectors import AR_AGING_BANDS, InvoiceSelector
from erp_modules.invoice.service import InvoiceService
from erp_modules.invoice.workflows import INVOICE_WORKFLOW

__all__ = [
    "InvoiceLineInput",
    "InvoiceLineView",
    "InvoicePaymentView",
    "InvoiceStatus",
    "InvoiceView",
    "calculate_tax",
    "AR_AGING_BANDS",
    "InvoiceSelector",
    "InvoiceService",
    "INVOICE_WORKFLOW",
]
