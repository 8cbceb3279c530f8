"""
Finance Module (``erp_modules.finance``).

Accounts payable created from confirmed purchase orders, vendor payments,
and the calculated-status and aging read views over them.
"""

from erp_modules.finance.handlers import AccountsPayableEventHandler
from erp_modules.finance.models import (
    AccountsPayableView,
    APStatus,
    DisbursementCauseType,
    PaymentMethod,
    VendorPaymentView,
    calculate_payment_status,
)
from erp_modules.finance.selectors import AP_AGING_BANDS, AccountsPayableSelector
from erp_modules.finance.service import AccountsPayableService
from erp_modules.finance.workflows import ACCOUNTS_PAYABLE_WORKFLOW

__all__ = [
    "AccountsPayableEventHandler",
    "AccountsPayableView",
    "APStatus",
    "DisbursementCauseType",
    "PaymentMethod",
    "VendorPaymentView",
    "calculate_payment_status",
    "AP_AGING_BANDS",
    "AccountsPayableSelector",
    "AccountsPayableService",
    "ACCOUNTS_PAYABLE_WORKFLOW",
]
