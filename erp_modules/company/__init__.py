"""
Company Module (``erp_modules.company``).

Customers, vendors and outsourcing partners.  Purchasing asks this module
whether a company may receive RFQs (``require_supplier``); projects ask
whether it is a customer.
"""

from erp_modules.company.models import SUPPLIER_ROLES, CompanyRole, CompanyView
from erp_modules.company.selectors import CompanySelector
from erp_modules.company.service import CompanyService, require_supplier

__all__ = [
    "CompanyRole",
    "CompanyView",
    "SUPPLIER_ROLES",
    "CompanySelector",
    "CompanyService",
    "require_supplier",
]
