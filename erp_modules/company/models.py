"""
Company Domain Models.

The nouns of company administration: customers, vendors and outsourcing
partners, identified by the roles a company holds.
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class CompanyRole(str, Enum):
    """Business relationship a company can hold (several at once)."""
    CUSTOMER = "CUSTOMER"
    VENDOR = "VENDOR"
    OUTSOURCE = "OUTSOURCE"


# Roles that qualify a company to receive RFQs and purchase orders.
SUPPLIER_ROLES = frozenset({CompanyRole.VENDOR, CompanyRole.OUTSOURCE})


@dataclass(frozen=True)
class CompanyView:
    """Read view of a company and its roles."""
    id: UUID
    name: str
    registration_number: str | None
    representative: str | None
    contact_person: str | None
    phone: str | None
    email: str | None
    address: str | None
    bank_account: str | None
    payment_terms: str | None
    is_active: bool
    roles: tuple[str, ...]
