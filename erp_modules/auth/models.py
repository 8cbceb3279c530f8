"""
Auth Domain Models.

Users of the ERP and the roles that gate what they may do.
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    FINANCE = "FINANCE"
    PRODUCTION = "PRODUCTION"
    SALES = "SALES"


@dataclass(frozen=True)
class UserView:
    id: UUID
    username: str
    email: str
    full_name: str
    is_active: bool
    roles: tuple[str, ...]
