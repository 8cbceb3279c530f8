"""
Auth Module (``erp_modules.auth``).

ERP users and their roles (ADMIN, FINANCE, PRODUCTION, SALES).
"""

from erp_modules.auth.models import UserRole, UserView
from erp_modules.auth.service import UserService

__all__ = ["UserRole", "UserView", "UserService"]
