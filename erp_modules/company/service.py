"""
Company Module Service (``erp_modules.company.service``).

Responsibility
--------------
Create and maintain companies and their roles.  Also hosts
``require_supplier``, the check purchasing runs before a company may
receive an RFQ.

Invariants enforced
-------------------
* ``registration_number`` is unique across companies.
* A company always holds at least one role.
* Deactivation is a flag; nothing is deleted.
"""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from erp_kernel.domain.values import CommandResult
from erp_kernel.exceptions import (
    BusinessError,
    DuplicateResourceError,
    ResourceNotFoundError,
    ValidationError,
    VendorRoleRequiredError,
)
from erp_kernel.logging_config import get_logger
from erp_kernel.services.base import BaseService, command
from erp_modules.company.models import CompanyRole
from erp_modules.company.orm import CompanyModel

logger = get_logger("modules.company.service")

_UPDATABLE_FIELDS = (
    "name",
    "registration_number",
    "representative",
    "contact_person",
    "phone",
    "email",
    "address",
    "bank_account",
    "payment_terms",
)


def require_supplier(session: Session, company_id: UUID) -> CompanyModel:
    """Load a company that may act as a vendor, or raise."""
    company = session.get(CompanyModel, company_id)
    if company is None:
        raise ResourceNotFoundError("Company", company_id)
    if not company.is_supplier:
        raise VendorRoleRequiredError(company_id)
    return company


class CompanyService(BaseService):
    """Command service for companies."""

    @command
    def create_company(
        self,
        name: str,
        roles: Iterable[CompanyRole],
        actor_id: UUID | None = None,
        **details: str | None,
    ) -> CommandResult:
        role_set = [CompanyRole(r) for r in dict.fromkeys(roles)]
        errors: dict[str, str] = {}
        if not name or not name.strip():
            errors["name"] = "Company name is required"
        if not role_set:
            errors["roles"] = "At least one role is required"
        unknown = set(details) - set(_UPDATABLE_FIELDS)
        if unknown:
            errors.update({k: "Unknown field" for k in sorted(unknown)})
        if errors:
            raise ValidationError("Invalid company", field_errors=errors)

        self._ensure_registration_unique(details.get("registration_number"))

        company = CompanyModel(
            name=name.strip(),
            is_active=True,
            created_by_id=actor_id,
            **details,
        )
        for role in role_set:
            company.add_role(role)
        self.session.add(company)
        self.session.flush()

        logger.info(
            "company_created",
            extra={"company_id": str(company.id), "roles": list(company.role_names())},
        )
        return CommandResult(company.id, "Company created successfully")

    @command
    def update_company(
        self,
        company_id: UUID,
        actor_id: UUID | None = None,
        **changes: str | None,
    ) -> CommandResult:
        """Apply the non-None fields of ``changes``."""
        unknown = set(changes) - set(_UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(
                "Invalid company update",
                field_errors={k: "Unknown field" for k in sorted(unknown)},
            )
        company = self._get_or_raise(CompanyModel, company_id, "Company")

        new_reg = changes.get("registration_number")
        if new_reg is not None and new_reg != company.registration_number:
            self._ensure_registration_unique(new_reg)

        for field_name, value in changes.items():
            if value is not None:
                setattr(company, field_name, value)
        company.updated_by_id = actor_id
        self.session.flush()
        return CommandResult(company.id, "Company updated successfully")

    @command
    def add_role(self, company_id: UUID, role: CompanyRole) -> CommandResult:
        company = self._get_or_raise(CompanyModel, company_id, "Company")
        role = CompanyRole(role)
        if company.has_role(role):
            raise BusinessError(f"Company already has role: {role.value}")
        company.add_role(role)
        self.session.flush()
        return CommandResult(company.id, f"Role {role.value} added")

    @command
    def remove_role(self, company_id: UUID, role: CompanyRole) -> CommandResult:
        company = self._get_or_raise(CompanyModel, company_id, "Company")
        role = CompanyRole(role)
        if not company.has_role(role):
            raise BusinessError(f"Company does not have role: {role.value}")
        if len(company.roles) <= 1:
            raise BusinessError("Cannot remove the last role from a company")
        company.remove_role(role)
        self.session.flush()
        return CommandResult(company.id, f"Role {role.value} removed")

    @command
    def deactivate_company(self, company_id: UUID) -> CommandResult:
        company = self._get_or_raise(CompanyModel, company_id, "Company")
        company.is_active = False
        self.session.flush()
        logger.info("company_deactivated", extra={"company_id": str(company.id)})
        return CommandResult(company.id, "Company deactivated")

    def _ensure_registration_unique(self, registration_number: str | None) -> None:
        if not registration_number:
            return
        exists = self.session.execute(
            select(CompanyModel.id).where(
                CompanyModel.registration_number == registration_number
            )
        ).first()
        if exists is not None:
            raise DuplicateResourceError(
                "Company", "registration number", registration_number
            )
