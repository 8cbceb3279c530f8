"""
SQLAlchemy ORM persistence models for the Company module.

Companies are never hard-deleted; ``is_active`` is the deactivation flag.
Roles live in their own table so one company can be customer and vendor
at the same time.
"""

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp_kernel.db.base import STATUS_LENGTH, TrackedBase
from erp_modules.company.models import SUPPLIER_ROLES, CompanyRole


class CompanyModel(TrackedBase):
    """A customer, vendor or outsourcing partner."""

    __tablename__ = "companies"

    __table_args__ = (
        UniqueConstraint("registration_number", name="uq_company_registration_number"),
        Index("idx_company_name", "name"),
        Index("idx_company_active", "is_active"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    registration_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    representative: Mapped[str | None] = mapped_column(String(100), nullable=True)
    contact_person: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    bank_account: Mapped[str | None] = mapped_column(String(100), nullable=True)
    payment_terms: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    roles: Mapped[list["CompanyRoleModel"]] = relationship(
        "CompanyRoleModel",
        back_populates="company",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def role_names(self) -> tuple[str, ...]:
        return tuple(sorted(r.role_type for r in self.roles))

    def has_role(self, *roles: CompanyRole) -> bool:
        wanted = {CompanyRole(r).value for r in roles}
        return any(r.role_type in wanted for r in self.roles)

    @property
    def is_supplier(self) -> bool:
        """Active and holding a VENDOR or OUTSOURCE role."""
        return self.is_active and self.has_role(*SUPPLIER_ROLES)

    def add_role(self, role: CompanyRole) -> None:
        self.roles.append(CompanyRoleModel(role_type=CompanyRole(role).value))

    def remove_role(self, role: CompanyRole) -> None:
        value = CompanyRole(role).value
        self.roles[:] = [r for r in self.roles if r.role_type != value]

    def to_dto(self):
        from erp_modules.company.models import CompanyView

        return CompanyView(
            id=self.id,
            name=self.name,
            registration_number=self.registration_number,
            representative=self.representative,
            contact_person=self.contact_person,
            phone=self.phone,
            email=self.email,
            address=self.address,
            bank_account=self.bank_account,
            payment_terms=self.payment_terms,
            is_active=self.is_active,
            roles=self.role_names(),
        )

    def __repr__(self) -> str:
        return f"<CompanyModel {self.name} {list(self.role_names())}>"


class CompanyRoleModel(TrackedBase):
    """One role held by one company."""

    __tablename__ = "company_roles"

    __table_args__ = (
        UniqueConstraint("company_id", "role_type", name="uq_company_role"),
        Index("idx_company_role_type", "role_type"),
    )

    company_id: Mapped[UUID] = mapped_column(ForeignKey("companies.id"), nullable=False)
    role_type: Mapped[str] = mapped_column(String(STATUS_LENGTH), nullable=False)

    company: Mapped["CompanyModel"] = relationship(
        "CompanyModel",
        back_populates="roles",
    )

    def __repr__(self) -> str:
        return f"<CompanyRoleModel {self.role_type}>"
