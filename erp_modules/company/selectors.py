"""Read views over companies."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import or_, select

from erp_kernel.exceptions import ResourceNotFoundError
from erp_kernel.selectors.base import BaseSelector
from erp_modules.company.models import CompanyRole, CompanyView
from erp_modules.company.orm import CompanyModel, CompanyRoleModel


class CompanySelector(BaseSelector):

    def get_detail(self, company_id: UUID) -> CompanyView:
        company = self.session.get(CompanyModel, company_id)
        if company is None:
            raise ResourceNotFoundError("Company", company_id)
        return company.to_dto()

    def list(
        self,
        role: CompanyRole | None = None,
        active_only: bool = True,
        search: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[CompanyView]:
        query = select(CompanyModel)
        if role is not None:
            query = query.where(
                CompanyModel.id.in_(
                    select(CompanyRoleModel.company_id).where(
                        CompanyRoleModel.role_type == CompanyRole(role).value
                    )
                )
            )
        if active_only:
            query = query.where(CompanyModel.is_active.is_(True))
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(
                    CompanyModel.name.ilike(pattern),
                    CompanyModel.registration_number.ilike(pattern),
                )
            )
        query = self._paginate(query.order_by(CompanyModel.name), limit, offset)
        return [c.to_dto() for c in self.session.scalars(query).all()]
