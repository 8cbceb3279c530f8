"""Read views over projects, joined to customer and owner names."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import or_, select

from erp_kernel.exceptions import ResourceNotFoundError
from erp_kernel.selectors.base import BaseSelector
from erp_modules.auth.orm import UserModel
from erp_modules.company.orm import CompanyModel
from erp_modules.project.models import ProjectStatus, ProjectView
from erp_modules.project.orm import ProjectModel


class ProjectSelector(BaseSelector):

    def _base_query(self):
        return (
            select(
                ProjectModel.id,
                ProjectModel.job_code,
                ProjectModel.project_name,
                ProjectModel.requester_name,
                ProjectModel.customer_id,
                CompanyModel.name.label("customer_name"),
                ProjectModel.due_date,
                ProjectModel.internal_owner_id,
                UserModel.full_name.label("internal_owner_name"),
                ProjectModel.status,
            )
            .join(CompanyModel, CompanyModel.id == ProjectModel.customer_id)
            .outerjoin(UserModel, UserModel.id == ProjectModel.internal_owner_id)
        )

    @staticmethod
    def _to_view(row) -> ProjectView:
        return ProjectView(
            id=row.id,
            job_code=row.job_code,
            project_name=row.project_name,
            requester_name=row.requester_name,
            customer_id=row.customer_id,
            customer_name=row.customer_name,
            due_date=row.due_date,
            internal_owner_id=row.internal_owner_id,
            internal_owner_name=row.internal_owner_name,
            status=ProjectStatus(row.status),
        )

    def get_detail(self, project_id: UUID) -> ProjectView:
        row = self.session.execute(
            self._base_query().where(ProjectModel.id == project_id)
        ).first()
        if row is None:
            raise ResourceNotFoundError("Project", project_id)
        return self._to_view(row)

    def get_by_job_code(self, job_code: str) -> ProjectView | None:
        row = self.session.execute(
            self._base_query().where(ProjectModel.job_code == job_code)
        ).first()
        return self._to_view(row) if row is not None else None

    def list(
        self,
        status: ProjectStatus | None = None,
        customer_id: UUID | None = None,
        search: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[ProjectView]:
        query = self._base_query()
        if status is not None:
            query = query.where(ProjectModel.status == ProjectStatus(status).value)
        if customer_id is not None:
            query = query.where(ProjectModel.customer_id == customer_id)
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(
                    ProjectModel.job_code.ilike(pattern),
                    ProjectModel.project_name.ilike(pattern),
                )
            )
        query = self._paginate(query.order_by(ProjectModel.job_code.desc()), limit, offset)
        return [self._to_view(row) for row in self.session.execute(query).all()]
