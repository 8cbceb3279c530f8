"""Read views over quotations."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select

from erp_kernel.exceptions import ResourceNotFoundError
from erp_kernel.selectors.base import BaseSelector
from erp_modules.project.orm import ProjectModel
from erp_modules.quotation.models import COMMITTED_STATUSES, QuotationView
from erp_modules.quotation.orm import QuotationModel


class QuotationSelector(BaseSelector):

    def get_detail(self, quotation_id: UUID) -> QuotationView:
        row = self.session.execute(
            select(QuotationModel, ProjectModel.job_code)
            .join(ProjectModel, ProjectModel.id == QuotationModel.project_id)
            .where(QuotationModel.id == quotation_id)
        ).first()
        if row is None:
            raise ResourceNotFoundError("Quotation", quotation_id)
        quotation, job_code = row
        return quotation.to_dto(job_code)

    def list_by_project(self, project_id: UUID) -> list[QuotationView]:
        rows = self.session.execute(
            select(QuotationModel, ProjectModel.job_code)
            .join(ProjectModel, ProjectModel.id == QuotationModel.project_id)
            .where(QuotationModel.project_id == project_id)
            .order_by(QuotationModel.version.desc())
        ).all()
        return [q.to_dto(job_code) for q, job_code in rows]

    def get_latest_committed(self, project_id: UUID) -> QuotationView | None:
        """Latest APPROVED, SENT or ACCEPTED version of a project's quotation."""
        for view in self.list_by_project(project_id):
            if view.status in COMMITTED_STATUSES:
                return view
        return None
