"""
Project Module Service (``erp_modules.project.service``).

Responsibility
--------------
Create and edit projects, generate job codes and drive the project
lifecycle.  Automatic activation on quotation acceptance lives in
``erp_modules.project.handlers``.

Invariants enforced
-------------------
* The customer is an active company holding the CUSTOMER role.
* Only DRAFT and ACTIVE projects are editable.
* Status changes go through ``PROJECT_WORKFLOW``.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from erp_kernel.domain.values import CommandResult
from erp_kernel.exceptions import BusinessError, ResourceNotFoundError, ValidationError
from erp_kernel.logging_config import get_logger
from erp_kernel.services.base import BaseService, command
from erp_kernel.services.numbering import PROJECT_JOB_CODE, next_document_number
from erp_modules.auth.orm import UserModel
from erp_modules.company.models import CompanyRole
from erp_modules.company.orm import CompanyModel
from erp_modules.project.models import ProjectStatus
from erp_modules.project.orm import ProjectModel

logger = get_logger("modules.project.service")


class ProjectService(BaseService):
    """Command service for projects."""

    @command
    def create_project(
        self,
        customer_id: UUID,
        project_name: str,
        due_date: date,
        actor_id: UUID | None = None,
        internal_owner_id: UUID | None = None,
        requester_name: str | None = None,
    ) -> CommandResult:
        if not project_name or not project_name.strip():
            raise ValidationError(
                "Invalid project",
                field_errors={"project_name": "Project name is required"},
            )
        self._require_customer(customer_id)
        if internal_owner_id is not None:
            self._get_or_raise(UserModel, internal_owner_id, "User")

        job_code = next_document_number(
            self.session, ProjectModel.job_code, PROJECT_JOB_CODE, self.clock.today().year
        )
        project = ProjectModel(
            job_code=job_code,
            project_name=project_name.strip(),
            requester_name=requester_name,
            customer_id=customer_id,
            due_date=due_date,
            internal_owner_id=internal_owner_id,
            status=ProjectStatus.DRAFT.value,
            created_by_id=actor_id,
        )
        self.session.add(project)
        self.session.flush()

        logger.info(
            "project_created",
            extra={"project_id": str(project.id), "job_code": job_code},
        )
        return CommandResult(project.id, f"Project created with job code {job_code}")

    @command
    def update_project(
        self,
        project_id: UUID,
        project_name: str | None = None,
        requester_name: str | None = None,
        due_date: date | None = None,
        internal_owner_id: UUID | None = None,
        actor_id: UUID | None = None,
    ) -> CommandResult:
        project = self._get_or_raise(ProjectModel, project_id, "Project")
        if not project.is_editable:
            raise BusinessError(
                f"Project with status {project.status} cannot be edited"
            )
        if internal_owner_id is not None:
            self._get_or_raise(UserModel, internal_owner_id, "User")
            project.internal_owner_id = internal_owner_id
        if project_name is not None:
            if not project_name.strip():
                raise ValidationError(
                    "Invalid project",
                    field_errors={"project_name": "Project name is required"},
                )
            project.project_name = project_name.strip()
        if requester_name is not None:
            project.requester_name = requester_name
        if due_date is not None:
            project.due_date = due_date
        project.updated_by_id = actor_id
        self.session.flush()
        return CommandResult(project.id, "Project updated successfully")

    @command
    def change_status(self, project_id: UUID, target: ProjectStatus) -> CommandResult:
        project = self._get_or_raise(ProjectModel, project_id, "Project")
        previous = project.status
        project.change_status(ProjectStatus(target))
        self.session.flush()
        logger.info(
            "project_status_changed",
            extra={
                "project_id": str(project.id),
                "from_status": previous,
                "to_status": project.status,
            },
        )
        return CommandResult(project.id, f"Project status changed to {project.status}")

    def _require_customer(self, customer_id: UUID) -> CompanyModel:
        customer = self.session.get(CompanyModel, customer_id)
        if customer is None:
            raise ResourceNotFoundError("Company", customer_id)
        if not customer.is_active or not customer.has_role(CompanyRole.CUSTOMER):
            raise BusinessError(
                f"Company with ID {customer_id} is not an active customer"
            )
        return customer
