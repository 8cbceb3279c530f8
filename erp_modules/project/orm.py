"""
SQLAlchemy ORM persistence models for the Project module.

Invariants enforced
-------------------
* ``job_code`` is unique.
* ``status`` changes only through the transition methods, which resolve
  the target state through ``PROJECT_WORKFLOW``.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from erp_kernel.db.base import STATUS_LENGTH, TrackedBase
from erp_modules.project.models import ProjectStatus
from erp_modules.project.workflows import PROJECT_WORKFLOW


class ProjectModel(TrackedBase):
    """A customer job."""

    __tablename__ = "projects"

    __table_args__ = (
        UniqueConstraint("job_code", name="uq_project_job_code"),
        Index("idx_project_customer", "customer_id"),
        Index("idx_project_status", "status"),
    )

    job_code: Mapped[str] = mapped_column(String(20), nullable=False)
    project_name: Mapped[str] = mapped_column(String(200), nullable=False)
    requester_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    customer_id: Mapped[UUID] = mapped_column(ForeignKey("companies.id"), nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    internal_owner_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(STATUS_LENGTH), nullable=False, default=ProjectStatus.DRAFT.value
    )

    @property
    def is_editable(self) -> bool:
        return ProjectStatus(self.status) in (ProjectStatus.DRAFT, ProjectStatus.ACTIVE)

    def _fire(self, action: str) -> None:
        self.status = PROJECT_WORKFLOW.advance("Project", self.id, self.status, action)

    def activate(self) -> None:
        self._fire("activate")

    def complete(self) -> None:
        self._fire("complete")

    def archive(self) -> None:
        self._fire("archive")

    def change_status(self, target: ProjectStatus) -> None:
        transition = PROJECT_WORKFLOW.transition_to("Project", self.id, self.status, target)
        self._fire(transition.action)

    def __repr__(self) -> str:
        return f"<ProjectModel {self.job_code} [{self.status}]>"
