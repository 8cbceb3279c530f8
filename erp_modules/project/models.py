"""
Project Domain Models.

A project is one customer job, identified by its job code
(``WK2-2024-001``).  Quotations, deliveries, invoices and purchase
requests all hang off a project.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from uuid import UUID


class ProjectStatus(str, Enum):
    """Project lifecycle states."""
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


EDITABLE_PROJECT_STATUSES = frozenset({ProjectStatus.DRAFT, ProjectStatus.ACTIVE})


@dataclass(frozen=True)
class ProjectView:
    """Project joined to its customer and owner names."""
    id: UUID
    job_code: str
    project_name: str
    requester_name: str | None
    customer_id: UUID
    customer_name: str
    due_date: date
    internal_owner_id: UUID | None
    internal_owner_name: str | None
    status: ProjectStatus
