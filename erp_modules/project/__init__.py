"""
Project Module (``erp_modules.project``).

Customer jobs with generated job codes and a DRAFT -> ACTIVE -> COMPLETED
-> ARCHIVED lifecycle.  Listens for ``QuotationAcceptedEvent``.
"""

from erp_modules.project.handlers import ProjectEventHandler
from erp_modules.project.models import ProjectStatus, ProjectView
from erp_modules.project.selectors import ProjectSelector
from erp_modules.project.service import ProjectService
from erp_modules.project.workflows import PROJECT_WORKFLOW

__all__ = [
    "ProjectEventHandler",
    "ProjectStatus",
    "ProjectView",
    "ProjectSelector",
    "ProjectService",
    "PROJECT_WORKFLOW",
]
