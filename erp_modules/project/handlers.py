"""
Project event handlers.

``ProjectEventHandler`` activates a DRAFT project when one of its
quotations is accepted.  It runs inside the publisher's unit of work; a
missing project raises and rolls the acceptance back with it.
"""

from sqlalchemy.orm import Session

from erp_kernel.exceptions import ResourceNotFoundError
from erp_kernel.logging_config import get_logger
from erp_modules.project.models import ProjectStatus
from erp_modules.project.orm import ProjectModel
from erp_modules.quotation.events import QuotationAcceptedEvent

logger = get_logger("modules.project.handlers")


class ProjectEventHandler:

    def __init__(self, session: Session):
        self.session = session

    def on_quotation_accepted(self, event: QuotationAcceptedEvent) -> None:
        project = self.session.get(ProjectModel, event.project_id)
        if project is None:
            raise ResourceNotFoundError("Project", event.project_id)

        if project.status != ProjectStatus.DRAFT.value:
            logger.info(
                "project_activation_skipped",
                extra={
                    "project_id": str(project.id),
                    "status": project.status,
                    "quotation_id": str(event.quotation_id),
                },
            )
            return

        project.activate()
        project.updated_by_id = event.accepted_by_id
        self.session.flush()
        logger.info(
            "project_activated",
            extra={
                "project_id": str(project.id),
                "quotation_id": str(event.quotation_id),
            },
        )
