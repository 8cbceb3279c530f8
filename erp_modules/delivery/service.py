"""
Delivery Module Service (``erp_modules.delivery.service``).

Records deliveries against a committed quotation of the same project.
Creation runs under the project lock so concurrent deliveries for one
project are serialised when a real lock is configured.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from erp_kernel.domain.clock import Clock
from erp_kernel.domain.values import CommandResult, to_decimal
from erp_kernel.events import DomainEventPublisher
from erp_kernel.exceptions import BusinessError, ValidationError
from erp_kernel.logging_config import get_logger
from erp_kernel.services.base import BaseService, command
from erp_kernel.services.locks import NoOpProjectLock, ProjectLock
from erp_modules.delivery.models import DeliveryLineInput, DeliveryStatus
from erp_modules.delivery.orm import DeliveryLineItemModel, DeliveryModel
from erp_modules.project.orm import ProjectModel
from erp_modules.quotation.models import COMMITTED_STATUSES, QuotationStatus
from erp_modules.quotation.orm import QuotationModel

logger = get_logger("modules.delivery.service")


class DeliveryService(BaseService):
    """Command service for customer deliveries."""

    def __init__(
        self,
        session: Session,
        publisher: DomainEventPublisher | None = None,
        clock: Clock | None = None,
        project_lock: ProjectLock | None = None,
    ):
        super().__init__(session, publisher, clock)
        self.project_lock = project_lock or NoOpProjectLock()

    @command
    def create_delivery(
        self,
        project_id: UUID,
        quotation_id: UUID,
        delivery_date: date,
        line_items: Sequence[DeliveryLineInput],
        actor_id: UUID | None = None,
        notes: str | None = None,
    ) -> CommandResult:
        errors: dict[str, str] = {}
        if not line_items:
            errors["line_items"] = "At least one line item is required"
        for idx, item in enumerate(line_items):
            if not item.description or not item.description.strip():
                errors[f"line_items[{idx}].description"] = "Description is required"
            if to_decimal(item.quantity_delivered) <= 0:
                errors[f"line_items[{idx}].quantity_delivered"] = "Quantity must be positive"
        if errors:
            raise ValidationError("Invalid delivery", field_errors=errors)

        self._get_or_raise(ProjectModel, project_id, "Project")

        with self.project_lock.hold(project_id, "create_delivery"):
            quotation = self._get_or_raise(QuotationModel, quotation_id, "Quotation")
            if quotation.project_id != project_id:
                raise BusinessError(
                    f"Quotation {quotation_id} does not belong to project {project_id}"
                )
            if QuotationStatus(quotation.status) not in COMMITTED_STATUSES:
                raise BusinessError(
                    "Quotation must be APPROVED, SENT or ACCEPTED before recording deliveries"
                )

            delivery = DeliveryModel(
                project_id=project_id,
                quotation_id=quotation_id,
                delivery_date=delivery_date,
                status=DeliveryStatus.PENDING.value,
                delivered_by_id=actor_id,
                notes=notes,
                created_by_id=actor_id,
            )
            delivery.line_items = [
                DeliveryLineItemModel(
                    description=item.description.strip(),
                    quantity_delivered=to_decimal(item.quantity_delivered),
                )
                for item in line_items
            ]
            self.session.add(delivery)
            self.session.flush()

        logger.info(
            "delivery_created",
            extra={
                "delivery_id": str(delivery.id),
                "project_id": str(project_id),
                "line_count": len(line_items),
            },
        )
        return CommandResult(delivery.id, "Delivery recorded successfully")

    @command
    def mark_delivered(self, delivery_id: UUID) -> CommandResult:
        delivery = self._get_or_raise(DeliveryModel, delivery_id, "Delivery")
        delivery.mark_delivered()
        self.session.flush()
        return CommandResult(delivery.id, "Delivery marked as delivered")

    @command
    def mark_returned(self, delivery_id: UUID) -> CommandResult:
        delivery = self._get_or_raise(DeliveryModel, delivery_id, "Delivery")
        delivery.mark_returned()
        self.session.flush()
        return CommandResult(delivery.id, "Delivery marked as returned")
