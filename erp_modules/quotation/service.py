"""
Quotation Module Service (``erp_modules.quotation.service``).

Responsibility
--------------
Create, edit and version quotations and move them through
``QUOTATION_WORKFLOW``.  Acceptance publishes ``QuotationAcceptedEvent``,
which the Project module consumes to activate the project.

Invariants enforced
-------------------
* Versions are 1-based per project; a new quotation or version takes
  ``max(version) + 1``.
* Only DRAFT quotations are editable; submitting needs at least one line.
* New versions may only be cut from APPROVED, REJECTED, SENT or ACCEPTED.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select

from erp_kernel.domain.values import CommandResult, to_decimal
from erp_kernel.exceptions import BusinessError, ValidationError
from erp_kernel.logging_config import get_logger
from erp_kernel.services.base import BaseService, command
from erp_modules.project.orm import ProjectModel
from erp_modules.quotation.events import QuotationAcceptedEvent
from erp_modules.quotation.models import (
    VERSIONABLE_STATUSES,
    QuotationLineInput,
    QuotationStatus,
)
from erp_modules.quotation.orm import QuotationModel

logger = get_logger("modules.quotation.service")

DEFAULT_VALIDITY_DAYS = 30


def validate_line_items(items: Sequence[QuotationLineInput]) -> None:
    errors: dict[str, str] = {}
    for idx, item in enumerate(items):
        if not item.description or not item.description.strip():
            errors[f"line_items[{idx}].description"] = "Description is required"
        if to_decimal(item.quantity) <= Decimal("0"):
            errors[f"line_items[{idx}].quantity"] = "Quantity must be positive"
        if to_decimal(item.unit_price) < Decimal("0"):
            errors[f"line_items[{idx}].unit_price"] = "Unit price must not be negative"
    if errors:
        raise ValidationError("Invalid quotation line items", field_errors=errors)


class QuotationService(BaseService):
    """Command service for quotations."""

    @command
    def create_quotation(
        self,
        project_id: UUID,
        line_items: Sequence[QuotationLineInput],
        actor_id: UUID | None = None,
        validity_days: int | None = None,
        notes: str | None = None,
        quotation_date: date | None = None,
    ) -> CommandResult:
        self._get_or_raise(ProjectModel, project_id, "Project")
        validate_line_items(line_items)
        if validity_days is not None and validity_days <= 0:
            raise ValidationError(
                "Invalid quotation",
                field_errors={"validity_days": "Validity days must be positive"},
            )

        quotation = QuotationModel(
            project_id=project_id,
            version=self._next_version(project_id),
            status=QuotationStatus.DRAFT.value,
            quotation_date=quotation_date or self.clock.today(),
            validity_days=validity_days or DEFAULT_VALIDITY_DAYS,
            notes=notes,
            created_by_id=actor_id,
        )
        quotation.replace_line_items(line_items)
        self.session.add(quotation)
        self.session.flush()

        logger.info(
            "quotation_created",
            extra={
                "quotation_id": str(quotation.id),
                "project_id": str(project_id),
                "version": quotation.version,
                "total_amount": str(quotation.total_amount),
            },
        )
        return CommandResult(quotation.id, f"Quotation version {quotation.version} created")

    @command
    def update_quotation(
        self,
        quotation_id: UUID,
        line_items: Sequence[QuotationLineInput] | None = None,
        validity_days: int | None = None,
        notes: str | None = None,
    ) -> CommandResult:
        quotation = self._get_or_raise(QuotationModel, quotation_id, "Quotation")
        if quotation.status != QuotationStatus.DRAFT.value:
            raise BusinessError("Quotation can only be edited in DRAFT status")
        if validity_days is not None:
            if validity_days <= 0:
                raise ValidationError(
                    "Invalid quotation",
                    field_errors={"validity_days": "Validity days must be positive"},
                )
            quotation.validity_days = validity_days
        if notes is not None:
            quotation.notes = notes
        if line_items:
            validate_line_items(line_items)
            quotation.replace_line_items(line_items)
        self.session.flush()
        return CommandResult(quotation.id, "Quotation updated successfully")

    @command
    def submit_for_approval(self, quotation_id: UUID) -> CommandResult:
        quotation = self._get_or_raise(QuotationModel, quotation_id, "Quotation")
        if not quotation.line_items:
            raise BusinessError(
                "Quotation must be in DRAFT status with line items to submit for approval"
            )
        quotation.submit(self.clock.now())
        self.session.flush()
        return self._transitioned(quotation, "submitted for approval")

    @command
    def approve_quotation(self, quotation_id: UUID, actor_id: UUID | None = None) -> CommandResult:
        quotation = self._get_or_raise(QuotationModel, quotation_id, "Quotation")
        quotation.approve(actor_id, self.clock.now())
        self.session.flush()
        return self._transitioned(quotation, "approved")

    @command
    def reject_quotation(self, quotation_id: UUID, reason: str) -> CommandResult:
        if not reason or not reason.strip():
            raise ValidationError(
                "Invalid rejection",
                field_errors={"reason": "Rejection reason is required"},
            )
        quotation = self._get_or_raise(QuotationModel, quotation_id, "Quotation")
        quotation.reject(reason.strip())
        self.session.flush()
        return self._transitioned(quotation, "rejected")

    @command
    def mark_as_sending(self, quotation_id: UUID) -> CommandResult:
        quotation = self._get_or_raise(QuotationModel, quotation_id, "Quotation")
        quotation.mark_sending()
        self.session.flush()
        return self._transitioned(quotation, "marked as sending")

    @command
    def mark_as_sent(self, quotation_id: UUID) -> CommandResult:
        quotation = self._get_or_raise(QuotationModel, quotation_id, "Quotation")
        quotation.mark_sent(self.clock.now())
        self.session.flush()
        return self._transitioned(quotation, "marked as sent")

    @command
    def mark_as_accepted(self, quotation_id: UUID, actor_id: UUID | None = None) -> CommandResult:
        quotation = self._get_or_raise(QuotationModel, quotation_id, "Quotation")
        quotation.accept(actor_id, self.clock.now())
        self.session.flush()

        self._publish(
            QuotationAcceptedEvent(
                quotation_id=quotation.id,
                project_id=quotation.project_id,
                accepted_by_id=actor_id,
                occurred_at=self.clock.now(),
            )
        )
        return self._transitioned(quotation, "accepted")

    @command
    def create_new_version(self, quotation_id: UUID, actor_id: UUID | None = None) -> CommandResult:
        original = self._get_or_raise(QuotationModel, quotation_id, "Quotation")
        if QuotationStatus(original.status) not in VERSIONABLE_STATUSES:
            raise BusinessError(
                "Can only create new version from APPROVED, REJECTED, SENT, or ACCEPTED quotation"
            )

        quotation = QuotationModel(
            project_id=original.project_id,
            version=self._next_version(original.project_id),
            status=QuotationStatus.DRAFT.value,
            quotation_date=self.clock.today(),
            validity_days=original.validity_days,
            notes=original.notes,
            created_by_id=actor_id,
        )
        quotation.replace_line_items(original.line_inputs())
        self.session.add(quotation)
        self.session.flush()

        logger.info(
            "quotation_version_created",
            extra={
                "quotation_id": str(quotation.id),
                "source_quotation_id": str(original.id),
                "version": quotation.version,
            },
        )
        return CommandResult(quotation.id, f"Quotation version {quotation.version} created")

    def _next_version(self, project_id: UUID) -> int:
        latest = self.session.execute(
            select(func.max(QuotationModel.version)).where(
                QuotationModel.project_id == project_id
            )
        ).scalar_one_or_none()
        return (latest or 0) + 1

    def _transitioned(self, quotation: QuotationModel, verb: str) -> CommandResult:
        logger.info(
            "quotation_status_changed",
            extra={"quotation_id": str(quotation.id), "status": quotation.status},
        )
        return CommandResult(quotation.id, f"Quotation {verb}")
