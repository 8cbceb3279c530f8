"""
Invoice Module Service (``erp_modules.invoice.service``).

Responsibility
--------------
``InvoiceService`` raises tax invoices for a project, issues and cancels
them, records customer payments and flags invoices whose due date has
passed.

Invariants enforced
-------------------
* An invoice can only be raised for a project with an APPROVED, SENT or
  ACCEPTED quotation.  Creation runs under the project lock.
* ``due_date`` is not before ``issue_date``; the tax rate is within
  0..100 and defaults to the configured ``invoice_tax_rate``.
* Payments only on ISSUED, PARTIALLY_PAID or OVERDUE invoices and never
  above the remaining balance.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from erp_config import ErpSettings, get_settings
from erp_kernel.domain.clock import Clock
from erp_kernel.domain.values import CommandResult, ZERO, quantize_money, to_decimal
from erp_kernel.events import DomainEventPublisher
from erp_kernel.exceptions import BusinessError, ValidationError
from erp_kernel.logging_config import get_logger
from erp_kernel.services.base import BaseService, command
from erp_kernel.services.locks import NoOpProjectLock, ProjectLock
from erp_kernel.services.numbering import INVOICE_NUMBER, next_document_number
from erp_modules.delivery.orm import DeliveryModel
from erp_modules.finance.models import PaymentMethod
from erp_modules.invoice.models import (
    OVERDUE_CANDIDATE_STATUSES,
    InvoiceLineInput,
    InvoiceStatus,
)
from erp_modules.invoice.orm import PaymentModel, TaxInvoiceModel
from erp_modules.project.orm import ProjectModel
from erp_modules.quotation.models import COMMITTED_STATUSES
from erp_modules.quotation.orm import QuotationModel

logger = get_logger("modules.invoice.service")


class InvoiceService(BaseService):
    """Command service for tax invoices and customer payments."""

    def __init__(
        self,
        session: Session,
        publisher: DomainEventPublisher | None = None,
        clock: Clock | None = None,
        settings: ErpSettings | None = None,
        project_lock: ProjectLock | None = None,
    ):
        super().__init__(session, publisher, clock)
        self.settings = settings or get_settings()
        self.project_lock = project_lock or NoOpProjectLock()

    @command
    def create_invoice(
        self,
        project_id: UUID,
        issue_date: date,
        due_date: date,
        line_items: Sequence[InvoiceLineInput],
        delivery_id: UUID | None = None,
        tax_rate: Decimal | None = None,
        notes: str | None = None,
        actor_id: UUID | None = None,
    ) -> CommandResult:
        rate = self.settings.invoice_tax_rate if tax_rate is None else to_decimal(tax_rate)
        self._validate_invoice(issue_date, due_date, line_items, rate)

        self._get_or_raise(ProjectModel, project_id, "Project")

        with self.project_lock.hold(project_id, "create_invoice"):
            if not self._has_committed_quotation(project_id):
                raise BusinessError(
                    "No approved quotation found for project. "
                    "Quotation must be approved before creating invoices."
                )
            if delivery_id is not None:
                delivery = self._get_or_raise(DeliveryModel, delivery_id, "Delivery")
                if delivery.project_id != project_id:
                    raise BusinessError(
                        f"Delivery {delivery_id} does not belong to project {project_id}"
                    )

            invoice_number = next_document_number(
                self.session,
                TaxInvoiceModel.invoice_number,
                INVOICE_NUMBER,
                self.clock.today().year,
            )
            invoice = TaxInvoiceModel(
                invoice_number=invoice_number,
                project_id=project_id,
                delivery_id=delivery_id,
                issue_date=issue_date,
                due_date=due_date,
                status=InvoiceStatus.DRAFT.value,
                notes=notes,
                created_by_id=actor_id,
            )
            invoice.replace_line_items(line_items, rate)
            self.session.add(invoice)
            self.session.flush()

        logger.info(
            "invoice_created",
            extra={
                "invoice_id": str(invoice.id),
                "invoice_number": invoice_number,
                "project_id": str(project_id),
                "total_amount": str(invoice.total_amount),
            },
        )
        return CommandResult(invoice.id, f"Invoice {invoice_number} created")

    @command
    def issue_invoice(self, invoice_id: UUID) -> CommandResult:
        invoice = self._get_or_raise(TaxInvoiceModel, invoice_id, "TaxInvoice")
        invoice.issue(self.clock.today())
        self.session.flush()
        logger.info(
            "invoice_issued",
            extra={"invoice_id": str(invoice.id), "invoice_number": invoice.invoice_number},
        )
        return CommandResult(invoice.id, "Invoice issued successfully")

    @command
    def cancel_invoice(self, invoice_id: UUID) -> CommandResult:
        invoice = self._get_or_raise(TaxInvoiceModel, invoice_id, "TaxInvoice")
        invoice.cancel()
        self.session.flush()
        logger.info(
            "invoice_cancelled",
            extra={"invoice_id": str(invoice.id), "invoice_number": invoice.invoice_number},
        )
        return CommandResult(invoice.id, "Invoice cancelled successfully")

    @command
    def update_notes(self, invoice_id: UUID, notes: str | None) -> CommandResult:
        invoice = self._get_or_raise(TaxInvoiceModel, invoice_id, "TaxInvoice")
        invoice.notes = notes
        self.session.flush()
        return CommandResult(invoice.id, "Notes updated successfully")

    @command
    def record_payment(
        self,
        invoice_id: UUID,
        payment_date: date,
        amount: Decimal,
        payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER,
        reference_number: str | None = None,
        notes: str | None = None,
        actor_id: UUID | None = None,
    ) -> CommandResult:
        if amount is None or to_decimal(amount) <= 0:
            raise ValidationError(
                "Invalid payment", field_errors={"amount": "Payment amount must be positive"}
            )
        amount = quantize_money(amount)

        invoice = self._get_or_raise(TaxInvoiceModel, invoice_id, "TaxInvoice")
        payment = PaymentModel(
            payment_date=payment_date,
            amount=amount,
            payment_method=PaymentMethod(payment_method).value,
            reference_number=reference_number,
            notes=notes,
            recorded_by_id=actor_id,
            created_by_id=actor_id,
        )
        invoice.add_payment(payment)
        self.session.flush()

        logger.info(
            "invoice_payment_recorded",
            extra={
                "invoice_id": str(invoice.id),
                "payment_id": str(payment.id),
                "amount": str(amount),
                "remaining_balance": str(invoice.remaining_balance),
                "status": invoice.status,
            },
        )
        return CommandResult(payment.id, "Payment recorded successfully")

    @command
    def mark_overdue_invoices(self, as_of: date | None = None) -> int:
        """Flag ISSUED/PARTIALLY_PAID invoices past their due date; returns how many."""
        as_of = as_of or self.clock.today()
        candidates = self.session.execute(
            select(TaxInvoiceModel).where(
                TaxInvoiceModel.status.in_([s.value for s in OVERDUE_CANDIDATE_STATUSES]),
                TaxInvoiceModel.due_date < as_of,
            )
        ).scalars().all()

        count = 0
        for invoice in candidates:
            if invoice.remaining_balance <= ZERO:
                continue
            invoice.mark_overdue()
            count += 1
        self.session.flush()

        logger.info("invoices_marked_overdue", extra={"as_of": as_of, "count": count})
        return count

    def _has_committed_quotation(self, project_id: UUID) -> bool:
        found = self.session.execute(
            select(QuotationModel.id)
            .where(
                QuotationModel.project_id == project_id,
                QuotationModel.status.in_([s.value for s in COMMITTED_STATUSES]),
            )
            .limit(1)
        ).first()
        return found is not None

    @staticmethod
    def _validate_invoice(
        issue_date: date,
        due_date: date,
        line_items: Sequence[InvoiceLineInput],
        tax_rate: Decimal,
    ) -> None:
        errors: dict[str, str] = {}
        if due_date < issue_date:
            errors["due_date"] = "Due date cannot be before issue date"
        if not Decimal("0") <= tax_rate <= Decimal("100"):
            errors["tax_rate"] = "Tax rate must be between 0 and 100"
        if not line_items:
            errors["line_items"] = "At least one line item is required"
        for idx, item in enumerate(line_items):
            if not item.description or not item.description.strip():
                errors[f"line_items[{idx}].description"] = "Description is required"
            if to_decimal(item.quantity) <= 0:
                errors[f"line_items[{idx}].quantity"] = "Quantity must be positive"
            if to_decimal(item.unit_price) < 0:
                errors[f"line_items[{idx}].unit_price"] = "Unit price must not be negative"
        if errors:
            raise ValidationError("Invalid invoice", field_errors=errors)
