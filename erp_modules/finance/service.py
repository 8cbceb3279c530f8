"""
Finance Module Service (``erp_modules.finance.service``).

Responsibility
--------------
``AccountsPayableService`` records vendor payments against a payable,
cancels unpaid payables and edits the due date and notes.  Payables are
never created here: ``AccountsPayableEventHandler`` creates them when a
purchase order is confirmed.

Failure modes
-------------
* Non-positive payment amount -> ``ValidationError`` (nothing written).
* Payable PAID or CANCELLED -> ``PaymentNotAllowedError``.
* Amount above the remaining balance -> ``PaymentExceedsBalanceError``.
* Cancel with payments recorded -> ``BusinessError``.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from erp_kernel.domain.values import CommandResult, quantize_money, to_decimal
from erp_kernel.exceptions import ValidationError
from erp_kernel.logging_config import get_logger
from erp_kernel.services.base import BaseService, command
from erp_modules.finance.models import PaymentMethod
from erp_modules.finance.orm import AccountsPayableModel, VendorPaymentModel

logger = get_logger("modules.finance.service")


class AccountsPayableService(BaseService):
    """Command service for accounts payable."""

    @command
    def record_payment(
        self,
        ap_id: UUID,
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

        ap = self._get_or_raise(AccountsPayableModel, ap_id, "AccountsPayable")
        payment = VendorPaymentModel(
            payment_date=payment_date,
            amount=amount,
            payment_method=PaymentMethod(payment_method).value,
            reference_number=reference_number,
            notes=notes,
            recorded_by_id=actor_id,
            created_by_id=actor_id,
        )
        ap.add_payment(payment)
        self.session.flush()

        logger.info(
            "vendor_payment_recorded",
            extra={
                "accounts_payable_id": str(ap.id),
                "payment_id": str(payment.id),
                "amount": str(amount),
                "remaining_balance": str(ap.remaining_balance),
                "status": ap.status,
            },
        )
        return CommandResult(payment.id, "Payment recorded successfully")

    @command
    def cancel(self, ap_id: UUID) -> CommandResult:
        ap = self._get_or_raise(AccountsPayableModel, ap_id, "AccountsPayable")
        ap.cancel()
        self.session.flush()
        logger.info(
            "accounts_payable_cancelled",
            extra={
                "accounts_payable_id": str(ap.id),
                "cause_reference_number": ap.cause_reference_number,
            },
        )
        return CommandResult(ap.id, "Accounts payable cancelled")

    @command
    def update_due_date(self, ap_id: UUID, due_date: date | None) -> CommandResult:
        ap = self._get_or_raise(AccountsPayableModel, ap_id, "AccountsPayable")
        ap.due_date = due_date
        self.session.flush()
        return CommandResult(ap.id, "Due date updated successfully")

    @command
    def update_notes(self, ap_id: UUID, notes: str | None) -> CommandResult:
        ap = self._get_or_raise(AccountsPayableModel, ap_id, "AccountsPayable")
        ap.notes = notes
        self.session.flush()
        return CommandResult(ap.id, "Notes updated successfully")
