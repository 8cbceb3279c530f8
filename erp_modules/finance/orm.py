"""
SQLAlchemy ORM persistence models for the Finance module.

Responsibility
--------------
Persist accounts payable and the vendor payments recorded against them.

Invariants enforced
-------------------
* (cause_type, cause_id) is unique: one payable per purchase order.
* ``total_amount`` is positive; every payment amount is positive.
* The stored ``status`` follows the payments through
  ``ACCOUNTS_PAYABLE_WORKFLOW``; queries recompute it from the payment
  sum instead of trusting it.
* Payments are never deleted.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp_kernel.db.base import STATUS_LENGTH, TrackedBase
from erp_kernel.domain.values import ZERO, quantize_money
from erp_kernel.exceptions import (
    BusinessError,
    PaymentExceedsBalanceError,
    PaymentNotAllowedError,
)
from erp_modules.finance.models import (
    PAYABLE_STATUSES,
    APStatus,
    PaymentMethod,
    calculate_payment_status,
)
from erp_modules.finance.workflows import ACCOUNTS_PAYABLE_WORKFLOW


# ---------------------------------------------------------------------------
# 1. AccountsPayableModel
# ---------------------------------------------------------------------------


class AccountsPayableModel(TrackedBase):
    """
    A payment obligation to a vendor.

    Created by ``AccountsPayableEventHandler`` when a purchase order is
    confirmed; never directly by a user command.
    """

    __tablename__ = "accounts_payable"

    __table_args__ = (
        UniqueConstraint("cause_type", "cause_id", name="uq_accounts_payable_cause"),
        CheckConstraint("total_amount > 0", name="ck_accounts_payable_total_positive"),
        Index("idx_accounts_payable_vendor", "vendor_id"),
        Index("idx_accounts_payable_due_date", "due_date"),
    )

    cause_type: Mapped[str] = mapped_column(String(30), nullable=False)
    cause_id: Mapped[UUID] = mapped_column(nullable=False)
    cause_reference_number: Mapped[str] = mapped_column(String(50), nullable=False)
    vendor_id: Mapped[UUID] = mapped_column(ForeignKey("companies.id"), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(
        String(STATUS_LENGTH), nullable=False, default=APStatus.PENDING.value
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    payments: Mapped[list[VendorPaymentModel]] = relationship(
        "VendorPaymentModel",
        back_populates="accounts_payable",
        cascade="all",
        order_by="VendorPaymentModel.payment_date",
        lazy="selectin",
    )

    @property
    def total_paid(self) -> Decimal:
        return quantize_money(sum((p.amount for p in self.payments), ZERO))

    @property
    def remaining_balance(self) -> Decimal:
        return quantize_money(self.total_amount) - self.total_paid

    def add_payment(self, payment: VendorPaymentModel) -> None:
        """Attach a payment and move the stored status to match the new total."""
        if APStatus(self.status) not in PAYABLE_STATUSES:
            raise PaymentNotAllowedError("AccountsPayable", self.id, self.status)
        remaining = self.remaining_balance
        if quantize_money(payment.amount) > remaining:
            raise PaymentExceedsBalanceError(quantize_money(payment.amount), remaining)

        target = calculate_payment_status(
            self.total_amount, self.total_paid + quantize_money(payment.amount)
        )
        ACCOUNTS_PAYABLE_WORKFLOW.transition_to(
            "AccountsPayable", self.id, self.status, target
        )
        self.payments.append(payment)
        self.status = target.value

    def cancel(self) -> None:
        if self.payments:
            raise BusinessError("Cannot cancel accounts payable with existing payments")
        self.status = ACCOUNTS_PAYABLE_WORKFLOW.advance(
            "AccountsPayable", self.id, self.status, "cancel"
        )

    def __repr__(self) -> str:
        return (
            f"<AccountsPayableModel {self.cause_type}:{self.cause_reference_number} "
            f"{self.total_amount} [{self.status}]>"
        )


# ---------------------------------------------------------------------------
# 2. VendorPaymentModel
# ---------------------------------------------------------------------------


class VendorPaymentModel(TrackedBase):
    """One payment made against a payable."""

    __tablename__ = "vendor_payments"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_vendor_payment_amount_positive"),
        Index("idx_vendor_payment_payable", "accounts_payable_id"),
    )

    accounts_payable_id: Mapped[UUID] = mapped_column(
        ForeignKey("accounts_payable.id"), nullable=False
    )
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    payment_method: Mapped[str] = mapped_column(
        String(30), nullable=False, default=PaymentMethod.BANK_TRANSFER.value
    )
    reference_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    recorded_by_id: Mapped[UUID | None]

    accounts_payable: Mapped[AccountsPayableModel] = relationship(
        "AccountsPayableModel", back_populates="payments"
    )

    def __repr__(self) -> str:
        return f"<VendorPaymentModel {self.amount} on {self.payment_date}>"
