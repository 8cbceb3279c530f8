"""
SQLAlchemy ORM persistence models for the Invoice module.

Invariants enforced
-------------------
* ``invoice_number`` is unique.
* ``total_before_tax`` is the sum of line totals, ``total_tax`` is
  ``before * tax_rate / 100`` rounded half-up to cents, and
  ``total_amount`` is their sum; ``replace_line_items`` is the only
  writer of all three.
* A payment never takes the paid total above ``total_amount``.
* ``status`` changes only through ``INVOICE_WORKFLOW``.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp_kernel.db.base import STATUS_LENGTH, TrackedBase
from erp_kernel.domain.values import ZERO, quantize_money, to_decimal
from erp_kernel.exceptions import PaymentExceedsBalanceError, PaymentNotAllowedError
from erp_modules.finance.models import PaymentMethod, calculate_payment_status
from erp_modules.invoice.models import (
    DEFAULT_TAX_RATE,
    RECEIVABLE_STATUSES,
    InvoiceLineInput,
    InvoiceStatus,
    calculate_tax,
    line_total,
)
from erp_modules.invoice.workflows import INVOICE_WORKFLOW


class TaxInvoiceModel(TrackedBase):
    """A tax invoice issued to the customer of a project."""

    __tablename__ = "tax_invoices"

    __table_args__ = (
        UniqueConstraint("invoice_number", name="uq_tax_invoice_number"),
        Index("idx_tax_invoice_project", "project_id"),
        Index("idx_tax_invoice_status", "status"),
    )

    invoice_number: Mapped[str] = mapped_column(String(20), nullable=False)
    project_id: Mapped[UUID] = mapped_column(ForeignKey("projects.id"), nullable=False)
    delivery_id: Mapped[UUID | None] = mapped_column(ForeignKey("deliveries.id"), nullable=True)
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    issued_to_customer_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(
        String(STATUS_LENGTH), nullable=False, default=InvoiceStatus.DRAFT.value
    )
    tax_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=DEFAULT_TAX_RATE)
    total_before_tax: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)
    total_tax: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)
    total_amount: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    line_items: Mapped[list[InvoiceLineItemModel]] = relationship(
        "InvoiceLineItemModel",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLineItemModel.sequence",
        lazy="selectin",
    )
    payments: Mapped[list[PaymentModel]] = relationship(
        "PaymentModel",
        back_populates="invoice",
        cascade="all",
        order_by="PaymentModel.payment_date",
        lazy="selectin",
    )

    def replace_line_items(self, items: Iterable[InvoiceLineInput], tax_rate: Decimal) -> None:
        lines = [
            InvoiceLineItemModel(
                sequence=seq,
                description=item.description.strip(),
                quantity=to_decimal(item.quantity),
                unit_price=quantize_money(item.unit_price),
                line_total=line_total(item.quantity, item.unit_price),
            )
            for seq, item in enumerate(items, start=1)
        ]
        self.line_items = lines
        self.tax_rate = to_decimal(tax_rate)
        self.total_before_tax = quantize_money(sum((l.line_total for l in lines), ZERO))
        self.total_tax = calculate_tax(self.total_before_tax, self.tax_rate)
        self.total_amount = self.total_before_tax + self.total_tax

    @property
    def total_paid(self) -> Decimal:
        return quantize_money(sum((p.amount for p in self.payments), ZERO))

    @property
    def remaining_balance(self) -> Decimal:
        return quantize_money(self.total_amount) - self.total_paid

    def _fire(self, action: str) -> None:
        self.status = INVOICE_WORKFLOW.advance("TaxInvoice", self.id, self.status, action)

    def issue(self, issued_on: date) -> None:
        self._fire("issue")
        self.issued_to_customer_date = issued_on

    def cancel(self) -> None:
        self._fire("cancel")

    def mark_overdue(self) -> None:
        self._fire("mark_overdue")

    def add_payment(self, payment: PaymentModel) -> None:
        if InvoiceStatus(self.status) not in RECEIVABLE_STATUSES:
            raise PaymentNotAllowedError("TaxInvoice", self.id, self.status)
        amount = quantize_money(payment.amount)
        remaining = self.remaining_balance
        if amount > remaining:
            raise PaymentExceedsBalanceError(amount, remaining)

        target = InvoiceStatus(
            calculate_payment_status(self.total_amount, self.total_paid + amount).value
        )
        INVOICE_WORKFLOW.transition_to("TaxInvoice", self.id, self.status, target)
        self.payments.append(payment)
        self.status = target.value

    def __repr__(self) -> str:
        return f"<TaxInvoiceModel {self.invoice_number} {self.total_amount} [{self.status}]>"


class InvoiceLineItemModel(TrackedBase):

    __tablename__ = "invoice_line_items"

    __table_args__ = (
        Index("idx_invoice_line_invoice", "invoice_id"),
    )

    invoice_id: Mapped[UUID] = mapped_column(ForeignKey("tax_invoices.id"), nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(19, 3), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(nullable=False)
    line_total: Mapped[Decimal] = mapped_column(nullable=False)

    invoice: Mapped[TaxInvoiceModel] = relationship("TaxInvoiceModel", back_populates="line_items")


class PaymentModel(TrackedBase):
    """A customer payment received against a tax invoice."""

    __tablename__ = "invoice_payments"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_invoice_payment_amount_positive"),
        Index("idx_invoice_payment_invoice", "invoice_id"),
    )

    invoice_id: Mapped[UUID] = mapped_column(ForeignKey("tax_invoices.id"), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    payment_method: Mapped[str] = mapped_column(
        String(30), nullable=False, default=PaymentMethod.BANK_TRANSFER.value
    )
    reference_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    recorded_by_id: Mapped[UUID | None]

    invoice: Mapped[TaxInvoiceModel] = relationship("TaxInvoiceModel", back_populates="payments")

    def __repr__(self) -> str:
        return f"<PaymentModel {self.amount} on {self.payment_date}>"
