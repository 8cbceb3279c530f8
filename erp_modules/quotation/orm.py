"""
SQLAlchemy ORM persistence models for the Quotation module.

Invariants enforced
-------------------
* (project_id, version) is unique; versions are 1-based per project.
* ``total_amount`` equals the sum of line totals; ``replace_line_items``
  is the only writer of both.
* ``status`` changes only through ``QUOTATION_WORKFLOW``.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp_kernel.db.base import STATUS_LENGTH, TrackedBase
from erp_kernel.domain.values import ZERO, quantize_money, to_decimal
from erp_modules.quotation.models import QuotationLineInput, QuotationStatus
from erp_modules.quotation.workflows import QUOTATION_WORKFLOW


class QuotationModel(TrackedBase):
    """One version of a price offer for a project."""

    __tablename__ = "quotations"

    __table_args__ = (
        UniqueConstraint("project_id", "version", name="uq_quotation_project_version"),
        Index("idx_quotation_status", "status"),
    )

    project_id: Mapped[UUID] = mapped_column(ForeignKey("projects.id"), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(STATUS_LENGTH), nullable=False, default=QuotationStatus.DRAFT.value
    )
    quotation_date: Mapped[date] = mapped_column(Date, nullable=False)
    validity_days: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    total_amount: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[datetime | None]
    approved_at: Mapped[datetime | None]
    approved_by_id: Mapped[UUID | None]
    sent_at: Mapped[datetime | None]
    accepted_at: Mapped[datetime | None]
    accepted_by_id: Mapped[UUID | None]

    line_items: Mapped[list[QuotationLineItemModel]] = relationship(
        "QuotationLineItemModel",
        back_populates="quotation",
        cascade="all, delete-orphan",
        order_by="QuotationLineItemModel.sequence",
        lazy="selectin",
    )

    @property
    def expiry_date(self) -> date:
        return self.quotation_date + timedelta(days=self.validity_days)

    def replace_line_items(self, items: Iterable[QuotationLineInput]) -> None:
        """Replace all lines, renumber them from 1 and recompute the total."""
        lines = []
        for sequence, item in enumerate(items, start=1):
            quantity = to_decimal(item.quantity)
            unit_price = quantize_money(item.unit_price)
            lines.append(
                QuotationLineItemModel(
                    sequence=sequence,
                    description=item.description,
                    quantity=quantity,
                    unit_price=unit_price,
                    line_total=quantize_money(quantity * unit_price),
                    notes=item.notes,
                )
            )
        self.line_items[:] = lines
        self.total_amount = quantize_money(sum((l.line_total for l in lines), ZERO))

    def line_inputs(self) -> list[QuotationLineInput]:
        return [
            QuotationLineInput(
                description=l.description,
                quantity=l.quantity,
                unit_price=l.unit_price,
                notes=l.notes,
            )
            for l in self.line_items
        ]

    def _fire(self, action: str) -> None:
        self.status = QUOTATION_WORKFLOW.advance("Quotation", self.id, self.status, action)

    def submit(self, now: datetime) -> None:
        self._fire("submit")
        self.submitted_at = now

    def approve(self, approved_by_id: UUID | None, now: datetime) -> None:
        self._fire("approve")
        self.approved_by_id = approved_by_id
        self.approved_at = now

    def reject(self, reason: str) -> None:
        self._fire("reject")
        self.rejection_reason = reason

    def mark_sending(self) -> None:
        self._fire("mark_sending")

    def mark_sent(self, now: datetime) -> None:
        self._fire("mark_sent")
        self.sent_at = now

    def accept(self, accepted_by_id: UUID | None, now: datetime) -> None:
        self._fire("accept")
        self.accepted_by_id = accepted_by_id
        self.accepted_at = now

    def to_dto(self, job_code: str = ""):
        from erp_modules.quotation.models import QuotationLineView, QuotationView

        return QuotationView(
            id=self.id,
            project_id=self.project_id,
            job_code=job_code,
            version=self.version,
            status=QuotationStatus(self.status),
            quotation_date=self.quotation_date,
            validity_days=self.validity_days,
            total_amount=quantize_money(self.total_amount),
            notes=self.notes,
            rejection_reason=self.rejection_reason,
            approved_at=self.approved_at,
            accepted_at=self.accepted_at,
            line_items=tuple(
                QuotationLineView(
                    id=l.id,
                    sequence=l.sequence,
                    description=l.description,
                    quantity=l.quantity,
                    unit_price=quantize_money(l.unit_price),
                    line_total=quantize_money(l.line_total),
                    notes=l.notes,
                )
                for l in self.line_items
            ),
        )

    def __repr__(self) -> str:
        return f"<QuotationModel project={self.project_id} v{self.version} [{self.status}]>"


class QuotationLineItemModel(TrackedBase):

    __tablename__ = "quotation_line_items"

    quotation_id: Mapped[UUID] = mapped_column(ForeignKey("quotations.id"), nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(nullable=False)
    line_total: Mapped[Decimal] = mapped_column(nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    quotation: Mapped[QuotationModel] = relationship(
        "QuotationModel", back_populates="line_items"
    )
