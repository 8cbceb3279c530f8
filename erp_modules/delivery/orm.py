"""SQLAlchemy ORM persistence models for the Delivery module."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp_kernel.db.base import STATUS_LENGTH, TrackedBase
from erp_modules.delivery.models import DeliveryStatus
from erp_modules.delivery.workflows import DELIVERY_WORKFLOW


class DeliveryModel(TrackedBase):

    __tablename__ = "deliveries"

    __table_args__ = (
        Index("idx_delivery_project", "project_id"),
        Index("idx_delivery_quotation", "quotation_id"),
    )

    project_id: Mapped[UUID] = mapped_column(ForeignKey("projects.id"), nullable=False)
    quotation_id: Mapped[UUID] = mapped_column(ForeignKey("quotations.id"), nullable=False)
    delivery_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(STATUS_LENGTH), nullable=False, default=DeliveryStatus.PENDING.value
    )
    delivered_by_id: Mapped[UUID | None]
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    line_items: Mapped[list[DeliveryLineItemModel]] = relationship(
        "DeliveryLineItemModel",
        back_populates="delivery",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def mark_delivered(self) -> None:
        self.status = DELIVERY_WORKFLOW.advance(
            "Delivery", self.id, self.status, "mark_delivered"
        )

    def mark_returned(self) -> None:
        self.status = DELIVERY_WORKFLOW.advance(
            "Delivery", self.id, self.status, "mark_returned"
        )

    def to_dto(self):
        from erp_modules.delivery.models import DeliveryLineView, DeliveryView

        return DeliveryView(
            id=self.id,
            project_id=self.project_id,
            quotation_id=self.quotation_id,
            delivery_date=self.delivery_date,
            status=DeliveryStatus(self.status),
            delivered_by_id=self.delivered_by_id,
            notes=self.notes,
            line_items=tuple(
                DeliveryLineView(
                    id=l.id,
                    description=l.description,
                    quantity_delivered=l.quantity_delivered,
                )
                for l in self.line_items
            ),
        )

    def __repr__(self) -> str:
        return f"<DeliveryModel {self.id} [{self.status}]>"


class DeliveryLineItemModel(TrackedBase):

    __tablename__ = "delivery_line_items"

    delivery_id: Mapped[UUID] = mapped_column(ForeignKey("deliveries.id"), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    quantity_delivered: Mapped[Decimal] = mapped_column(Numeric(19, 3), nullable=False)

    delivery: Mapped[DeliveryModel] = relationship(
        "DeliveryModel", back_populates="line_items"
    )
