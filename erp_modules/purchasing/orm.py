"""
SQLAlchemy ORM persistence models for the Purchasing module.

Responsibility
--------------
Persist purchase requests, their RFQ items and purchase orders, and own
the aggregate operations that touch several rows at once (vendor
selection, reverting a selection).

Invariants enforced
-------------------
* At most one RFQ item per request is SELECTED.  ``select_vendor`` keeps
  it true in memory and a partial unique index keeps it true in the
  database.
* A request holds at most one RFQ item per vendor; ``item_id`` is unique
  within its request.
* ``po_number`` and ``request_number`` are unique.
* Status columns change only through the workflow-backed methods below.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Date, ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp_kernel.db.base import STATUS_LENGTH, TrackedBase
from erp_kernel.exceptions import BusinessError, ResourceNotFoundError
from erp_modules.purchasing.models import (
    PurchaseOrderStatus,
    PurchaseRequestStatus,
    RfqItemStatus,
)
from erp_modules.purchasing.workflows import (
    PURCHASE_ORDER_WORKFLOW,
    PURCHASE_REQUEST_WORKFLOW,
    RFQ_ITEM_WORKFLOW,
)

_ONE_SELECTED = text("status = 'SELECTED'")


# ---------------------------------------------------------------------------
# PurchaseRequestModel
# ---------------------------------------------------------------------------


class PurchaseRequestModel(TrackedBase):
    """An internal request to buy material or an outsourced service."""

    __tablename__ = "purchase_requests"

    __table_args__ = (
        UniqueConstraint("request_number", name="uq_purchase_request_number"),
        Index("idx_purchase_request_project", "project_id"),
        Index("idx_purchase_request_status", "status"),
    )

    request_number: Mapped[str] = mapped_column(String(20), nullable=False)
    project_id: Mapped[UUID | None] = mapped_column(ForeignKey("projects.id"), nullable=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(19, 3), nullable=False)
    uom: Mapped[str] = mapped_column(String(20), nullable=False, default="EA")
    required_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(STATUS_LENGTH), nullable=False, default=PurchaseRequestStatus.DRAFT.value
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    rfq_items: Mapped[list[RfqItemModel]] = relationship(
        "RfqItemModel",
        back_populates="purchase_request",
        cascade="all, delete-orphan",
        order_by="RfqItemModel.sent_at",
        lazy="selectin",
    )

    @property
    def can_update(self) -> bool:
        return self.status == PurchaseRequestStatus.DRAFT.value

    def _fire(self, action: str) -> None:
        self.status = PURCHASE_REQUEST_WORKFLOW.advance(
            "PurchaseRequest", self.id, self.status, action
        )

    def find_rfq_item(self, item_id: str) -> RfqItemModel:
        for item in self.rfq_items:
            if item.item_id == item_id:
                return item
        raise ResourceNotFoundError("RfqItem", item_id)

    def selected_item(self) -> RfqItemModel | None:
        for item in self.rfq_items:
            if item.status == RfqItemStatus.SELECTED.value:
                return item
        return None

    def send_rfq(self, vendor_ids: list[UUID], sent_at: datetime) -> list[RfqItemModel]:
        """Move to RFQ_SENT and open one SENT item per vendor."""
        already = {item.vendor_id for item in self.rfq_items}
        duplicates = already.intersection(vendor_ids)
        if duplicates:
            raise BusinessError(
                f"RFQ already sent to vendor {sorted(str(v) for v in duplicates)[0]}"
            )
        self._fire("send_rfq")
        created = [
            RfqItemModel(
                item_id=str(uuid4()),
                vendor_id=vendor_id,
                status=RfqItemStatus.SENT.value,
                sent_at=sent_at,
            )
            for vendor_id in vendor_ids
        ]
        self.rfq_items.extend(created)
        return created

    def select_vendor(self, item_id: str) -> RfqItemModel:
        """
        Select one replied item and reject every other replied item.

        All three writes happen on this aggregate, so they flush together.
        """
        chosen = self.find_rfq_item(item_id)
        if chosen.status != RfqItemStatus.REPLIED.value:
            raise BusinessError(
                f"RFQ item must be in REPLIED status to select, current: {chosen.status}"
            )
        self._fire("select_vendor")
        chosen.select()
        for item in self.rfq_items:
            if item is not chosen and item.status == RfqItemStatus.REPLIED.value:
                item.reject()
        return chosen

    def revert_vendor_selection(self, item_id: str) -> RfqItemModel:
        """
        Reopen selection after the order for ``item_id`` was canceled.

        The canceled item and every REJECTED sibling go back to REPLIED;
        SENT and NO_RESPONSE items are left alone.
        """
        item = self.find_rfq_item(item_id)
        self._fire("revert_vendor_selection")
        item.deselect()
        for other in self.rfq_items:
            if other.status == RfqItemStatus.REJECTED.value:
                other.unreject()
        return item

    def close(self) -> None:
        self._fire("close")

    def cancel(self) -> None:
        self._fire("cancel")

    def __repr__(self) -> str:
        return f"<PurchaseRequestModel {self.request_number} [{self.status}]>"


# ---------------------------------------------------------------------------
# RfqItemModel
# ---------------------------------------------------------------------------


class RfqItemModel(TrackedBase):
    """One vendor's quote request under a purchase request."""

    __tablename__ = "rfq_items"

    __table_args__ = (
        UniqueConstraint("purchase_request_id", "item_id", name="uq_rfq_item_id"),
        UniqueConstraint("purchase_request_id", "vendor_id", name="uq_rfq_item_vendor"),
        Index(
            "uq_rfq_item_one_selected",
            "purchase_request_id",
            unique=True,
            postgresql_where=_ONE_SELECTED,
            sqlite_where=_ONE_SELECTED,
        ),
        Index("idx_rfq_item_vendor", "vendor_id"),
    )

    purchase_request_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchase_requests.id"), nullable=False
    )
    item_id: Mapped[str] = mapped_column(String(36), nullable=False)
    vendor_id: Mapped[UUID] = mapped_column(ForeignKey("companies.id"), nullable=False)
    status: Mapped[str] = mapped_column(
        String(STATUS_LENGTH), nullable=False, default=RfqItemStatus.SENT.value
    )
    quoted_price: Mapped[Decimal | None]
    quoted_lead_time: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    sent_at: Mapped[datetime | None]
    replied_at: Mapped[datetime | None]

    purchase_request: Mapped[PurchaseRequestModel] = relationship(
        "PurchaseRequestModel", back_populates="rfq_items"
    )

    def _fire(self, action: str) -> None:
        self.status = RFQ_ITEM_WORKFLOW.advance("RfqItem", self.item_id, self.status, action)

    def record_reply(
        self,
        quoted_price: Decimal,
        lead_time_days: int | None,
        notes: str | None,
        replied_at: datetime,
    ) -> None:
        self._fire("record_reply")
        self.quoted_price = quoted_price
        self.quoted_lead_time = lead_time_days
        self.notes = notes
        self.replied_at = replied_at

    def mark_no_response(self) -> None:
        self._fire("mark_no_response")

    def select(self) -> None:
        self._fire("select")

    def reject(self) -> None:
        self._fire("reject")

    def deselect(self) -> None:
        self._fire("deselect")

    def unreject(self) -> None:
        self._fire("unreject")

    def __repr__(self) -> str:
        return f"<RfqItemModel {self.item_id} vendor={self.vendor_id} [{self.status}]>"


# ---------------------------------------------------------------------------
# PurchaseOrderModel
# ---------------------------------------------------------------------------


class PurchaseOrderModel(TrackedBase):
    """An order placed with the vendor of one RFQ item."""

    __tablename__ = "purchase_orders"

    __table_args__ = (
        UniqueConstraint("po_number", name="uq_purchase_order_number"),
        UniqueConstraint(
            "purchase_request_id", "rfq_item_id", name="uq_purchase_order_rfq_item"
        ),
        Index("idx_purchase_order_vendor", "vendor_id"),
        Index("idx_purchase_order_status", "status"),
    )

    po_number: Mapped[str] = mapped_column(String(20), nullable=False)
    purchase_request_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchase_requests.id"), nullable=False
    )
    rfq_item_id: Mapped[str] = mapped_column(String(36), nullable=False)
    project_id: Mapped[UUID | None] = mapped_column(ForeignKey("projects.id"), nullable=True)
    vendor_id: Mapped[UUID] = mapped_column(ForeignKey("companies.id"), nullable=False)
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    expected_delivery_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    status: Mapped[str] = mapped_column(
        String(STATUS_LENGTH), nullable=False, default=PurchaseOrderStatus.DRAFT.value
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def can_update(self) -> bool:
        return self.status == PurchaseOrderStatus.DRAFT.value

    def _fire(self, action: str) -> None:
        self.status = PURCHASE_ORDER_WORKFLOW.advance(
            "PurchaseOrder", self.id, self.status, action
        )

    def send(self) -> None:
        self._fire("send")

    def confirm(self) -> None:
        self._fire("confirm")

    def receive(self) -> None:
        self._fire("receive")

    def cancel(self) -> None:
        self._fire("cancel")

    def __repr__(self) -> str:
        return f"<PurchaseOrderModel {self.po_number} [{self.status}]>"
