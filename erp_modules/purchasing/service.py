"""
Purchasing Module Service (``erp_modules.purchasing.service``).

Responsibility
--------------
Two command services:

``PurchaseRequestService``
    Purchase requests and the RFQ round: send RFQs to vendors, record
    replies, mark non-responders, select the winning vendor.

``PurchaseOrderService``
    Purchase orders raised from an RFQ item and their lifecycle
    DRAFT -> SENT -> CONFIRMED -> RECEIVED (or CANCELED before RECEIVED).
    Confirm, receive and cancel publish domain events; the handlers run
    inside the same unit of work.

Invariants enforced
-------------------
* Selecting a vendor sets the chosen item SELECTED, rejects every other
  REPLIED item and advances the request, all in one flush.
* Every transition is idempotent-unsafe: repeating one raises
  ``InvalidStatusTransitionError``.
* At most one purchase order per (purchase request, RFQ item).
* Services flush; the caller's ``session_scope()`` commits.

Usage::

    with session_scope() as session:
        uow = build_unit_of_work(session)
        uow.purchase_orders.confirm_purchase_order(po_id)
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
from erp_kernel.domain.values import CommandResult, quantize_money, to_decimal
from erp_kernel.events import DomainEventPublisher
from erp_kernel.exceptions import (
    BusinessError,
    DuplicateResourceError,
    ValidationError,
)
from erp_kernel.logging_config import get_logger
from erp_kernel.services.base import BaseService, command
from erp_kernel.services.numbering import (
    PURCHASE_ORDER_NUMBER,
    PURCHASE_REQUEST_NUMBER,
    next_document_number,
)
from erp_modules.company.orm import CompanyModel
from erp_modules.company.service import require_supplier
from erp_modules.project.orm import ProjectModel
from erp_modules.purchasing.events import (
    PurchaseOrderCanceledEvent,
    PurchaseOrderConfirmedEvent,
    PurchaseOrderReceivedEvent,
)
from erp_modules.purchasing.models import (
    ORDERABLE_RFQ_STATUSES,
    PurchaseOrderStatus,
    PurchaseRequestStatus,
    RfqItemStatus,
)
from erp_modules.purchasing.orm import PurchaseOrderModel, PurchaseRequestModel

logger = get_logger("modules.purchasing.service")


# =============================================================================
# Purchase requests and RFQ
# =============================================================================


class PurchaseRequestService(BaseService):
    """Command service for purchase requests and vendor selection."""

    @command
    def create_purchase_request(
        self,
        description: str,
        quantity: Decimal,
        uom: str,
        required_date: date,
        actor_id: UUID | None = None,
        project_id: UUID | None = None,
        notes: str | None = None,
    ) -> CommandResult:
        self._validate_request_fields(description, quantity, uom)
        if project_id is not None:
            self._get_or_raise(ProjectModel, project_id, "Project")

        request_number = next_document_number(
            self.session,
            PurchaseRequestModel.request_number,
            PURCHASE_REQUEST_NUMBER,
            self.clock.today().year,
        )
        request = PurchaseRequestModel(
            request_number=request_number,
            project_id=project_id,
            description=description.strip(),
            quantity=to_decimal(quantity),
            uom=uom.strip(),
            required_date=required_date,
            status=PurchaseRequestStatus.DRAFT.value,
            notes=notes,
            created_by_id=actor_id,
        )
        self.session.add(request)
        self.session.flush()

        logger.info(
            "purchase_request_created",
            extra={
                "purchase_request_id": str(request.id),
                "request_number": request_number,
                "project_id": str(project_id) if project_id else None,
            },
        )
        return CommandResult(request.id, f"Purchase request {request_number} created")

    @command
    def update_purchase_request(
        self,
        request_id: UUID,
        description: str | None = None,
        quantity: Decimal | None = None,
        uom: str | None = None,
        required_date: date | None = None,
        notes: str | None = None,
    ) -> CommandResult:
        request = self._get_or_raise(PurchaseRequestModel, request_id, "PurchaseRequest")
        if not request.can_update:
            raise BusinessError(
                f"Cannot update purchase request in {request.status} status"
            )
        self._validate_request_fields(
            description if description is not None else request.description,
            quantity if quantity is not None else request.quantity,
            uom if uom is not None else request.uom,
        )
        if description is not None:
            request.description = description.strip()
        if quantity is not None:
            request.quantity = to_decimal(quantity)
        if uom is not None:
            request.uom = uom.strip()
        if required_date is not None:
            request.required_date = required_date
        if notes is not None:
            request.notes = notes
        self.session.flush()
        return CommandResult(request.id, "Purchase request updated successfully")

    @command
    def cancel_purchase_request(self, request_id: UUID) -> CommandResult:
        request = self._get_or_raise(PurchaseRequestModel, request_id, "PurchaseRequest")
        request.cancel()
        self.session.flush()
        logger.info(
            "purchase_request_canceled",
            extra={"purchase_request_id": str(request.id)},
        )
        return CommandResult(request.id, "Purchase request canceled")

    @command
    def send_rfq(self, request_id: UUID, vendor_ids: Sequence[UUID]) -> CommandResult:
        """Open one RFQ item per vendor; the message reports how many."""
        vendor_ids = list(vendor_ids)
        if not vendor_ids:
            raise ValidationError(
                "Invalid RFQ", field_errors={"vendor_ids": "At least one vendor is required"}
            )
        if len(set(vendor_ids)) != len(vendor_ids):
            raise ValidationError(
                "Invalid RFQ", field_errors={"vendor_ids": "Duplicate vendors are not allowed"}
            )

        request = self._get_or_raise(PurchaseRequestModel, request_id, "PurchaseRequest")
        for vendor_id in vendor_ids:
            require_supplier(self.session, vendor_id)

        created = request.send_rfq(vendor_ids, sent_at=self.clock.now())
        self.session.flush()

        logger.info(
            "rfq_sent",
            extra={
                "purchase_request_id": str(request.id),
                "vendor_count": len(created),
            },
        )
        return CommandResult(request.id, f"RFQ sent to {len(created)} vendor(s)")

    @command
    def record_rfq_reply(
        self,
        request_id: UUID,
        item_id: str,
        quoted_price: Decimal,
        lead_time_days: int | None = None,
        notes: str | None = None,
    ) -> CommandResult:
        errors: dict[str, str] = {}
        if quoted_price is None or to_decimal(quoted_price) < 0:
            errors["quoted_price"] = "Quoted price must not be negative"
        if lead_time_days is not None and lead_time_days < 0:
            errors["lead_time_days"] = "Lead time must not be negative"
        if errors:
            raise ValidationError("Invalid RFQ reply", field_errors=errors)

        request = self._get_or_raise(PurchaseRequestModel, request_id, "PurchaseRequest")
        self._require_open_rfq(request)
        item = request.find_rfq_item(item_id)
        item.record_reply(
            quoted_price=quantize_money(quoted_price),
            lead_time_days=lead_time_days,
            notes=notes,
            replied_at=self.clock.now(),
        )
        self.session.flush()

        logger.info(
            "rfq_reply_recorded",
            extra={
                "purchase_request_id": str(request.id),
                "item_id": item_id,
                "quoted_price": str(item.quoted_price),
            },
        )
        return CommandResult(request.id, "RFQ reply recorded")

    @command
    def mark_rfq_no_response(self, request_id: UUID, item_id: str) -> CommandResult:
        request = self._get_or_raise(PurchaseRequestModel, request_id, "PurchaseRequest")
        self._require_open_rfq(request)
        request.find_rfq_item(item_id).mark_no_response()
        self.session.flush()
        return CommandResult(request.id, "RFQ item marked as no response")

    @command
    def select_vendor(self, request_id: UUID, item_id: str) -> CommandResult:
        request = self._get_or_raise(PurchaseRequestModel, request_id, "PurchaseRequest")
        chosen = request.select_vendor(item_id)
        self.session.flush()

        logger.info(
            "vendor_selected",
            extra={
                "purchase_request_id": str(request.id),
                "item_id": item_id,
                "vendor_id": str(chosen.vendor_id),
            },
        )
        return CommandResult(request.id, "Vendor selected")

    @staticmethod
    def _validate_request_fields(description: str, quantity: Decimal, uom: str) -> None:
        errors: dict[str, str] = {}
        if not description or not description.strip():
            errors["description"] = "Description is required"
        if quantity is None or to_decimal(quantity) <= 0:
            errors["quantity"] = "Quantity must be positive"
        if not uom or not uom.strip():
            errors["uom"] = "Unit of measure is required"
        if errors:
            raise ValidationError("Invalid purchase request", field_errors=errors)

    @staticmethod
    def _require_open_rfq(request: PurchaseRequestModel) -> None:
        if request.status not in (
            PurchaseRequestStatus.RFQ_SENT.value,
            PurchaseRequestStatus.VENDOR_SELECTED.value,
        ):
            raise BusinessError(
                f"Purchase request {request.request_number} has no open RFQ "
                f"(status {request.status})"
            )


# =============================================================================
# Purchase orders
# =============================================================================


class PurchaseOrderService(BaseService):
    """Command service for the purchase order lifecycle."""

    def __init__(
        self,
        session: Session,
        publisher: DomainEventPublisher | None = None,
        clock: Clock | None = None,
        settings: ErpSettings | None = None,
    ):
        super().__init__(session, publisher, clock)
        self.settings = settings or get_settings()

    @command
    def create_purchase_order(
        self,
        purchase_request_id: UUID,
        rfq_item_id: str,
        order_date: date,
        expected_delivery_date: date,
        actor_id: UUID | None = None,
        notes: str | None = None,
    ) -> CommandResult:
        request = self._get_or_raise(
            PurchaseRequestModel, purchase_request_id, "PurchaseRequest"
        )
        item = request.find_rfq_item(rfq_item_id)

        if RfqItemStatus(item.status) not in ORDERABLE_RFQ_STATUSES:
            raise BusinessError("RFQ item must be in REPLIED or SELECTED status to create PO")

        existing = self.session.execute(
            select(PurchaseOrderModel.id).where(
                PurchaseOrderModel.purchase_request_id == purchase_request_id,
                PurchaseOrderModel.rfq_item_id == rfq_item_id,
            )
        ).first()
        if existing is not None:
            raise DuplicateResourceError("PurchaseOrder", "RFQ item", rfq_item_id)

        if expected_delivery_date < order_date:
            raise ValidationError(
                "Invalid purchase order",
                field_errors={
                    "expected_delivery_date": "Expected delivery date cannot be before order date"
                },
            )

        self._get_or_raise(CompanyModel, item.vendor_id, "Company")

        if item.status == RfqItemStatus.REPLIED.value:
            request.select_vendor(rfq_item_id)

        po_number = next_document_number(
            self.session,
            PurchaseOrderModel.po_number,
            PURCHASE_ORDER_NUMBER,
            self.clock.today().year,
        )
        po = PurchaseOrderModel(
            po_number=po_number,
            purchase_request_id=request.id,
            rfq_item_id=rfq_item_id,
            project_id=request.project_id,
            vendor_id=item.vendor_id,
            order_date=order_date,
            expected_delivery_date=expected_delivery_date,
            total_amount=quantize_money(item.quoted_price),
            currency=self.settings.default_currency,
            status=PurchaseOrderStatus.DRAFT.value,
            notes=notes,
            created_by_id=actor_id,
        )
        self.session.add(po)
        self.session.flush()

        logger.info(
            "purchase_order_created",
            extra={
                "purchase_order_id": str(po.id),
                "po_number": po_number,
                "vendor_id": str(po.vendor_id),
                "total_amount": str(po.total_amount),
            },
        )
        return CommandResult(po.id, f"Purchase order {po_number} created")

    @command
    def update_purchase_order(
        self,
        po_id: UUID,
        expected_delivery_date: date | None = None,
        notes: str | None = None,
    ) -> CommandResult:
        po = self._get_or_raise(PurchaseOrderModel, po_id, "PurchaseOrder")
        if not po.can_update:
            raise BusinessError(f"Cannot update purchase order in {po.status} status")
        if expected_delivery_date is not None:
            if expected_delivery_date < po.order_date:
                raise ValidationError(
                    "Invalid purchase order",
                    field_errors={
                        "expected_delivery_date": "Expected delivery date cannot be before order date"
                    },
                )
            po.expected_delivery_date = expected_delivery_date
        if notes is not None:
            po.notes = notes
        self.session.flush()
        return CommandResult(po.id, "Purchase order updated successfully")

    @command
    def send_purchase_order(self, po_id: UUID) -> CommandResult:
        po = self._get_or_raise(PurchaseOrderModel, po_id, "PurchaseOrder")
        po.send()
        self.session.flush()
        self._log_transition(po)
        return CommandResult(po.id, "Purchase order sent")

    @command
    def confirm_purchase_order(self, po_id: UUID) -> CommandResult:
        po = self._get_or_raise(PurchaseOrderModel, po_id, "PurchaseOrder")
        po.confirm()
        self.session.flush()
        self._log_transition(po)

        self._publish(
            PurchaseOrderConfirmedEvent(
                purchase_order_id=po.id,
                vendor_id=po.vendor_id,
                po_number=po.po_number,
                total_amount=quantize_money(po.total_amount),
                currency=po.currency,
                occurred_at=self.clock.now(),
            )
        )
        return CommandResult(po.id, "Purchase order confirmed")

    @command
    def receive_purchase_order(self, po_id: UUID) -> CommandResult:
        po = self._get_or_raise(PurchaseOrderModel, po_id, "PurchaseOrder")
        po.receive()
        self.session.flush()
        self._log_transition(po)

        self._publish(
            PurchaseOrderReceivedEvent(
                purchase_order_id=po.id,
                purchase_request_id=po.purchase_request_id,
                po_number=po.po_number,
                occurred_at=self.clock.now(),
            )
        )
        return CommandResult(po.id, "Purchase order received")

    @command
    def cancel_purchase_order(self, po_id: UUID) -> CommandResult:
        po = self._get_or_raise(PurchaseOrderModel, po_id, "PurchaseOrder")
        po.cancel()
        self.session.flush()
        self._log_transition(po)

        self._publish(
            PurchaseOrderCanceledEvent(
                purchase_order_id=po.id,
                purchase_request_id=po.purchase_request_id,
                rfq_item_id=po.rfq_item_id,
                po_number=po.po_number,
                occurred_at=self.clock.now(),
            )
        )
        return CommandResult(po.id, "Purchase order canceled")

    def _log_transition(self, po: PurchaseOrderModel) -> None:
        logger.info(
            "purchase_order_status_changed",
            extra={
                "purchase_order_id": str(po.id),
                "po_number": po.po_number,
                "status": po.status,
            },
        )
