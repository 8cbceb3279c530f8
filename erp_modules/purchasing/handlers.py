"""
Purchasing event handlers.

``PurchaseRequestEventHandler`` keeps a purchase request in step with the
purchase order raised from it:

    PurchaseOrderReceivedEvent  -> request VENDOR_SELECTED -> CLOSED
    PurchaseOrderCanceledEvent  -> request VENDOR_SELECTED -> RFQ_SENT,
                                   RFQ item SELECTED -> REPLIED

A request that is no longer VENDOR_SELECTED is left alone and the skip is
logged.  A missing request raises, rolling back the PO transition too.
"""

from uuid import UUID

from sqlalchemy.orm import Session

from erp_kernel.exceptions import ResourceNotFoundError
from erp_kernel.logging_config import get_logger
from erp_modules.purchasing.events import (
    PurchaseOrderCanceledEvent,
    PurchaseOrderReceivedEvent,
)
from erp_modules.purchasing.models import PurchaseRequestStatus
from erp_modules.purchasing.orm import PurchaseRequestModel

logger = get_logger("modules.purchasing.handlers")


class PurchaseRequestEventHandler:

    def __init__(self, session: Session):
        self.session = session

    def _load(self, request_id: UUID) -> PurchaseRequestModel:
        request = self.session.get(PurchaseRequestModel, request_id)
        if request is None:
            raise ResourceNotFoundError("PurchaseRequest", request_id)
        return request

    def _skip(self, request: PurchaseRequestModel, po_number: str, reason: str) -> bool:
        if request.status == PurchaseRequestStatus.VENDOR_SELECTED.value:
            return False
        logger.info(
            reason,
            extra={
                "purchase_request_id": str(request.id),
                "status": request.status,
                "po_number": po_number,
            },
        )
        return True

    def on_purchase_order_received(self, event: PurchaseOrderReceivedEvent) -> None:
        request = self._load(event.purchase_request_id)
        if self._skip(request, event.po_number, "purchase_request_close_skipped"):
            return

        request.close()
        self.session.flush()
        logger.info(
            "purchase_request_closed",
            extra={
                "purchase_request_id": str(request.id),
                "po_number": event.po_number,
            },
        )

    def on_purchase_order_canceled(self, event: PurchaseOrderCanceledEvent) -> None:
        request = self._load(event.purchase_request_id)
        if self._skip(request, event.po_number, "purchase_request_revert_skipped"):
            return

        request.revert_vendor_selection(event.rfq_item_id)
        self.session.flush()
        logger.info(
            "vendor_selection_reverted",
            extra={
                "purchase_request_id": str(request.id),
                "item_id": event.rfq_item_id,
                "po_number": event.po_number,
            },
        )
