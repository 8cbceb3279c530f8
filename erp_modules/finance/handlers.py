"""
Finance event handlers.

``AccountsPayableEventHandler`` turns a confirmed purchase order into an
accounts payable.  It runs inside the confirming unit of work, so a
failure here rolls the confirmation back as well.
"""

from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from erp_config import ErpSettings, get_settings
from erp_kernel.domain.clock import Clock, SystemClock
from erp_kernel.domain.values import ZERO, quantize_money
from erp_kernel.exceptions import BusinessError, ResourceNotFoundError
from erp_kernel.logging_config import get_logger
from erp_modules.company.orm import CompanyModel
from erp_modules.finance.models import APStatus, DisbursementCauseType
from erp_modules.finance.orm import AccountsPayableModel
from erp_modules.purchasing.events import PurchaseOrderConfirmedEvent

logger = get_logger("modules.finance.handlers")


class AccountsPayableEventHandler:

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        settings: ErpSettings | None = None,
    ):
        self.session = session
        self.clock = clock or SystemClock()
        self.settings = settings or get_settings()

    def on_purchase_order_confirmed(self, event: PurchaseOrderConfirmedEvent) -> None:
        cause_type = DisbursementCauseType.PURCHASE_ORDER.value
        existing = self.session.execute(
            select(AccountsPayableModel.id).where(
                AccountsPayableModel.cause_type == cause_type,
                AccountsPayableModel.cause_id == event.purchase_order_id,
            )
        ).scalar_one_or_none()
        if existing is not None:
            logger.info(
                "accounts_payable_exists",
                extra={
                    "accounts_payable_id": str(existing),
                    "po_number": event.po_number,
                },
            )
            return

        if self.session.get(CompanyModel, event.vendor_id) is None:
            raise ResourceNotFoundError("Company", event.vendor_id)

        total = quantize_money(event.total_amount)
        if total <= ZERO:
            raise BusinessError(
                f"Cannot create accounts payable for {event.po_number}: total must be positive"
            )

        ap = AccountsPayableModel(
            cause_type=cause_type,
            cause_id=event.purchase_order_id,
            cause_reference_number=event.po_number,
            vendor_id=event.vendor_id,
            total_amount=total,
            currency=event.currency,
            due_date=self.clock.today() + timedelta(days=self.settings.ap_payment_terms_days),
            status=APStatus.PENDING.value,
        )
        self.session.add(ap)
        self.session.flush()

        logger.info(
            "accounts_payable_created",
            extra={
                "accounts_payable_id": str(ap.id),
                "po_number": event.po_number,
                "vendor_id": str(event.vendor_id),
                "total_amount": str(total),
                "due_date": ap.due_date,
            },
        )
