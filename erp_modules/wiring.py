"""
erp_modules.wiring -- one place that builds the services for a unit of work.

Responsibility:
    Creates every module service and selector exactly once over one
    Session, one Clock and one event bus, and subscribes the event
    handlers.  Services never construct each other; they meet only
    through the bus.

Invariants enforced:
    - All services share the same Session, publisher and Clock.
    - Handler order per event type is fixed here:
        PurchaseOrderConfirmedEvent -> AccountsPayableEventHandler
        PurchaseOrderReceivedEvent  -> PurchaseRequestEventHandler (close)
        PurchaseOrderCanceledEvent  -> PurchaseRequestEventHandler (revert)
        QuotationAcceptedEvent      -> ProjectEventHandler

Non-goals:
    - Does NOT commit or roll back; ``session_scope()`` does.

Usage:
    with session_scope() as session:
        uow = build_unit_of_work(session)
        uow.purchase_orders.confirm_purchase_order(po_id)
        ap = uow.payable_selector.list(vendor_id=vendor_id)[0]
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from erp_config import ErpSettings, get_settings
from erp_kernel.domain.clock import Clock, SystemClock
from erp_kernel.events import InProcessEventBus
from erp_kernel.services.locks import NoOpProjectLock, ProjectLock
from erp_modules.auth.service import UserService
from erp_modules.company.selectors import CompanySelector
from erp_modules.company.service import CompanyService
from erp_modules.delivery.service import DeliveryService
from erp_modules.finance.handlers import AccountsPayableEventHandler
from erp_modules.finance.selectors import AccountsPayableSelector
from erp_modules.finance.service import AccountsPayableService
from erp_modules.invoice.selectors import InvoiceSelector
from erp_modules.invoice.service import InvoiceService
from erp_modules.project.handlers import ProjectEventHandler
from erp_modules.project.selectors import ProjectSelector
from erp_modules.project.service import ProjectService
from erp_modules.purchasing.events import (
    PurchaseOrderCanceledEvent,
    PurchaseOrderConfirmedEvent,
    PurchaseOrderReceivedEvent,
)
from erp_modules.purchasing.handlers import PurchaseRequestEventHandler
from erp_modules.purchasing.selectors import PurchaseOrderSelector, PurchaseRequestSelector
from erp_modules.purchasing.service import PurchaseOrderService, PurchaseRequestService
from erp_modules.quotation.events import QuotationAcceptedEvent
from erp_modules.quotation.selectors import QuotationSelector
from erp_modules.quotation.service import QuotationService


class UnitOfWork:
    """Services, selectors and the event bus for one Session."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        settings: ErpSettings | None = None,
        project_lock: ProjectLock | None = None,
        bus: InProcessEventBus | None = None,
    ) -> None:
        self.session = session
        self.clock = clock or SystemClock()
        self.settings = settings or get_settings()
        self.project_lock = project_lock or NoOpProjectLock()
        self.bus = bus or InProcessEventBus()

        # Commands
        self.companies = CompanyService(session, self.bus, self.clock)
        self.users = UserService(session, self.bus, self.clock)
        self.projects = ProjectService(session, self.bus, self.clock)
        self.quotations = QuotationService(session, self.bus, self.clock)
        self.deliveries = DeliveryService(
            session, self.bus, self.clock, project_lock=self.project_lock
        )
        self.purchase_requests = PurchaseRequestService(session, self.bus, self.clock)
        self.purchase_orders = PurchaseOrderService(
            session, self.bus, self.clock, settings=self.settings
        )
        self.payables = AccountsPayableService(session, self.bus, self.clock)
        self.invoices = InvoiceService(
            session,
            self.bus,
            self.clock,
            settings=self.settings,
            project_lock=self.project_lock,
        )

        # Queries
        self.company_selector = CompanySelector(session)
        self.project_selector = ProjectSelector(session)
        self.quotation_selector = QuotationSelector(session)
        self.purchase_request_selector = PurchaseRequestSelector(session)
        self.purchase_order_selector = PurchaseOrderSelector(session)
        self.payable_selector = AccountsPayableSelector(session)
        self.invoice_selector = InvoiceSelector(session)

        # Handlers
        self.payable_handler = AccountsPayableEventHandler(
            session, clock=self.clock, settings=self.settings
        )
        self.purchase_request_handler = PurchaseRequestEventHandler(session)
        self.project_handler = ProjectEventHandler(session)

        self.bus.subscribe(
            PurchaseOrderConfirmedEvent, self.payable_handler.on_purchase_order_confirmed
        )
        self.bus.subscribe(
            PurchaseOrderReceivedEvent,
            self.purchase_request_handler.on_purchase_order_received,
        )
        self.bus.subscribe(
            PurchaseOrderCanceledEvent,
            self.purchase_request_handler.on_purchase_order_canceled,
        )
        self.bus.subscribe(QuotationAcceptedEvent, self.project_handler.on_quotation_accepted)


def build_unit_of_work(
    session: Session,
    clock: Clock | None = None,
    settings: ErpSettings | None = None,
    project_lock: ProjectLock | None = None,
) -> UnitOfWork:
    return UnitOfWork(session, clock=clock, settings=settings, project_lock=project_lock)
