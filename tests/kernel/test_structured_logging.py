"""
Structured logging as seen from ERP commands.

Each service command binds its name (and the acting user, when given) into
the log context; the event bus adds the event id while handlers run.  The
records below are the ones operators grep for: payable creation on PO
confirmation, event dispatch, payments and rejected commands.
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from erp_kernel.exceptions import InvalidStatusTransitionError, ValidationError
from erp_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)
from erp_modules.finance.models import APStatus
from erp_modules.purchasing.events import PurchaseOrderConfirmedEvent

TODAY = date(2024, 1, 1)


def _records(captured_logs, message):
    return [r for r in captured_logs() if r["message"] == message]


@pytest.fixture
def confirmed(uow, make_purchase_order, captured_logs):
    po_id = make_purchase_order()
    uow.purchase_orders.send_purchase_order(po_id)
    uow.purchase_orders.confirm_purchase_order(po_id)
    return po_id


class TestCommandRecords:

    def test_payable_record_carries_command_and_event(self, uow, confirmed, captured_logs):
        [record] = _records(captured_logs, "accounts_payable_created")
        event = uow.bus.published[-1]

        assert record["command"] == "confirm_purchase_order"
        assert record["event_id"] == str(event.event_id)
        assert record["po_number"] == "PO-2024-000001"
        assert record["total_amount"] == "5000.00"
        assert record["due_date"] == "2024-01-31"
        assert record["logger"].startswith("erp_kernel.")

    def test_event_dispatch_records(self, confirmed, captured_logs):
        [published] = [
            r for r in _records(captured_logs, "domain_event_published")
            if r["event_type"] == "PurchaseOrderConfirmedEvent"
        ]
        assert published["handler_count"] == 1
        assert published["command"] == "confirm_purchase_order"

        handled = _records(captured_logs, "domain_event_handled")
        assert any(r["event_id"] == published["event_id"] for r in handled)

    def test_records_outside_dispatch_have_no_event_id(self, confirmed, captured_logs):
        [created] = _records(captured_logs, "purchase_order_created")
        assert created["command"] == "create_purchase_order"
        assert "event_id" not in created

    def test_command_inside_outer_command_keeps_outer_name(self, uow, captured_logs):
        with LogContext.bind(command="import_requests"):
            uow.purchase_requests.create_purchase_request(
                "Bolts M8", Decimal("500"), "EA", TODAY
            )

        [record] = _records(captured_logs, "purchase_request_created")
        assert record["command"] == "import_requests"

    def test_actor_bound_for_payment(self, uow, confirmed, vendor_id, user_id, captured_logs):
        [payable] = uow.payable_selector.get_by_vendor(vendor_id, as_of=TODAY)
        uow.payables.record_payment(payable.id, TODAY, Decimal("400"), actor_id=user_id)

        [record] = _records(captured_logs, "vendor_payment_recorded")
        assert record["command"] == "record_payment"
        assert record["actor_id"] == str(user_id)
        assert record["amount"] == "400.00"
        assert record["status"] == APStatus.PARTIALLY_PAID.value

    def test_context_released_after_command(self, confirmed):
        assert LogContext.current() == {}


class TestRejectedCommands:

    def test_invalid_transition_logged_with_details(self, uow, make_purchase_order,
                                                    captured_logs):
        po_id = make_purchase_order()
        with pytest.raises(InvalidStatusTransitionError):
            uow.purchase_orders.confirm_purchase_order(po_id)

        [record] = _records(captured_logs, "command_rejected")
        assert record["level"] == "INFO"
        assert record["command"] == "confirm_purchase_order"
        assert record["error_type"] == "InvalidStatusTransitionError"
        assert record["error_code"] == "INVALID_STATUS_TRANSITION"
        assert record["error_details"] == {
            "entity": "PurchaseOrder",
            "entity_id": str(po_id),
            "current_status": "DRAFT",
            "action": "confirm",
        }
        assert "traceback" in record
        assert LogContext.current() == {}

    def test_validation_errors_listed(self, uow, captured_logs):
        with pytest.raises(ValidationError):
            uow.purchase_requests.create_purchase_request(
                " ", Decimal("0"), "EA", TODAY
            )

        [record] = _records(captured_logs, "command_rejected")
        assert record["error_code"] == "VALIDATION_ERROR"
        assert set(record["error_details"]["field_errors"]) >= {"description", "quantity"}

    def test_handler_failure_is_not_reported_as_rejection(self, uow, make_purchase_order,
                                                          captured_logs):
        po_id = make_purchase_order()
        uow.purchase_orders.send_purchase_order(po_id)

        def fail(event):
            raise RuntimeError("ledger offline")

        uow.bus.subscribe(PurchaseOrderConfirmedEvent, fail)

        with pytest.raises(RuntimeError):
            uow.purchase_orders.confirm_purchase_order(po_id)
        assert _records(captured_logs, "command_rejected") == []


class TestFormatter:

    def _format(self, **extra):
        record = logging.makeLogRecord({
            "name": "erp_kernel.modules.finance", "levelname": "INFO", "msg": "aging_built",
        })
        record.__dict__.update(extra)
        return json.loads(StructuredFormatter().format(record))

    def test_domain_values_rendered(self):
        payload = self._format(
            status=APStatus.PAID, amount=Decimal("12.50"), as_of=date(2024, 3, 1)
        )
        assert payload["status"] == "PAID"
        assert payload["amount"] == "12.50"
        assert payload["as_of"] == "2024-03-01"

    def test_bound_context_included(self):
        with LogContext.bind(correlation_id="req-17", command="get_ar_aging"):
            payload = self._format()
        assert payload["correlation_id"] == "req-17"
        assert payload["command"] == "get_ar_aging"

    def test_extra_cannot_shadow_core_fields(self):
        with LogContext.bind(command="cancel"):
            payload = self._format(command="spoofed")
        assert payload["command"] == "cancel"


class TestLogContext:

    def test_bind_restores_outer_fields(self):
        with LogContext.bind(command="send_rfq"):
            with LogContext.bind(event_id="e-1", actor_id=None):
                assert LogContext.current() == {"command": "send_rfq", "event_id": "e-1"}
            assert LogContext.current() == {"command": "send_rfq"}
        assert LogContext.current() == {}

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError, match="po_number"):
            LogContext.set(po_number="PO-2024-000001")


class TestConfigureLogging:

    @pytest.fixture(autouse=True)
    def _restore_suite_logging(self):
        reset_logging()
        yield
        reset_logging()
        configure_logging(level=logging.DEBUG)

    def test_second_call_keeps_first_handler(self):
        first, second = StringIO(), StringIO()
        configure_logging(stream=first)
        configure_logging(stream=second)

        get_logger("modules.invoice").info("invoices_marked_overdue", extra={"count": 2})

        assert json.loads(first.getvalue())["count"] == 2
        assert second.getvalue() == ""

    def test_reset_leaves_other_handlers(self):
        extra = logging.StreamHandler(StringIO())
        root = logging.getLogger("erp_kernel")
        root.addHandler(extra)
        try:
            configure_logging(stream=StringIO())
            reset_logging()
            assert root.handlers == [extra]
        finally:
            root.removeHandler(extra)
