"""
Purchasing tests: purchase requests, RFQ rounds and purchase orders.

The seed RFQ round (``replied_rfq``) goes to two vendors who quote 5000
and 6200.  Purchase orders are created from the first quote unless a test
says otherwise.
"""

from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from erp_kernel.exceptions import (
    BusinessError,
    DuplicateResourceError,
    InvalidStatusTransitionError,
    ResourceNotFoundError,
    ValidationError,
    VendorRoleRequiredError,
)
from erp_modules.finance.orm import AccountsPayableModel
from erp_modules.purchasing.events import (
    PurchaseOrderCanceledEvent,
    PurchaseOrderConfirmedEvent,
    PurchaseOrderReceivedEvent,
)
from erp_modules.purchasing.models import (
    PurchaseOrderStatus,
    PurchaseRequestStatus,
    RfqItemStatus,
)
from erp_modules.purchasing.orm import PurchaseOrderModel, PurchaseRequestModel

TODAY = date(2024, 1, 1)


def _new_request(uow, **overrides):
    fields = dict(
        description="Bearing 6205",
        quantity=Decimal("20"),
        uom="EA",
        required_date=TODAY + timedelta(days=14),
    )
    fields.update(overrides)
    return uow.purchase_requests.create_purchase_request(**fields).id


def _item_statuses(uow, request_id):
    detail = uow.purchase_request_selector.get_detail(request_id)
    return {item.vendor_name: item.status for item in detail.rfq_items}


def _payable_count(session):
    return session.execute(select(func.count(AccountsPayableModel.id))).scalar_one()


# =========================================================================
# Purchase requests
# =========================================================================


class TestPurchaseRequest:

    def test_create(self, uow, project_id):
        request_id = _new_request(uow, project_id=project_id)

        detail = uow.purchase_request_selector.get_detail(request_id)
        assert detail.request_number == "PR-2024-000001"
        assert detail.job_code == "WK2-2024-001"
        assert detail.status == PurchaseRequestStatus.DRAFT
        assert detail.rfq_items == ()

    def test_create_validation(self, uow):
        with pytest.raises(ValidationError) as exc_info:
            _new_request(uow, description=" ", quantity=Decimal("0"), uom="")
        assert set(exc_info.value.field_errors) == {"description", "quantity", "uom"}

    def test_unknown_project(self, uow):
        with pytest.raises(ResourceNotFoundError):
            _new_request(uow, project_id=uuid4())

    def test_update_only_in_draft(self, uow, vendor_id):
        request_id = _new_request(uow)
        uow.purchase_requests.update_purchase_request(request_id, quantity=Decimal("25"))
        assert uow.purchase_request_selector.get_detail(request_id).quantity == Decimal("25")

        uow.purchase_requests.send_rfq(request_id, [vendor_id])
        with pytest.raises(BusinessError, match="RFQ_SENT"):
            uow.purchase_requests.update_purchase_request(request_id, notes="late")

    def test_cancel(self, uow):
        request_id = _new_request(uow)
        uow.purchase_requests.cancel_purchase_request(request_id)
        assert uow.purchase_request_selector.get_detail(request_id).status == (
            PurchaseRequestStatus.CANCELED
        )

    def test_list_filters(self, uow, project_id, vendor_id):
        first = _new_request(uow, project_id=project_id)
        second = _new_request(uow, description="Shaft blank")
        uow.purchase_requests.send_rfq(first, [vendor_id])

        assert [v.id for v in uow.purchase_request_selector.list()] == [second, first]
        rfq_sent = uow.purchase_request_selector.list(status=PurchaseRequestStatus.RFQ_SENT)
        assert [(v.id, v.rfq_item_count) for v in rfq_sent] == [(first, 1)]
        assert [v.id for v in uow.purchase_request_selector.list(search="shaft")] == [second]
        assert [v.id for v in uow.purchase_request_selector.list(project_id=project_id)] == [first]


# =========================================================================
# RFQ round
# =========================================================================


class TestRfq:

    def test_send_rfq(self, uow, vendor_id, second_vendor_id):
        request_id = _new_request(uow)
        result = uow.purchase_requests.send_rfq(request_id, [vendor_id, second_vendor_id])

        assert result.message == "RFQ sent to 2 vendor(s)"
        assert uow.purchase_request_selector.get_detail(request_id).status == (
            PurchaseRequestStatus.RFQ_SENT
        )
        assert _item_statuses(uow, request_id) == {
            "Daehan Steel": RfqItemStatus.SENT,
            "Hanil Machining": RfqItemStatus.SENT,
        }

    def test_send_rfq_needs_vendors(self, uow):
        request_id = _new_request(uow)
        with pytest.raises(ValidationError):
            uow.purchase_requests.send_rfq(request_id, [])

    def test_send_rfq_rejects_duplicates(self, uow, vendor_id):
        request_id = _new_request(uow)
        with pytest.raises(ValidationError, match="Invalid RFQ"):
            uow.purchase_requests.send_rfq(request_id, [vendor_id, vendor_id])

    def test_send_rfq_to_customer_rejected(self, uow, session, vendor_id, customer_id):
        request_id = _new_request(uow)
        with pytest.raises(VendorRoleRequiredError):
            uow.purchase_requests.send_rfq(request_id, [vendor_id, customer_id])

        request = session.get(PurchaseRequestModel, request_id)
        assert request.status == PurchaseRequestStatus.DRAFT.value
        assert request.rfq_items == []

    def test_send_rfq_to_inactive_vendor_rejected(self, uow, inactive_vendor_id):
        request_id = _new_request(uow)
        with pytest.raises(VendorRoleRequiredError):
            uow.purchase_requests.send_rfq(request_id, [inactive_vendor_id])

    def test_rfq_sent_only_once(self, uow, vendor_id, second_vendor_id):
        request_id = _new_request(uow)
        uow.purchase_requests.send_rfq(request_id, [vendor_id])
        with pytest.raises(InvalidStatusTransitionError):
            uow.purchase_requests.send_rfq(request_id, [second_vendor_id])

    def test_record_reply(self, uow, replied_rfq):
        detail = uow.purchase_request_selector.get_detail(replied_rfq.request_id)
        quotes = {i.vendor_name: (i.status, i.quoted_price, i.quoted_lead_time) for i in detail.rfq_items}

        assert quotes == {
            "Daehan Steel": (RfqItemStatus.REPLIED, Decimal("5000.00"), 7),
            "Hanil Machining": (RfqItemStatus.REPLIED, Decimal("6200.00"), 5),
        }

    def test_negative_quote_rejected(self, uow, vendor_id):
        request_id = _new_request(uow)
        uow.purchase_requests.send_rfq(request_id, [vendor_id])
        item_id = uow.purchase_request_selector.get_detail(request_id).rfq_items[0].item_id
        with pytest.raises(ValidationError):
            uow.purchase_requests.record_rfq_reply(request_id, item_id, Decimal("-1"))

    def test_reply_needs_open_rfq(self, uow):
        request_id = _new_request(uow)
        with pytest.raises(BusinessError, match="no open RFQ"):
            uow.purchase_requests.record_rfq_reply(request_id, "missing", Decimal("10"))

    def test_unknown_item(self, uow, replied_rfq):
        with pytest.raises(ResourceNotFoundError):
            uow.purchase_requests.select_vendor(replied_rfq.request_id, "missing")

    def test_no_response(self, uow, vendor_id, second_vendor_id):
        request_id = _new_request(uow)
        uow.purchase_requests.send_rfq(request_id, [vendor_id, second_vendor_id])
        items = uow.purchase_request_selector.get_detail(request_id).rfq_items
        uow.purchase_requests.mark_rfq_no_response(request_id, items[1].item_id)

        assert _item_statuses(uow, request_id)["Hanil Machining"] == RfqItemStatus.NO_RESPONSE

    def test_select_vendor_rejects_the_rest(self, uow, replied_rfq):
        result = uow.purchase_requests.select_vendor(
            replied_rfq.request_id, replied_rfq.second_vendor_item_id
        )

        assert result.message == "Vendor selected"
        assert uow.purchase_request_selector.get_detail(replied_rfq.request_id).status == (
            PurchaseRequestStatus.VENDOR_SELECTED
        )
        assert _item_statuses(uow, replied_rfq.request_id) == {
            "Daehan Steel": RfqItemStatus.REJECTED,
            "Hanil Machining": RfqItemStatus.SELECTED,
        }

    def test_select_unreplied_item_rejected(self, uow, vendor_id):
        request_id = _new_request(uow)
        uow.purchase_requests.send_rfq(request_id, [vendor_id])
        item_id = uow.purchase_request_selector.get_detail(request_id).rfq_items[0].item_id
        with pytest.raises(BusinessError, match="REPLIED"):
            uow.purchase_requests.select_vendor(request_id, item_id)

    def test_second_selection_rejected(self, uow, replied_rfq):
        uow.purchase_requests.select_vendor(replied_rfq.request_id, replied_rfq.vendor_item_id)
        with pytest.raises(BusinessError):
            uow.purchase_requests.select_vendor(
                replied_rfq.request_id, replied_rfq.second_vendor_item_id
            )


# =========================================================================
# Purchase orders
# =========================================================================


class TestCreatePurchaseOrder:

    def test_create_from_replied_item_selects_vendor(self, uow, replied_rfq, make_purchase_order,
                                                     vendor_id):
        po_id = make_purchase_order()

        view = uow.purchase_order_selector.get_detail(po_id)
        assert view.po_number == "PO-2024-000001"
        assert view.status == PurchaseOrderStatus.DRAFT
        assert view.vendor_id == vendor_id
        assert view.vendor_name == "Daehan Steel"
        assert view.total_amount == Decimal("5000.00")
        assert view.currency == "KRW"
        assert view.job_code == "WK2-2024-001"
        assert _item_statuses(uow, replied_rfq.request_id) == {
            "Daehan Steel": RfqItemStatus.SELECTED,
            "Hanil Machining": RfqItemStatus.REJECTED,
        }

    def test_create_from_selected_item(self, uow, replied_rfq, make_purchase_order):
        uow.purchase_requests.select_vendor(
            replied_rfq.request_id, replied_rfq.second_vendor_item_id
        )
        po_id = make_purchase_order(replied_rfq.second_vendor_item_id)

        assert uow.purchase_order_selector.get_detail(po_id).total_amount == Decimal("6200.00")

    def test_rejected_item_cannot_be_ordered(self, replied_rfq, make_purchase_order):
        make_purchase_order()
        with pytest.raises(BusinessError, match="REPLIED or SELECTED"):
            make_purchase_order(replied_rfq.second_vendor_item_id)

    def test_one_order_per_item(self, make_purchase_order):
        make_purchase_order()
        with pytest.raises(DuplicateResourceError):
            make_purchase_order()

    def test_expected_date_before_order_date(self, uow, replied_rfq):
        with pytest.raises(ValidationError):
            uow.purchase_orders.create_purchase_order(
                replied_rfq.request_id,
                replied_rfq.vendor_item_id,
                order_date=TODAY,
                expected_delivery_date=TODAY - timedelta(days=1),
            )
        assert _item_statuses(uow, replied_rfq.request_id)["Daehan Steel"] == (
            RfqItemStatus.REPLIED
        )

    def test_update_only_in_draft(self, uow, make_purchase_order):
        po_id = make_purchase_order()
        uow.purchase_orders.update_purchase_order(po_id, notes="Deliver to gate 2")
        assert uow.purchase_order_selector.get_detail(po_id).notes == "Deliver to gate 2"

        uow.purchase_orders.send_purchase_order(po_id)
        with pytest.raises(BusinessError, match="SENT"):
            uow.purchase_orders.update_purchase_order(po_id, notes="too late")


class TestPurchaseOrderLifecycle:

    def test_send_confirm_receive(self, uow, replied_rfq, make_purchase_order):
        po_id = make_purchase_order()

        assert uow.purchase_orders.send_purchase_order(po_id).message == "Purchase order sent"
        assert uow.purchase_orders.confirm_purchase_order(po_id).message == (
            "Purchase order confirmed"
        )
        assert uow.purchase_orders.receive_purchase_order(po_id).message == (
            "Purchase order received"
        )

        assert uow.purchase_order_selector.get_detail(po_id).status == PurchaseOrderStatus.RECEIVED
        assert uow.purchase_request_selector.get_detail(replied_rfq.request_id).status == (
            PurchaseRequestStatus.CLOSED
        )
        assert [type(e) for e in uow.bus.published] == [
            PurchaseOrderConfirmedEvent,
            PurchaseOrderReceivedEvent,
        ]

    def test_confirm_event_payload(self, uow, make_purchase_order, vendor_id,
                                   deterministic_clock):
        po_id = make_purchase_order()
        uow.purchase_orders.send_purchase_order(po_id)
        uow.purchase_orders.confirm_purchase_order(po_id)

        event = uow.bus.published[-1]
        assert event.purchase_order_id == po_id
        assert event.vendor_id == vendor_id
        assert event.po_number == "PO-2024-000001"
        assert event.total_amount == Decimal("5000.00")
        assert event.currency == "KRW"
        assert event.occurred_at == deterministic_clock.now()

    def test_confirm_requires_sent(self, uow, session, make_purchase_order):
        po_id = make_purchase_order()
        with pytest.raises(InvalidStatusTransitionError):
            uow.purchase_orders.confirm_purchase_order(po_id)

        assert session.get(PurchaseOrderModel, po_id).status == PurchaseOrderStatus.DRAFT.value
        assert uow.bus.published == []
        assert _payable_count(session) == 0

    def test_receive_requires_confirmed(self, uow, make_purchase_order):
        po_id = make_purchase_order()
        uow.purchase_orders.send_purchase_order(po_id)
        with pytest.raises(InvalidStatusTransitionError):
            uow.purchase_orders.receive_purchase_order(po_id)

    @pytest.mark.parametrize("steps", [(), ("send",), ("send", "confirm")])
    def test_cancel_reverts_vendor_selection(self, uow, replied_rfq, make_purchase_order, steps):
        po_id = make_purchase_order()
        for step in steps:
            getattr(uow.purchase_orders, f"{step}_purchase_order")(po_id)

        result = uow.purchase_orders.cancel_purchase_order(po_id)

        assert result.message == "Purchase order canceled"
        assert uow.purchase_order_selector.get_detail(po_id).status == PurchaseOrderStatus.CANCELED
        assert uow.purchase_request_selector.get_detail(replied_rfq.request_id).status == (
            PurchaseRequestStatus.RFQ_SENT
        )
        assert _item_statuses(uow, replied_rfq.request_id) == {
            "Daehan Steel": RfqItemStatus.REPLIED,
            "Hanil Machining": RfqItemStatus.REPLIED,
        }
        assert isinstance(uow.bus.published[-1], PurchaseOrderCanceledEvent)

    def test_other_vendor_can_be_ordered_after_cancel(self, uow, replied_rfq,
                                                       make_purchase_order):
        po_id = make_purchase_order()
        uow.purchase_orders.send_purchase_order(po_id)
        uow.purchase_orders.confirm_purchase_order(po_id)
        uow.purchase_orders.cancel_purchase_order(po_id)

        second_po = make_purchase_order(replied_rfq.second_vendor_item_id)

        view = uow.purchase_order_selector.get_detail(second_po)
        assert view.vendor_name == "Hanil Machining"
        assert view.total_amount == Decimal("6200.00")
        assert uow.purchase_request_selector.get_detail(replied_rfq.request_id).status == (
            PurchaseRequestStatus.VENDOR_SELECTED
        )
        assert _item_statuses(uow, replied_rfq.request_id) == {
            "Daehan Steel": RfqItemStatus.REJECTED,
            "Hanil Machining": RfqItemStatus.SELECTED,
        }

    def test_received_order_cannot_be_canceled(self, uow, make_purchase_order):
        po_id = make_purchase_order()
        uow.purchase_orders.send_purchase_order(po_id)
        uow.purchase_orders.confirm_purchase_order(po_id)
        uow.purchase_orders.receive_purchase_order(po_id)

        with pytest.raises(InvalidStatusTransitionError):
            uow.purchase_orders.cancel_purchase_order(po_id)

    def test_canceled_item_cannot_be_reordered(self, uow, make_purchase_order):
        po_id = make_purchase_order()
        uow.purchase_orders.cancel_purchase_order(po_id)
        with pytest.raises(DuplicateResourceError):
            make_purchase_order()

    def test_list_filters(self, uow, replied_rfq, make_purchase_order, vendor_id,
                          second_vendor_id):
        po_id = make_purchase_order()
        uow.purchase_orders.send_purchase_order(po_id)

        assert [v.id for v in uow.purchase_order_selector.list(vendor_id=vendor_id)] == [po_id]
        assert uow.purchase_order_selector.list(vendor_id=second_vendor_id) == []
        assert [v.id for v in uow.purchase_order_selector.list(
            status=PurchaseOrderStatus.SENT,
            purchase_request_id=replied_rfq.request_id,
        )] == [po_id]
        assert uow.purchase_order_selector.list(status=PurchaseOrderStatus.DRAFT) == []

    def test_missing_order(self, uow):
        with pytest.raises(ResourceNotFoundError):
            uow.purchase_orders.send_purchase_order(uuid4())
