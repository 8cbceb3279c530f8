"""
Property tests for vendor selection and payment status.

Selection runs on transient aggregates; no database is involved.
"""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from hypothesis import given
from hypothesis import strategies as st

import erp_modules.wiring  # noqa: F401  (registers every mapper)
from erp_kernel.exceptions import BusinessError
from erp_modules.finance.models import APStatus, calculate_payment_status
from erp_modules.purchasing.models import PurchaseRequestStatus, RfqItemStatus
from erp_modules.purchasing.orm import PurchaseRequestModel, RfqItemModel

SENT_AT = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

OPEN_STATUSES = st.sampled_from(
    [RfqItemStatus.SENT.value, RfqItemStatus.REPLIED.value, RfqItemStatus.NO_RESPONSE.value]
)


def _request(statuses: list[str]) -> PurchaseRequestModel:
    request = PurchaseRequestModel(
        id=uuid4(),
        request_number="PR-2024-000001",
        description="Steel plate",
        quantity=Decimal("1"),
        status=PurchaseRequestStatus.RFQ_SENT.value,
    )
    for status in statuses:
        request.rfq_items.append(
            RfqItemModel(item_id=str(uuid4()), vendor_id=uuid4(), status=status, sent_at=SENT_AT)
        )
    return request


class TestSelectVendorProperties:

    @given(statuses=st.lists(OPEN_STATUSES, min_size=1, max_size=8), pick=st.integers(0, 7))
    def test_selection_leaves_one_selected(self, statuses, pick):
        request = _request(statuses)
        chosen = request.rfq_items[pick % len(statuses)]
        before = [item.status for item in request.rfq_items]

        if chosen.status != RfqItemStatus.REPLIED.value:
            with pytest.raises(BusinessError):
                request.select_vendor(chosen.item_id)
            assert [item.status for item in request.rfq_items] == before
            assert request.status == PurchaseRequestStatus.RFQ_SENT.value
            return

        request.select_vendor(chosen.item_id)

        after = [item.status for item in request.rfq_items]
        assert after.count(RfqItemStatus.SELECTED.value) == 1
        assert RfqItemStatus.REPLIED.value not in after
        assert request.selected_item() is chosen
        assert request.status == PurchaseRequestStatus.VENDOR_SELECTED.value
        for old, new in zip(before, after):
            if old != RfqItemStatus.REPLIED.value:
                assert new == old


class TestPaymentStatusProperties:

    @given(
        total=st.decimals(min_value=Decimal("0.01"), max_value=Decimal("100000000"), places=2),
        paid=st.decimals(min_value=Decimal("0"), max_value=Decimal("200000000"), places=2),
    )
    def test_status_follows_amounts(self, total, paid):
        status = calculate_payment_status(total, paid)
        if paid >= total:
            assert status == APStatus.PAID
        elif paid > 0:
            assert status == APStatus.PARTIALLY_PAID
        else:
            assert status == APStatus.PENDING
