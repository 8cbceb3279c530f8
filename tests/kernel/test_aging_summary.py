"""Tests for aging buckets (``erp_kernel.selectors.aging``)."""

from datetime import date
from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from erp_kernel.selectors.aging import AgingBand, build_aging_summary, days_overdue
from erp_modules.finance.selectors import AP_AGING_BANDS
from erp_modules.invoice.selectors import AR_AGING_BANDS

AS_OF = date(2024, 3, 1)


class TestDaysOverdue:

    def test_not_yet_due(self):
        assert days_overdue(date(2024, 3, 2), AS_OF) == 0

    def test_due_today(self):
        assert days_overdue(AS_OF, AS_OF) == 0

    def test_past_due(self):
        assert days_overdue(date(2024, 1, 31), AS_OF) == 30

    def test_no_due_date(self):
        assert days_overdue(None, AS_OF) == 0


class TestBuildAgingSummary:

    def test_payable_bands(self):
        summary = build_aging_summary(
            AP_AGING_BANDS,
            [
                (0, Decimal("100")),
                (1, Decimal("200")),
                (30, Decimal("300")),
                (31, Decimal("400")),
                (90, Decimal("500")),
                (91, Decimal("600")),
            ],
            AS_OF,
        )

        assert [b.label for b in summary.buckets] == [
            "Current", "1-30 Days", "31-60 Days", "61-90 Days", "Over 90 Days",
        ]
        assert summary.bucket("Current").amount == Decimal("100.00")
        assert summary.bucket("1-30 Days").count == 2
        assert summary.bucket("1-30 Days").amount == Decimal("500.00")
        assert summary.bucket("31-60 Days").amount == Decimal("400.00")
        assert summary.bucket("61-90 Days").amount == Decimal("500.00")
        assert summary.bucket("Over 90 Days").amount == Decimal("600.00")
        assert summary.total_count == 6
        assert summary.total_outstanding == Decimal("2100.00")

    def test_receivable_bands(self):
        summary = build_aging_summary(
            AR_AGING_BANDS, [(15, Decimal("1100")), (61, Decimal("50"))], AS_OF
        )
        assert summary.bucket("30 Days").amount == Decimal("1100.00")
        assert summary.bucket("90+ Days").count == 1

    def test_settled_rows_ignored(self):
        summary = build_aging_summary(
            AP_AGING_BANDS, [(10, Decimal("0")), (10, Decimal("-5"))], AS_OF
        )
        assert summary.total_count == 0
        assert summary.total_outstanding == Decimal("0.00")

    def test_gap_in_bands_raises(self):
        bands = (AgingBand("Current", 0, 0), AgingBand("Late", 10))
        with pytest.raises(ValueError, match="5 days"):
            build_aging_summary(bands, [(5, Decimal("1"))], AS_OF)

    def test_unknown_label_raises_key_error(self):
        summary = build_aging_summary(AP_AGING_BANDS, [], AS_OF)
        with pytest.raises(KeyError):
            summary.bucket("120 Days")

    @given(
        rows=st.lists(
            st.tuples(
                st.integers(min_value=0, max_value=400),
                st.decimals(min_value=Decimal("0.01"), max_value=Decimal("1000000"), places=2),
            ),
            max_size=30,
        )
    )
    def test_buckets_partition_the_total(self, rows):
        summary = build_aging_summary(AP_AGING_BANDS, rows, AS_OF)
        assert summary.total_count == len(rows)
        assert summary.total_outstanding == sum((amount for _, amount in rows), Decimal("0.00"))
        assert sum(b.count for b in summary.buckets) == len(rows)
