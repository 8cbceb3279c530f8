"""
Aging buckets shared by the payable and receivable selectors.

A bucket is a labelled range of days past due.  ``build_aging_summary``
folds (days_overdue, outstanding) pairs into the buckets in label order;
rows with nothing outstanding are ignored.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from erp_kernel.domain.values import ZERO, quantize_money


@dataclass(frozen=True)
class AgingBand:
    """Days-overdue range ``[min_days, max_days]``; ``max_days`` None is open-ended."""
    label: str
    min_days: int
    max_days: int | None = None

    def contains(self, days_overdue: int) -> bool:
        if days_overdue < self.min_days:
            return False
        return self.max_days is None or days_overdue <= self.max_days


@dataclass(frozen=True)
class AgingBucket:
    label: str
    count: int
    amount: Decimal


@dataclass(frozen=True)
class AgingSummary:
    as_of: date
    buckets: tuple[AgingBucket, ...]
    total_count: int
    total_outstanding: Decimal

    def bucket(self, label: str) -> AgingBucket:
        for b in self.buckets:
            if b.label == label:
                return b
        raise KeyError(label)


def days_overdue(due_date: date | None, as_of: date) -> int:
    if due_date is None or due_date >= as_of:
        return 0
    return (as_of - due_date).days


def build_aging_summary(
    bands: Sequence[AgingBand],
    rows: Iterable[tuple[int, Decimal]],
    as_of: date,
) -> AgingSummary:
    counts = {band.label: 0 for band in bands}
    amounts = {band.label: ZERO for band in bands}
    for overdue, outstanding in rows:
        outstanding = quantize_money(outstanding)
        if outstanding <= ZERO:
            continue
        for band in bands:
            if band.contains(overdue):
                counts[band.label] += 1
                amounts[band.label] += outstanding
                break
        else:
            raise ValueError(f"No aging band covers {overdue} days overdue")

    buckets = tuple(
        AgingBucket(label=band.label, count=counts[band.label], amount=amounts[band.label])
        for band in bands
    )
    return AgingSummary(
        as_of=as_of,
        buckets=buckets,
        total_count=sum(b.count for b in buckets),
        total_outstanding=sum((b.amount for b in buckets), ZERO),
    )
