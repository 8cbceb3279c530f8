"""
Yearly document numbers.

Numbers look like ``PO-2024-000001``: a prefix, the document year and a
zero-padded sequence.  The next sequence is the highest existing one for
that prefix and year plus one, computed inside the caller's transaction.
Uniqueness is guaranteed by the unique constraint on the number column;
two concurrent writers race to the constraint and one of them fails.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import Integer, cast, func, select
from sqlalchemy.orm import InstrumentedAttribute, Session


@dataclass(frozen=True)
class DocumentNumberFormat:
    """``<prefix>-<year>-<sequence zero-padded to width>``"""
    prefix: str
    width: int

    def year_prefix(self, year: int) -> str:
        return f"{self.prefix}-{year}-"

    def format(self, year: int, sequence: int) -> str:
        return f"{self.year_prefix(year)}{sequence:0{self.width}d}"


PURCHASE_REQUEST_NUMBER = DocumentNumberFormat(prefix="PR", width=6)
PURCHASE_ORDER_NUMBER = DocumentNumberFormat(prefix="PO", width=6)
INVOICE_NUMBER = DocumentNumberFormat(prefix="INV", width=6)
PROJECT_JOB_CODE = DocumentNumberFormat(prefix="WK2", width=3)


def next_document_number(
    session: Session,
    column: InstrumentedAttribute,
    number_format: DocumentNumberFormat,
    year: int,
) -> str:
    """Return the next free number for ``year`` in ``column``."""
    prefix = number_format.year_prefix(year)
    # Width is a minimum, so compare the sequences as integers, not as text.
    sequence = cast(func.substr(column, len(prefix) + 1), Integer)
    current = session.execute(
        select(func.max(sequence)).where(column.like(f"{prefix}%"))
    ).scalar_one_or_none()
    return number_format.format(year, (current or 0) + 1)
