"""
Module: erp_kernel.selectors.base
Responsibility: Base class for read-only query selectors.  Selectors are
    the read side of every module: SQLAlchemy Core queries (LEFT JOINs,
    COALESCE(SUM(...))) that return frozen view dataclasses and derive
    calculated fields (paid totals, remaining balances, calculated statuses)
    at query time.  There are no stored balances on the read path.

Invariants enforced:
    - Read-only: selectors never add, delete, flush or commit.
    - DTO return convention: frozen dataclasses, never ORM instances.
    - Amounts are quantized to cents before any comparison.
"""

from abc import ABC
from decimal import Decimal
from typing import Any

from sqlalchemy import Select
from sqlalchemy.orm import Session

from erp_kernel.domain.values import quantize_money

DEFAULT_LIMIT = 50
MAX_LIMIT = 500


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    The session belongs to the caller; selectors only read through it.
    """

    def __init__(self, session: Session):
        self.session = session

    @staticmethod
    def _money(value: Any) -> Decimal:
        return quantize_money(value if value is not None else 0)

    @staticmethod
    def _paginate(query: Select, limit: int | None, offset: int | None) -> Select:
        """Apply limit/offset; limit defaults to DEFAULT_LIMIT, capped at MAX_LIMIT."""
        lim = DEFAULT_LIMIT if limit is None else max(0, min(limit, MAX_LIMIT))
        return query.limit(lim).offset(max(0, offset or 0))
