"""
Module: erp_kernel.db.base
Responsibility: Declarative base classes for every ERP ORM model.  Provides
    the UUID primary key convention, the type annotation map that keeps column
    types consistent across modules, and the TrackedBase audit columns.
Architecture position: Kernel > DB.  Lowest-level import target; MUST NOT
    import from services/, selectors/ or erp_modules.

Invariants enforced:
    - UUID primary keys (uuid4), stored as String(36) so the schema runs on
      PostgreSQL and SQLite alike.
    - Money columns map Python Decimal to Numeric(19, 2).  NEVER use float
      for amounts.
    - Status enums are stored by value in String(20) columns.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import BigInteger, Date, DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

STATUS_LENGTH = 20


class UUIDString(TypeDecorator):
    """UUID stored as its 36-character string form."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value if isinstance(value, PyUUID) else PyUUID(value)


class Base(DeclarativeBase):
    """
    Declarative base for all ERP models.

    Guarantees:
        - id is a uuid4-generated UUID.
        - Decimal maps to Numeric(19, 2); date to Date; datetime to a
          timezone-aware DateTime; int to BigInteger.
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(19, 2),
        datetime: DateTime(timezone=True),
        date: Date,
        PyUUID: UUIDString(),
        int: BigInteger,
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )


class TrackedBase(Base):
    """
    Abstract base with audit timestamps and actor tracking.

    created_by_id is nullable: rows written by event handlers have no
    interactive actor.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    created_by_id: Mapped[PyUUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )

    updated_by_id: Mapped[PyUUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )


UUID = PyUUID
