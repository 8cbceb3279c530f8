"""
Module ORM Registry (``erp_modules._orm_registry``).

Responsibility
--------------
Import every module's ORM classes so ``Base.metadata`` holds all table
definitions before tables are created, in foreign-key order.

Usage
-----
Scripts and ``tests/conftest.py`` call ``create_all_tables()``.
"""

from sqlalchemy.engine import Engine


def import_all_orm_models() -> None:
    """Import every ``erp_modules.*.orm`` module.  Idempotent."""
    # fmt: off
    import erp_modules.auth.orm  # noqa: F401
    import erp_modules.company.orm  # noqa: F401
    import erp_modules.project.orm  # noqa: F401
    import erp_modules.quotation.orm  # noqa: F401
    import erp_modules.delivery.orm  # noqa: F401
    import erp_modules.purchasing.orm  # noqa: F401
    import erp_modules.finance.orm  # noqa: F401
    import erp_modules.invoice.orm  # noqa: F401
    # fmt: on


def create_all_tables(engine: Engine | None = None) -> None:
    """Register every module model, then create the full schema."""
    from erp_kernel.db.engine import create_tables

    import_all_orm_models()
    create_tables(engine)
