#!/usr/bin/env python3
"""
Demo: purchasing to accounts payable.

Runs the purchase-order scenario end to end against the configured
database and prints the resulting views:

    1. Vendors V1 and V2 receive an RFQ for one purchase request.
    2. Both reply; a PO is raised from V1's quote (selecting V1).
    3. The PO is sent and confirmed -> one PENDING accounts payable.
    4. A partial payment is recorded -> PARTIALLY_PAID.
    5. The PO is received -> the purchase request is CLOSED.

All data is rolled back on exit unless --commit is given.

Usage:
    python3 scripts/demo_purchasing.py
    python3 scripts/demo_purchasing.py --db-url sqlite:///demo.db --commit
"""

import argparse
import logging
from datetime import timedelta
from decimal import Decimal

from erp_config import load_settings
from erp_kernel.db.engine import get_session, init_engine_from_url, reset_engine
from erp_kernel.logging_config import configure_logging
from erp_modules._orm_registry import create_all_tables
from erp_modules.company.models import CompanyRole
from erp_modules.finance.models import PaymentMethod
from erp_modules.wiring import build_unit_of_work

W = 72


def _hdr(title: str) -> None:
    print()
    print("=" * W)
    print(title.center(W))
    print("=" * W)


def _fmt(amount: Decimal, currency: str) -> str:
    return f"{amount:,.2f} {currency}"


def run_scenario(uow) -> None:
    today = uow.clock.today()

    v1 = uow.companies.create_company("Daehan Steel", [CompanyRole.VENDOR]).id
    v2 = uow.companies.create_company("Hanil Machining", [CompanyRole.OUTSOURCE]).id
    customer = uow.companies.create_company("Seoul Motors", [CompanyRole.CUSTOMER]).id
    project = uow.projects.create_project(
        customer, "Gearbox housing", today + timedelta(days=90)
    )
    print(f"  {project.message}")

    pr = uow.purchase_requests.create_purchase_request(
        description="SS400 plate 12t",
        quantity=Decimal("40"),
        uom="EA",
        required_date=today + timedelta(days=21),
        project_id=project.id,
    )
    print(f"  {pr.message}")
    print(f"  {uow.purchase_requests.send_rfq(pr.id, [v1, v2]).message}")

    detail = uow.purchase_request_selector.get_detail(pr.id)
    items = {item.vendor_id: item.item_id for item in detail.rfq_items}
    uow.purchase_requests.record_rfq_reply(pr.id, items[v1], Decimal("5000"), 7)
    uow.purchase_requests.record_rfq_reply(pr.id, items[v2], Decimal("6200"), 5)

    po = uow.purchase_orders.create_purchase_order(
        pr.id, items[v1], today, today + timedelta(days=7)
    )
    print(f"  {po.message}")
    uow.purchase_orders.send_purchase_order(po.id)
    print(f"  {uow.purchase_orders.confirm_purchase_order(po.id).message}")

    ap = uow.payable_selector.list(vendor_id=v1)[0]
    uow.payables.record_payment(
        ap.id, today, Decimal("2000"), PaymentMethod.BANK_TRANSFER, reference_number="TX-001"
    )
    print(f"  {uow.purchase_orders.receive_purchase_order(po.id).message}")

    _hdr("PURCHASE REQUEST")
    detail = uow.purchase_request_selector.get_detail(pr.id)
    print(f"  {detail.request_number}  {detail.description}  [{detail.status.value}]")
    for item in detail.rfq_items:
        price = "-" if item.quoted_price is None else f"{item.quoted_price:,.2f}"
        print(f"    {item.vendor_name:<24}{price:>14}  {item.status.value}")

    _hdr("PURCHASE ORDERS")
    for view in uow.purchase_order_selector.list(purchase_request_id=pr.id):
        print(
            f"  {view.po_number}  {view.vendor_name:<20}"
            f"{_fmt(view.total_amount, view.currency):>20}  {view.status.value}"
        )

    _hdr("ACCOUNTS PAYABLE")
    for view in uow.payable_selector.list():
        print(
            f"  {view.cause_reference_number}  {view.vendor_name:<20}"
            f" paid {_fmt(view.total_paid, view.currency)}"
            f" of {_fmt(view.total_amount, view.currency)}"
            f"  [{view.calculated_status.value}] due {view.due_date}"
        )

    _hdr("AP AGING")
    summary = uow.payable_selector.get_aging_summary(today)
    for bucket in summary.buckets:
        print(f"  {bucket.label:<16}{bucket.count:>4}{bucket.amount:>20,.2f}")
    print(f"  {'Total':<16}{summary.total_count:>4}{summary.total_outstanding:>20,.2f}")

    _hdr("DOMAIN EVENTS")
    for event in uow.bus.published:
        print(f"  {event.occurred_at:%Y-%m-%d %H:%M}  {event.event_type}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the purchasing -> AP demo scenario.")
    parser.add_argument("--config", type=str, default=None, help="YAML settings file")
    parser.add_argument("--db-url", type=str, default=None, help="Overrides database_url")
    parser.add_argument("--commit", action="store_true", help="Keep the demo data")
    parser.add_argument("--verbose", action="store_true", help="Print JSON logs to stderr")
    args = parser.parse_args()

    settings = load_settings(args.config)
    if args.db_url:
        settings = settings.merged({"database_url": args.db_url})

    configure_logging(level=settings.log_level if args.verbose else logging.WARNING)
    engine = init_engine_from_url(
        settings.database_url, echo=settings.sql_echo, pool_size=settings.pool_size
    )
    create_all_tables(engine)

    session = get_session()
    try:
        run_scenario(build_unit_of_work(session, settings=settings))
        if args.commit:
            session.commit()
        else:
            session.rollback()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
        reset_engine()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
