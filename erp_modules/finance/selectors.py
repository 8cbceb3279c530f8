"""
AccountsPayableSelector -- read side of accounts payable.

Every query recomputes the paid total with a LEFT JOIN onto the summed
vendor payments (``COALESCE(SUM(amount), 0)``), so a payable with no
payments reads as 0 paid rather than disappearing.  The calculated status
comes from that total; the stored status only decides CANCELLED.

Aging buckets (days past due, unpaid balance only):

    Current       not yet due
    1-30 Days
    31-60 Days
    61-90 Days
    Over 90 Days
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import case, func, literal, select

from erp_kernel.domain.values import ZERO
from erp_kernel.exceptions import ResourceNotFoundError
from erp_kernel.selectors.aging import (
    AgingBand,
    AgingSummary,
    build_aging_summary,
    days_overdue,
)
from erp_kernel.selectors.base import BaseSelector
from erp_modules.company.orm import CompanyModel
from erp_modules.finance.models import (
    AccountsPayableView,
    APStatus,
    DisbursementCauseType,
    PaymentMethod,
    VendorPaymentView,
    calculate_payment_status,
)
from erp_modules.finance.orm import AccountsPayableModel, VendorPaymentModel

AP_AGING_BANDS = (
    AgingBand("Current", 0, 0),
    AgingBand("1-30 Days", 1, 30),
    AgingBand("31-60 Days", 31, 60),
    AgingBand("61-90 Days", 61, 90),
    AgingBand("Over 90 Days", 91),
)


class AccountsPayableSelector(BaseSelector):

    def _paid_subquery(self):
        return (
            select(
                VendorPaymentModel.accounts_payable_id.label("ap_id"),
                func.sum(VendorPaymentModel.amount).label("paid"),
            )
            .group_by(VendorPaymentModel.accounts_payable_id)
            .subquery("paid_totals")
        )

    def _base_query(self):
        paid = self._paid_subquery()
        total_paid = func.coalesce(paid.c.paid, literal(0))
        rounded_paid = func.round(total_paid, 2)
        calculated = case(
            (AccountsPayableModel.status == APStatus.CANCELLED.value, APStatus.CANCELLED.value),
            (rounded_paid >= AccountsPayableModel.total_amount, APStatus.PAID.value),
            (rounded_paid > 0, APStatus.PARTIALLY_PAID.value),
            else_=APStatus.PENDING.value,
        )
        query = (
            select(
                AccountsPayableModel.id,
                AccountsPayableModel.cause_type,
                AccountsPayableModel.cause_id,
                AccountsPayableModel.cause_reference_number,
                AccountsPayableModel.vendor_id,
                CompanyModel.name.label("vendor_name"),
                AccountsPayableModel.total_amount,
                total_paid.label("total_paid"),
                AccountsPayableModel.currency,
                AccountsPayableModel.due_date,
                AccountsPayableModel.status,
                AccountsPayableModel.notes,
            )
            .join(CompanyModel, CompanyModel.id == AccountsPayableModel.vendor_id)
            .outerjoin(paid, paid.c.ap_id == AccountsPayableModel.id)
        )
        return query, calculated

    def _to_view(self, row, as_of: date, payments=()) -> AccountsPayableView:
        total = self._money(row.total_amount)
        paid = self._money(row.total_paid)
        stored = APStatus(row.status)
        if stored == APStatus.CANCELLED:
            calculated = APStatus.CANCELLED
        else:
            calculated = calculate_payment_status(total, paid)
        overdue = 0
        if calculated in (APStatus.PENDING, APStatus.PARTIALLY_PAID):
            overdue = days_overdue(row.due_date, as_of)
        return AccountsPayableView(
            id=row.id,
            cause_type=DisbursementCauseType(row.cause_type),
            cause_id=row.cause_id,
            cause_reference_number=row.cause_reference_number,
            vendor_id=row.vendor_id,
            vendor_name=row.vendor_name,
            total_amount=total,
            total_paid=paid,
            remaining_balance=total - paid,
            currency=row.currency,
            due_date=row.due_date,
            stored_status=stored,
            calculated_status=calculated,
            days_overdue=overdue,
            notes=row.notes,
            payments=tuple(payments),
        )

    def get_detail(self, ap_id: UUID, as_of: date | None = None) -> AccountsPayableView:
        query, _ = self._base_query()
        row = self.session.execute(query.where(AccountsPayableModel.id == ap_id)).first()
        if row is None:
            raise ResourceNotFoundError("AccountsPayable", ap_id)

        payments = self.session.execute(
            select(VendorPaymentModel)
            .where(VendorPaymentModel.accounts_payable_id == ap_id)
            .order_by(VendorPaymentModel.payment_date, VendorPaymentModel.created_at)
        ).scalars().all()
        return self._to_view(
            row,
            as_of or date.today(),
            payments=(
                VendorPaymentView(
                    id=p.id,
                    payment_date=p.payment_date,
                    amount=self._money(p.amount),
                    payment_method=PaymentMethod(p.payment_method),
                    reference_number=p.reference_number,
                    notes=p.notes,
                    recorded_by_id=p.recorded_by_id,
                )
                for p in payments
            ),
        )

    def list(
        self,
        vendor_id: UUID | None = None,
        calculated_status: APStatus | None = None,
        overdue_only: bool = False,
        as_of: date | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[AccountsPayableView]:
        as_of = as_of or date.today()
        query, calculated = self._base_query()
        if vendor_id is not None:
            query = query.where(AccountsPayableModel.vendor_id == vendor_id)
        if calculated_status is not None:
            query = query.where(calculated == APStatus(calculated_status).value)
        if overdue_only:
            query = query.where(
                AccountsPayableModel.due_date < as_of,
                calculated.in_([APStatus.PENDING.value, APStatus.PARTIALLY_PAID.value]),
            )
        query = self._paginate(
            query.order_by(
                AccountsPayableModel.due_date.asc(),
                AccountsPayableModel.cause_reference_number,
            ),
            limit,
            offset,
        )
        return [self._to_view(row, as_of) for row in self.session.execute(query).all()]

    def get_by_vendor(self, vendor_id: UUID, as_of: date | None = None) -> list[AccountsPayableView]:
        """Every payable of the vendor, in due-date order, without pagination."""
        as_of = as_of or date.today()
        query, _ = self._base_query()
        query = query.where(AccountsPayableModel.vendor_id == vendor_id).order_by(
            AccountsPayableModel.due_date.asc(),
            AccountsPayableModel.cause_reference_number,
        )
        return [self._to_view(row, as_of) for row in self.session.execute(query).all()]

    def get_overdue(self, as_of: date) -> list[AccountsPayableView]:
        return self._all_open(as_of, overdue_only=True)

    def get_aging_summary(self, as_of: date) -> AgingSummary:
        return build_aging_summary(
            AP_AGING_BANDS,
            ((view.days_overdue, view.remaining_balance) for view in self._all_open(as_of)),
            as_of,
        )

    def _all_open(self, as_of: date, overdue_only: bool = False) -> list[AccountsPayableView]:
        """Every unpaid, uncancelled payable, without pagination."""
        query, calculated = self._base_query()
        query = query.where(
            calculated.in_([APStatus.PENDING.value, APStatus.PARTIALLY_PAID.value])
        )
        if overdue_only:
            query = query.where(AccountsPayableModel.due_date < as_of)
        query = query.order_by(
            AccountsPayableModel.due_date.asc(),
            AccountsPayableModel.cause_reference_number,
        )
        views = [self._to_view(row, as_of) for row in self.session.execute(query).all()]
        return [v for v in views if v.remaining_balance > ZERO]
