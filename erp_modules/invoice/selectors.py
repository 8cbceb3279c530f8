"""
Read views for tax invoices and the accounts receivable aging report.

Paid totals are summed from ``invoice_payments`` at query time.  AR aging
buckets by days past due, over unpaid ISSUED, PARTIALLY_PAID and OVERDUE
invoices:

    Current     not yet due
    30 Days     1-30 days overdue
    60 Days     31-60 days overdue
    90+ Days    more than 60 days overdue
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import func, literal, select

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
from erp_modules.finance.models import PaymentMethod
from erp_modules.invoice.models import (
    RECEIVABLE_STATUSES,
    InvoiceLineView,
    InvoicePaymentView,
    InvoiceStatus,
    InvoiceView,
)
from erp_modules.invoice.orm import PaymentModel, TaxInvoiceModel
from erp_modules.project.orm import ProjectModel

AR_AGING_BANDS = (
    AgingBand("Current", 0, 0),
    AgingBand("30 Days", 1, 30),
    AgingBand("60 Days", 31, 60),
    AgingBand("90+ Days", 61),
)


class InvoiceSelector(BaseSelector):

    def _base_query(self):
        paid = (
            select(
                PaymentModel.invoice_id.label("invoice_id"),
                func.sum(PaymentModel.amount).label("paid"),
            )
            .group_by(PaymentModel.invoice_id)
            .subquery("invoice_paid_totals")
        )
        return (
            select(
                TaxInvoiceModel.id,
                TaxInvoiceModel.invoice_number,
                TaxInvoiceModel.project_id,
                ProjectModel.job_code,
                CompanyModel.name.label("customer_name"),
                TaxInvoiceModel.delivery_id,
                TaxInvoiceModel.issue_date,
                TaxInvoiceModel.due_date,
                TaxInvoiceModel.issued_to_customer_date,
                TaxInvoiceModel.status,
                TaxInvoiceModel.tax_rate,
                TaxInvoiceModel.total_before_tax,
                TaxInvoiceModel.total_tax,
                TaxInvoiceModel.total_amount,
                func.coalesce(paid.c.paid, literal(0)).label("total_paid"),
                TaxInvoiceModel.notes,
            )
            .join(ProjectModel, ProjectModel.id == TaxInvoiceModel.project_id)
            .join(CompanyModel, CompanyModel.id == ProjectModel.customer_id)
            .outerjoin(paid, paid.c.invoice_id == TaxInvoiceModel.id)
        )

    def _to_view(self, row, as_of: date, line_items=(), payments=()) -> InvoiceView:
        status = InvoiceStatus(row.status)
        total = self._money(row.total_amount)
        paid = self._money(row.total_paid)
        remaining = total - paid
        overdue = 0
        if status in RECEIVABLE_STATUSES and remaining > ZERO:
            overdue = days_overdue(row.due_date, as_of)
        return InvoiceView(
            id=row.id,
            invoice_number=row.invoice_number,
            project_id=row.project_id,
            job_code=row.job_code,
            customer_name=row.customer_name,
            delivery_id=row.delivery_id,
            issue_date=row.issue_date,
            due_date=row.due_date,
            issued_to_customer_date=row.issued_to_customer_date,
            status=status,
            tax_rate=self._money(row.tax_rate),
            total_before_tax=self._money(row.total_before_tax),
            total_tax=self._money(row.total_tax),
            total_amount=total,
            total_paid=paid,
            remaining_balance=remaining,
            days_overdue=overdue,
            notes=row.notes,
            line_items=tuple(line_items),
            payments=tuple(payments),
        )

    def get_detail(self, invoice_id: UUID, as_of: date | None = None) -> InvoiceView:
        row = self.session.execute(
            self._base_query().where(TaxInvoiceModel.id == invoice_id)
        ).first()
        if row is None:
            raise ResourceNotFoundError("TaxInvoice", invoice_id)

        invoice = self.session.get(TaxInvoiceModel, invoice_id)
        return self._to_view(
            row,
            as_of or date.today(),
            line_items=(
                InvoiceLineView(
                    id=line.id,
                    sequence=line.sequence,
                    description=line.description,
                    quantity=line.quantity,
                    unit_price=self._money(line.unit_price),
                    line_total=self._money(line.line_total),
                )
                for line in invoice.line_items
            ),
            payments=(
                InvoicePaymentView(
                    id=p.id,
                    payment_date=p.payment_date,
                    amount=self._money(p.amount),
                    payment_method=PaymentMethod(p.payment_method),
                    reference_number=p.reference_number,
                    notes=p.notes,
                    recorded_by_id=p.recorded_by_id,
                )
                for p in invoice.payments
            ),
        )

    def list(
        self,
        project_id: UUID | None = None,
        status: InvoiceStatus | None = None,
        as_of: date | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[InvoiceView]:
        query = self._base_query()
        if project_id is not None:
            query = query.where(TaxInvoiceModel.project_id == project_id)
        if status is not None:
            query = query.where(TaxInvoiceModel.status == InvoiceStatus(status).value)
        query = self._paginate(
            query.order_by(TaxInvoiceModel.invoice_number.desc()), limit, offset
        )
        as_of = as_of or date.today()
        return [self._to_view(row, as_of) for row in self.session.execute(query).all()]

    def get_ar_aging(self, as_of: date) -> AgingSummary:
        query = self._base_query().where(
            TaxInvoiceModel.status.in_([s.value for s in RECEIVABLE_STATUSES])
        )
        views = [self._to_view(row, as_of) for row in self.session.execute(query).all()]
        return build_aging_summary(
            AR_AGING_BANDS,
            ((view.days_overdue, view.remaining_balance) for view in views),
            as_of,
        )
