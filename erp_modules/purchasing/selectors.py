"""
Read views for purchasing.

Purchase requests and orders are flattened with their project job code
and vendor name; the request detail view carries its RFQ items.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, or_, select

from erp_kernel.exceptions import ResourceNotFoundError
from erp_kernel.selectors.base import BaseSelector
from erp_modules.company.orm import CompanyModel
from erp_modules.project.orm import ProjectModel
from erp_modules.purchasing.models import (
    PurchaseOrderStatus,
    PurchaseOrderView,
    PurchaseRequestDetailView,
    PurchaseRequestStatus,
    PurchaseRequestView,
    RfqItemStatus,
    RfqItemView,
)
from erp_modules.purchasing.orm import (
    PurchaseOrderModel,
    PurchaseRequestModel,
    RfqItemModel,
)


class PurchaseRequestSelector(BaseSelector):

    def _base_query(self):
        item_count = (
            select(func.count(RfqItemModel.id))
            .where(RfqItemModel.purchase_request_id == PurchaseRequestModel.id)
            .correlate(PurchaseRequestModel)
            .scalar_subquery()
        )
        return select(
            PurchaseRequestModel.id,
            PurchaseRequestModel.request_number,
            PurchaseRequestModel.project_id,
            ProjectModel.job_code,
            PurchaseRequestModel.description,
            PurchaseRequestModel.quantity,
            PurchaseRequestModel.uom,
            PurchaseRequestModel.required_date,
            PurchaseRequestModel.status,
            item_count.label("rfq_item_count"),
        ).outerjoin(ProjectModel, ProjectModel.id == PurchaseRequestModel.project_id)

    def list(
        self,
        status: PurchaseRequestStatus | None = None,
        project_id: UUID | None = None,
        search: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[PurchaseRequestView]:
        query = self._base_query()
        if status is not None:
            query = query.where(
                PurchaseRequestModel.status == PurchaseRequestStatus(status).value
            )
        if project_id is not None:
            query = query.where(PurchaseRequestModel.project_id == project_id)
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(
                    PurchaseRequestModel.request_number.ilike(pattern),
                    PurchaseRequestModel.description.ilike(pattern),
                )
            )
        query = self._paginate(
            query.order_by(PurchaseRequestModel.request_number.desc()), limit, offset
        )
        return [
            PurchaseRequestView(
                id=row.id,
                request_number=row.request_number,
                project_id=row.project_id,
                job_code=row.job_code,
                description=row.description,
                quantity=row.quantity,
                uom=row.uom,
                required_date=row.required_date,
                status=PurchaseRequestStatus(row.status),
                rfq_item_count=row.rfq_item_count or 0,
            )
            for row in self.session.execute(query).all()
        ]

    def get_detail(self, request_id: UUID) -> PurchaseRequestDetailView:
        row = self.session.execute(
            self._base_query().where(PurchaseRequestModel.id == request_id)
        ).first()
        if row is None:
            raise ResourceNotFoundError("PurchaseRequest", request_id)

        items = self.session.execute(
            select(
                RfqItemModel.item_id,
                RfqItemModel.vendor_id,
                CompanyModel.name.label("vendor_name"),
                RfqItemModel.status,
                RfqItemModel.quoted_price,
                RfqItemModel.quoted_lead_time,
                RfqItemModel.notes,
                RfqItemModel.sent_at,
                RfqItemModel.replied_at,
            )
            .join(CompanyModel, CompanyModel.id == RfqItemModel.vendor_id)
            .where(RfqItemModel.purchase_request_id == request_id)
            .order_by(RfqItemModel.sent_at, CompanyModel.name)
        ).all()

        return PurchaseRequestDetailView(
            id=row.id,
            request_number=row.request_number,
            project_id=row.project_id,
            job_code=row.job_code,
            description=row.description,
            quantity=row.quantity,
            uom=row.uom,
            required_date=row.required_date,
            status=PurchaseRequestStatus(row.status),
            rfq_items=tuple(
                RfqItemView(
                    item_id=item.item_id,
                    vendor_id=item.vendor_id,
                    vendor_name=item.vendor_name,
                    status=RfqItemStatus(item.status),
                    quoted_price=(
                        self._money(item.quoted_price)
                        if item.quoted_price is not None
                        else None
                    ),
                    quoted_lead_time=item.quoted_lead_time,
                    notes=item.notes,
                    sent_at=item.sent_at,
                    replied_at=item.replied_at,
                )
                for item in items
            ),
        )


class PurchaseOrderSelector(BaseSelector):

    def _base_query(self):
        return (
            select(
                PurchaseOrderModel.id,
                PurchaseOrderModel.po_number,
                PurchaseOrderModel.purchase_request_id,
                PurchaseRequestModel.request_number,
                PurchaseOrderModel.rfq_item_id,
                PurchaseOrderModel.project_id,
                ProjectModel.job_code,
                PurchaseOrderModel.vendor_id,
                CompanyModel.name.label("vendor_name"),
                PurchaseOrderModel.order_date,
                PurchaseOrderModel.expected_delivery_date,
                PurchaseOrderModel.total_amount,
                PurchaseOrderModel.currency,
                PurchaseOrderModel.status,
                PurchaseOrderModel.notes,
            )
            .join(
                PurchaseRequestModel,
                PurchaseRequestModel.id == PurchaseOrderModel.purchase_request_id,
            )
            .join(CompanyModel, CompanyModel.id == PurchaseOrderModel.vendor_id)
            .outerjoin(ProjectModel, ProjectModel.id == PurchaseOrderModel.project_id)
        )

    def _to_view(self, row) -> PurchaseOrderView:
        return PurchaseOrderView(
            id=row.id,
            po_number=row.po_number,
            purchase_request_id=row.purchase_request_id,
            request_number=row.request_number,
            rfq_item_id=row.rfq_item_id,
            project_id=row.project_id,
            job_code=row.job_code,
            vendor_id=row.vendor_id,
            vendor_name=row.vendor_name,
            order_date=row.order_date,
            expected_delivery_date=row.expected_delivery_date,
            total_amount=self._money(row.total_amount),
            currency=row.currency,
            status=PurchaseOrderStatus(row.status),
            notes=row.notes,
        )

    def get_detail(self, po_id: UUID) -> PurchaseOrderView:
        row = self.session.execute(
            self._base_query().where(PurchaseOrderModel.id == po_id)
        ).first()
        if row is None:
            raise ResourceNotFoundError("PurchaseOrder", po_id)
        return self._to_view(row)

    def list(
        self,
        status: PurchaseOrderStatus | None = None,
        vendor_id: UUID | None = None,
        project_id: UUID | None = None,
        purchase_request_id: UUID | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[PurchaseOrderView]:
        query = self._base_query()
        if status is not None:
            query = query.where(
                PurchaseOrderModel.status == PurchaseOrderStatus(status).value
            )
        if vendor_id is not None:
            query = query.where(PurchaseOrderModel.vendor_id == vendor_id)
        if project_id is not None:
            query = query.where(PurchaseOrderModel.project_id == project_id)
        if purchase_request_id is not None:
            query = query.where(PurchaseOrderModel.purchase_request_id == purchase_request_id)
        query = self._paginate(
            query.order_by(PurchaseOrderModel.po_number.desc()), limit, offset
        )
        return [self._to_view(row) for row in self.session.execute(query).all()]
