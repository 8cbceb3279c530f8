"""
Project and quotation lifecycle tests.

Accepting a quotation publishes ``QuotationAcceptedEvent``; the project
handler activates the project in the same unit of work.
"""

from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from erp_kernel.exceptions import (
    BusinessError,
    InvalidStatusTransitionError,
    ResourceNotFoundError,
    ValidationError,
)
from erp_modules.project.models import ProjectStatus
from erp_modules.quotation.events import QuotationAcceptedEvent
from erp_modules.quotation.models import QuotationLineInput, QuotationStatus

TODAY = date(2024, 1, 1)

LINES = [
    QuotationLineInput("Gearbox housing machining", Decimal("10"), Decimal("1000")),
    QuotationLineInput("Surface treatment", Decimal("10"), Decimal("150.50")),
]


def _approved_quotation(uow, project_id):
    quotation_id = uow.quotations.create_quotation(project_id, LINES).id
    uow.quotations.submit_for_approval(quotation_id)
    uow.quotations.approve_quotation(quotation_id)
    return quotation_id


# =========================================================================
# Projects
# =========================================================================


class TestProject:

    def test_job_code_and_view(self, uow, project_id):
        view = uow.project_selector.get_detail(project_id)
        assert view.job_code == "WK2-2024-001"
        assert view.customer_name == "Seoul Motors"
        assert view.status == ProjectStatus.DRAFT

    def test_job_codes_increase(self, uow, project_id, customer_id):
        second = uow.projects.create_project(customer_id, "Pump cover", TODAY + timedelta(days=30))
        assert second.message == "Project created with job code WK2-2024-002"
        assert uow.project_selector.get_by_job_code("WK2-2024-002").project_name == "Pump cover"

    def test_vendor_cannot_be_customer(self, uow, vendor_id):
        with pytest.raises(BusinessError, match="not an active customer"):
            uow.projects.create_project(vendor_id, "Wrong party", TODAY)

    def test_unknown_customer(self, uow):
        with pytest.raises(ResourceNotFoundError):
            uow.projects.create_project(uuid4(), "Nobody", TODAY)

    def test_name_required(self, uow, customer_id):
        with pytest.raises(ValidationError):
            uow.projects.create_project(customer_id, " ", TODAY)

    def test_change_status_follows_workflow(self, uow, project_id):
        with pytest.raises(InvalidStatusTransitionError):
            uow.projects.change_status(project_id, ProjectStatus.COMPLETED)

        uow.projects.change_status(project_id, ProjectStatus.ARCHIVED)
        assert uow.project_selector.get_detail(project_id).status == ProjectStatus.ARCHIVED

    def test_archived_project_not_editable(self, uow, project_id):
        uow.projects.change_status(project_id, ProjectStatus.ARCHIVED)
        with pytest.raises(BusinessError, match="cannot be edited"):
            uow.projects.update_project(project_id, project_name="Renamed")

    def test_list_filters(self, uow, project_id):
        assert [p.id for p in uow.project_selector.list(search="gearbox")] == [project_id]
        assert uow.project_selector.list(status=ProjectStatus.ACTIVE) == []


# =========================================================================
# Quotations
# =========================================================================


class TestQuotation:

    def test_total_is_sum_of_lines(self, uow, project_id):
        quotation_id = uow.quotations.create_quotation(project_id, LINES).id
        view = uow.quotation_selector.get_detail(quotation_id)

        assert view.version == 1
        assert view.status == QuotationStatus.DRAFT
        assert [l.line_total for l in view.line_items] == [Decimal("10000.00"), Decimal("1505.00")]
        assert view.total_amount == Decimal("11505.00")

    def test_invalid_lines_rejected(self, uow, project_id):
        with pytest.raises(ValidationError) as exc_info:
            uow.quotations.create_quotation(
                project_id, [QuotationLineInput("", Decimal("0"), Decimal("-1"))]
            )
        assert set(exc_info.value.field_errors) == {
            "line_items[0].description",
            "line_items[0].quantity",
            "line_items[0].unit_price",
        }

    def test_submit_requires_lines(self, uow, project_id):
        quotation_id = uow.quotations.create_quotation(project_id, []).id
        with pytest.raises(BusinessError, match="line items"):
            uow.quotations.submit_for_approval(quotation_id)

    def test_only_draft_is_editable(self, uow, project_id):
        quotation_id = _approved_quotation(uow, project_id)
        with pytest.raises(BusinessError, match="DRAFT"):
            uow.quotations.update_quotation(quotation_id, notes="late change")

    def test_reject_needs_reason(self, uow, project_id):
        quotation_id = uow.quotations.create_quotation(project_id, LINES).id
        uow.quotations.submit_for_approval(quotation_id)
        with pytest.raises(ValidationError):
            uow.quotations.reject_quotation(quotation_id, "  ")

        uow.quotations.reject_quotation(quotation_id, "Price too high")
        view = uow.quotation_selector.get_detail(quotation_id)
        assert view.status == QuotationStatus.REJECTED
        assert view.rejection_reason == "Price too high"

    def test_new_version_copies_lines(self, uow, project_id):
        quotation_id = _approved_quotation(uow, project_id)
        result = uow.quotations.create_new_version(quotation_id)

        view = uow.quotation_selector.get_detail(result.id)
        assert result.message == "Quotation version 2 created"
        assert view.status == QuotationStatus.DRAFT
        assert view.total_amount == Decimal("11505.00")

    def test_new_version_not_from_draft(self, uow, project_id):
        quotation_id = uow.quotations.create_quotation(project_id, LINES).id
        with pytest.raises(BusinessError, match="new version"):
            uow.quotations.create_new_version(quotation_id)

    def test_latest_committed(self, uow, project_id):
        assert uow.quotation_selector.get_latest_committed(project_id) is None
        quotation_id = _approved_quotation(uow, project_id)
        uow.quotations.create_new_version(quotation_id)

        committed = uow.quotation_selector.get_latest_committed(project_id)
        assert committed.id == quotation_id

    def test_send_then_accept(self, uow, project_id):
        quotation_id = _approved_quotation(uow, project_id)
        uow.quotations.mark_as_sending(quotation_id)
        uow.quotations.mark_as_sent(quotation_id)
        uow.quotations.mark_as_accepted(quotation_id)

        assert uow.quotation_selector.get_detail(quotation_id).status == QuotationStatus.ACCEPTED


class TestQuotationAcceptance:

    def test_acceptance_activates_project(self, uow, project_id, captured_logs):
        quotation_id = _approved_quotation(uow, project_id)
        uow.quotations.mark_as_accepted(quotation_id)

        assert uow.project_selector.get_detail(project_id).status == ProjectStatus.ACTIVE
        events = [e for e in uow.bus.published if isinstance(e, QuotationAcceptedEvent)]
        assert [e.quotation_id for e in events] == [quotation_id]
        assert any(r["message"] == "project_activated" for r in captured_logs())

    def test_second_acceptance_leaves_active_project(self, uow, project_id, captured_logs):
        first = _approved_quotation(uow, project_id)
        uow.quotations.mark_as_accepted(first)
        second = uow.quotations.create_new_version(first).id
        uow.quotations.submit_for_approval(second)
        uow.quotations.approve_quotation(second)
        uow.quotations.mark_as_accepted(second)

        assert uow.project_selector.get_detail(project_id).status == ProjectStatus.ACTIVE
        assert any(r["message"] == "project_activation_skipped" for r in captured_logs())

    def test_accept_twice_rejected(self, uow, project_id):
        quotation_id = _approved_quotation(uow, project_id)
        uow.quotations.mark_as_accepted(quotation_id)
        with pytest.raises(InvalidStatusTransitionError):
            uow.quotations.mark_as_accepted(quotation_id)
