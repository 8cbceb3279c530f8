"""
Company service and selector tests.

Companies hold one or more roles; only active VENDOR or OUTSOURCE
companies may act as suppliers.
"""

from uuid import uuid4

import pytest

from erp_kernel.exceptions import (
    BusinessError,
    DuplicateResourceError,
    ResourceNotFoundError,
    ValidationError,
    VendorRoleRequiredError,
)
from erp_modules.company.models import CompanyRole
from erp_modules.company.service import require_supplier


class TestCreateCompany:

    def test_create_with_roles(self, uow):
        result = uow.companies.create_company(
            "Mirae Castings",
            [CompanyRole.VENDOR, CompanyRole.CUSTOMER],
            registration_number="123-45-67890",
            contact_person="Park",
        )

        view = uow.company_selector.get_detail(result.id)
        assert result.message == "Company created successfully"
        assert view.name == "Mirae Castings"
        assert view.roles == ("CUSTOMER", "VENDOR")
        assert view.contact_person == "Park"
        assert view.is_active

    def test_repeated_role_stored_once(self, uow):
        result = uow.companies.create_company(
            "Mirae Castings", [CompanyRole.VENDOR, CompanyRole.VENDOR]
        )
        assert uow.company_selector.get_detail(result.id).roles == ("VENDOR",)

    def test_requires_name_and_role(self, uow):
        with pytest.raises(ValidationError) as exc_info:
            uow.companies.create_company("  ", [])
        assert set(exc_info.value.field_errors) == {"name", "roles"}

    def test_unknown_detail_rejected(self, uow):
        with pytest.raises(ValidationError):
            uow.companies.create_company("Mirae", [CompanyRole.VENDOR], fax="02-000")

    def test_registration_number_unique(self, uow):
        uow.companies.create_company("A", [CompanyRole.VENDOR], registration_number="111")
        with pytest.raises(DuplicateResourceError):
            uow.companies.create_company("B", [CompanyRole.VENDOR], registration_number="111")


class TestRoles:

    def test_add_and_remove_role(self, uow, vendor_id):
        uow.companies.add_role(vendor_id, CompanyRole.OUTSOURCE)
        uow.companies.remove_role(vendor_id, CompanyRole.VENDOR)

        assert uow.company_selector.get_detail(vendor_id).roles == ("OUTSOURCE",)

    def test_add_existing_role_rejected(self, uow, vendor_id):
        with pytest.raises(BusinessError, match="already has role"):
            uow.companies.add_role(vendor_id, CompanyRole.VENDOR)

    def test_last_role_cannot_be_removed(self, uow, vendor_id):
        with pytest.raises(BusinessError, match="last role"):
            uow.companies.remove_role(vendor_id, CompanyRole.VENDOR)


class TestRequireSupplier:

    def test_vendor_and_outsource_qualify(self, session, vendor_id, second_vendor_id):
        assert require_supplier(session, vendor_id).id == vendor_id
        assert require_supplier(session, second_vendor_id).id == second_vendor_id

    def test_customer_rejected(self, session, customer_id):
        with pytest.raises(VendorRoleRequiredError):
            require_supplier(session, customer_id)

    def test_inactive_vendor_rejected(self, session, inactive_vendor_id):
        with pytest.raises(VendorRoleRequiredError):
            require_supplier(session, inactive_vendor_id)

    def test_missing_company(self, session):
        with pytest.raises(ResourceNotFoundError):
            require_supplier(session, uuid4())

    def test_deactivated_vendor_no_longer_qualifies(self, uow, session, vendor_id):
        uow.companies.deactivate_company(vendor_id)
        with pytest.raises(VendorRoleRequiredError):
            require_supplier(session, vendor_id)


class TestCompanySelector:

    def test_list_by_role(self, uow, vendor_id, second_vendor_id, customer_id):
        vendors = uow.company_selector.list(role=CompanyRole.VENDOR)
        assert [c.id for c in vendors] == [vendor_id]

    def test_inactive_hidden_by_default(self, uow, vendor_id, inactive_vendor_id):
        assert [c.id for c in uow.company_selector.list()] == [vendor_id]
        names = [c.name for c in uow.company_selector.list(active_only=False)]
        assert names == ["Closed Supplier", "Daehan Steel"]

    def test_search_by_name(self, uow, vendor_id, customer_id):
        found = uow.company_selector.list(search="seoul")
        assert [c.id for c in found] == [customer_id]

    def test_missing_company(self, uow):
        with pytest.raises(ResourceNotFoundError):
            uow.company_selector.get_detail(uuid4())
