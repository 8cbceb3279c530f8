"""User administration tests."""

import pytest

from erp_kernel.exceptions import BusinessError, DuplicateResourceError, ValidationError
from erp_modules.auth.models import UserRole
from erp_modules.auth.orm import UserModel


def _view(session, user_id):
    return session.get(UserModel, user_id).to_dto()


class TestCreateUser:

    def test_create(self, uow, session):
        result = uow.users.create_user(
            " mlee ", "mlee@example.com", "Minji Lee", [UserRole.SALES, UserRole.ADMIN]
        )

        view = _view(session, result.id)
        assert view.username == "mlee"
        assert view.roles == ("ADMIN", "SALES")
        assert view.is_active

    def test_validation(self, uow):
        with pytest.raises(ValidationError) as exc_info:
            uow.users.create_user("", "not-an-email", "")
        assert set(exc_info.value.field_errors) == {"username", "email", "full_name"}

    def test_duplicate_username(self, uow, user_id):
        with pytest.raises(DuplicateResourceError, match="username"):
            uow.users.create_user("jkim", "other@example.com", "Other Kim")

    def test_duplicate_email(self, uow, user_id):
        with pytest.raises(DuplicateResourceError, match="email"):
            uow.users.create_user("other", "jkim@example.com", "Other Kim")


class TestUpdateUser:

    def test_assign_roles_replaces(self, uow, session, user_id):
        uow.users.assign_roles(user_id, [UserRole.ADMIN, UserRole.FINANCE])
        assert _view(session, user_id).roles == ("ADMIN", "FINANCE")

        uow.users.assign_roles(user_id, [UserRole.PRODUCTION])
        assert _view(session, user_id).roles == ("PRODUCTION",)

    def test_update_email(self, uow, session, user_id):
        uow.users.update_user(user_id, email="jiho.kim@example.com")
        assert _view(session, user_id).email == "jiho.kim@example.com"

    def test_deactivate_and_activate(self, uow, session, user_id):
        uow.users.deactivate_user(user_id)
        assert not _view(session, user_id).is_active
        with pytest.raises(BusinessError, match="already inactive"):
            uow.users.deactivate_user(user_id)

        uow.users.activate_user(user_id)
        assert _view(session, user_id).is_active
