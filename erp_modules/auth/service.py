"""
Auth Module Service (``erp_modules.auth.service``).

User administration: create, update, assign roles, deactivate, activate.
Authentication itself (passwords, tokens) is handled outside this package.
"""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select

from erp_kernel.domain.values import CommandResult
from erp_kernel.exceptions import BusinessError, DuplicateResourceError, ValidationError
from erp_kernel.logging_config import get_logger
from erp_kernel.services.base import BaseService, command
from erp_modules.auth.models import UserRole
from erp_modules.auth.orm import UserModel

logger = get_logger("modules.auth.service")


class UserService(BaseService):
    """Command service for users."""

    @command
    def create_user(
        self,
        username: str,
        email: str,
        full_name: str,
        roles: Iterable[UserRole] = (),
        actor_id: UUID | None = None,
    ) -> CommandResult:
        errors: dict[str, str] = {}
        if not username or not username.strip():
            errors["username"] = "Username is required"
        if not email or "@" not in email:
            errors["email"] = "A valid email is required"
        if not full_name or not full_name.strip():
            errors["full_name"] = "Full name is required"
        if errors:
            raise ValidationError("Invalid user", field_errors=errors)

        username = username.strip()
        if self._exists(UserModel.username, username):
            raise DuplicateResourceError("User", "username", username)
        if self._exists(UserModel.email, email):
            raise DuplicateResourceError("User", "email", email)

        user = UserModel(
            username=username,
            email=email,
            full_name=full_name.strip(),
            is_active=True,
            created_by_id=actor_id,
        )
        user.replace_roles(roles)
        self.session.add(user)
        self.session.flush()

        logger.info(
            "user_created",
            extra={"user_id": str(user.id), "roles": list(user.role_names())},
        )
        return CommandResult(user.id, "User created successfully")

    @command
    def update_user(
        self,
        user_id: UUID,
        email: str | None = None,
        full_name: str | None = None,
    ) -> CommandResult:
        user = self._get_or_raise(UserModel, user_id, "User")
        if email is not None and email != user.email:
            if "@" not in email:
                raise ValidationError(
                    "Invalid user", field_errors={"email": "A valid email is required"}
                )
            if self._exists(UserModel.email, email):
                raise DuplicateResourceError("User", "email", email)
            user.email = email
        if full_name is not None:
            user.full_name = full_name
        self.session.flush()
        return CommandResult(user.id, "User updated successfully")

    @command
    def assign_roles(self, user_id: UUID, roles: Iterable[UserRole]) -> CommandResult:
        """Replace the user's roles with ``roles``."""
        user = self._get_or_raise(UserModel, user_id, "User")
        user.replace_roles(roles)
        self.session.flush()
        logger.info(
            "user_roles_assigned",
            extra={"user_id": str(user.id), "roles": list(user.role_names())},
        )
        return CommandResult(user.id, "Roles assigned successfully")

    @command
    def deactivate_user(self, user_id: UUID) -> CommandResult:
        user = self._get_or_raise(UserModel, user_id, "User")
        if not user.is_active:
            raise BusinessError(f"User {user.username} is already inactive")
        user.is_active = False
        self.session.flush()
        return CommandResult(user.id, "User deactivated")

    @command
    def activate_user(self, user_id: UUID) -> CommandResult:
        user = self._get_or_raise(UserModel, user_id, "User")
        if user.is_active:
            raise BusinessError(f"User {user.username} is already active")
        user.is_active = True
        self.session.flush()
        return CommandResult(user.id, "User activated")

    def _exists(self, column, value) -> bool:
        return self.session.execute(
            select(UserModel.id).where(column == value)
        ).first() is not None
