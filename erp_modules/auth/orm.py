"""SQLAlchemy ORM persistence models for users and their roles."""

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp_kernel.db.base import STATUS_LENGTH, TrackedBase
from erp_modules.auth.models import UserRole


class UserModel(TrackedBase):
    """An ERP user.  Deactivation is a flag; users are never deleted."""

    __tablename__ = "users"

    __table_args__ = (
        UniqueConstraint("username", name="uq_user_username"),
        UniqueConstraint("email", name="uq_user_email"),
    )

    username: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(200), nullable=False)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    roles: Mapped[list["UserRoleModel"]] = relationship(
        "UserRoleModel",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def role_names(self) -> tuple[str, ...]:
        return tuple(sorted(r.role_name for r in self.roles))

    def has_role(self, role: UserRole) -> bool:
        return UserRole(role).value in self.role_names()

    def replace_roles(self, roles) -> None:
        wanted = [UserRole(r).value for r in dict.fromkeys(roles)]
        kept = [r for r in self.roles if r.role_name in wanted]
        have = {r.role_name for r in kept}
        kept.extend(UserRoleModel(role_name=name) for name in wanted if name not in have)
        self.roles[:] = kept

    def to_dto(self):
        from erp_modules.auth.models import UserView

        return UserView(
            id=self.id,
            username=self.username,
            email=self.email,
            full_name=self.full_name,
            is_active=self.is_active,
            roles=self.role_names(),
        )

    def __repr__(self) -> str:
        return f"<UserModel {self.username}>"


class UserRoleModel(TrackedBase):

    __tablename__ = "user_roles"

    __table_args__ = (
        UniqueConstraint("user_id", "role_name", name="uq_user_role"),
    )

    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    role_name: Mapped[str] = mapped_column(String(STATUS_LENGTH), nullable=False)

    user: Mapped["UserModel"] = relationship("UserModel", back_populates="roles")
