"""Account model - an authenticable principal."""

from enum import IntEnum
from typing import TYPE_CHECKING

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from adminpanel.models.associations import account_roles
from adminpanel.models.base import BaseModel

if TYPE_CHECKING:
    from adminpanel.models.role import Role


class AccountStatus(IntEnum):
    DISABLED = 0
    ENABLED = 1


class Account(BaseModel):
    """User account for JWT authentication.

    Role assignments drive permission resolution. Disabled accounts cannot
    log in and have their session state purged when disabled.
    """

    __tablename__ = "sys_user"

    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    nickname: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=AccountStatus.ENABLED)

    roles: Mapped[list["Role"]] = relationship(
        secondary=account_roles,
        back_populates="accounts",
        lazy="selectin",
    )

    @property
    def is_enabled(self) -> bool:
        return self.status == AccountStatus.ENABLED

    def __repr__(self) -> str:
        return f"<Account {self.username}>"
