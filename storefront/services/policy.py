"""
Who may do what. Every service function receives a CallerContext and runs
its check before touching the store.
"""
from dataclasses import dataclass
from enum import StrEnum
from typing import Optional

from flask_login import current_user

from storefront.utils.exceptions import AuthenticationError, AuthorizationError


class Role(StrEnum):
    USER = "User"
    ADMIN = "Admin"


@dataclass(frozen=True)
class CallerContext:
    account_id: Optional[int] = None
    role: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.account_id is not None

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.role == Role.ADMIN

    @classmethod
    def anonymous(cls) -> "CallerContext":
        return cls()

    @classmethod
    def from_account(cls, account) -> "CallerContext":
        return cls(
            account_id=account.id,
            role=account.request_role,
            username=account.username,
            email=account.email,
        )


def current_caller() -> CallerContext:
    """Caller for the current request, anonymous when no valid bearer token was sent."""
    if current_user and current_user.is_authenticated:
        return CallerContext.from_account(current_user._get_current_object())
    return CallerContext.anonymous()


def require_authenticated(ctx: CallerContext) -> None:
    if not ctx.is_authenticated:
        raise AuthenticationError()


def require_admin(ctx: CallerContext) -> None:
    require_authenticated(ctx)
    if not ctx.is_admin:
        raise AuthorizationError("Administrator role required")


def can_access(ctx: CallerContext, owner_account_id: Optional[int]) -> bool:
    if ctx.is_admin:
        return True
    return ctx.is_authenticated and owner_account_id is not None and ctx.account_id == owner_account_id


def require_owner(ctx: CallerContext, owner_account_id: Optional[int]) -> None:
    require_authenticated(ctx)
    if not can_access(ctx, owner_account_id):
        raise AuthorizationError()
