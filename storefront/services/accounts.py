from datetime import datetime, timezone
from typing import Any, Dict

from flask import current_app
from flask_jwt_extended import create_access_token

from storefront.database import db
from storefront.models import models
from storefront.services.policy import CallerContext, Role, require_admin, require_owner
from storefront.utils.exceptions import AuthenticationError, ConflictError, NotFoundError
from storefront.utils.helpers import utcnow
from storefront.utils.logging import get_logger

log = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid username or password."
DUPLICATE_ACCOUNT = "Username or email already exists."


def account_exists(username: str, email: str) -> bool:
    return models.Account.count(
        "LOWER(username) = LOWER(?) OR LOWER(email) = LOWER(?)", (username, email)
    ) > 0


def register(data: Dict[str, Any]) -> models.Account:
    username = data["username"].strip()
    email = data["email"].strip()
    if account_exists(username, email):
        raise ConflictError(DUPLICATE_ACCOUNT)
    try:
        account = models.Account.new(
            username=username,
            email=email,
            password=data["password"],
            first_name=data["first_name"].strip(),
            last_name=data["last_name"].strip(),
            role=str(Role.USER),
            active=True,
        )
    except db.IntegrityError as e:
        # Lost a race against a concurrent registration
        if db.is_duplicate(e):
            raise ConflictError(DUPLICATE_ACCOUNT) from e
        raise
    log.info("Registered account %s (id=%s)", account.username, account.id)
    return account


def authenticate(username: str, password: str) -> models.Account:
    account = models.Account.first(username=username)
    if account is None or not account.is_active or not account.check_password(password):
        log.info("Failed login for %r", username)
        raise AuthenticationError(INVALID_CREDENTIALS)
    account.last_login_at = utcnow()
    account.update("last_login_at")
    return account


def issue_token(account: models.Account) -> Dict[str, Any]:
    """Signed bearer token carrying id, names and role."""
    token = create_access_token(
        identity=str(account.id),
        additional_claims={
            "given_name": account.first_name,
            "family_name": account.last_name,
            "role": account.role,
        },
    )
    expires_at = datetime.now(timezone.utc) + current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]
    return {
        "token": token,
        "token_type": "Bearer",
        "expires_at": expires_at.isoformat(timespec="seconds"),
        "user": account.to_dict(),
    }


def get_account(ctx: CallerContext, account_id: int) -> models.Account:
    require_owner(ctx, account_id)
    account = models.Account.get_by_id(account_id)
    if account is None:
        raise NotFoundError("User not found.", account_id=account_id)
    return account


def delete_account(ctx: CallerContext, account_id: int) -> None:
    require_admin(ctx)
    account = models.Account.get_by_id(account_id)
    if account is None:
        raise NotFoundError("User not found.", account_id=account_id)
    account.delete()
    log.info("Account %s deleted by %s", account_id, ctx.username)
