from flask import Request
from flask_login import LoginManager
from flask_jwt_extended import JWTManager, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from storefront.utils.logging import get_logger
from storefront.utils.exceptions import AuthenticationError

log = get_logger(__name__)

login_manager = LoginManager()
jwt = JWTManager()

BEARER_PREFIX = "bearer"


@login_manager.request_loader
def load_account_from_request(request: Request):
    """Resolve the 'Authorization: Bearer <token>' header to an active account."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != BEARER_PREFIX or not token.strip():
        return None

    try:
        claims = decode_token(token.strip())
    except (JWTExtendedException, PyJWTError) as exc:
        log.info("Rejected bearer token: %s", exc)
        return None

    from storefront.models import models  # late import, avoids circular dependency

    try:
        account_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        return None

    account = models.Account.get_by_id(account_id)
    if account is None or not account.is_active:
        return None
    account.token_role = claims.get("role", account.role)
    return account


@login_manager.unauthorized_handler
def unauthorized():
    raise AuthenticationError("A valid bearer token is required")
