from typing import Any, List, Mapping

from storefront.database import db
from storefront.models import models
from storefront.services.policy import CallerContext, require_admin, require_authenticated, require_owner
from storefront.utils.exceptions import ConflictError, NotFoundError
from storefront.utils.helpers import clean_text, is_blank
from storefront.utils.logging import get_logger

log = get_logger(__name__)

PROFILE_FIELDS = ("phone", "address", "city", "postal_code", "country")
PROFILE_REQUIRED = "Customer profile not found. Please create a customer profile first."


def _profile_view(profile_id: int) -> models.Customer:
    profile = models.Customer.profile("c.id = ?", (profile_id,))
    if profile is None:
        raise NotFoundError("Customer not found.", customer_id=profile_id)
    return profile


def profile_for(ctx: CallerContext) -> models.Customer | None:
    return models.Customer.first(account_id=ctx.account_id)


def create_profile(ctx: CallerContext, data: Mapping[str, Any]) -> models.Customer:
    require_authenticated(ctx)
    if profile_for(ctx) is not None:
        raise ConflictError("Customer profile already exists.")
    values = {field: clean_text(data.get(field)) for field in PROFILE_FIELDS}
    try:
        profile = models.Customer.new(account_id=ctx.account_id, **values)
    except db.IntegrityError as e:
        raise ConflictError("Customer profile already exists.") from e
    log.info("Customer profile %s created for account %s", profile.id, ctx.account_id)
    return _profile_view(profile.id)


def update_profile(ctx: CallerContext, data: Mapping[str, Any]) -> models.Customer:
    """Only non-blank incoming values overwrite; blank or missing ones keep the stored value."""
    require_authenticated(ctx)
    profile = profile_for(ctx)
    if profile is None:
        raise NotFoundError(PROFILE_REQUIRED)
    changed = []
    for field in PROFILE_FIELDS:
        value = data.get(field)
        if not is_blank(value):
            setattr(profile, field, value.strip())
            changed.append(field)
    if changed:
        profile.update(*changed)
    return _profile_view(profile.id)


def get_profile_by_account(ctx: CallerContext) -> models.Customer:
    require_authenticated(ctx)
    profile = profile_for(ctx)
    if profile is None:
        raise NotFoundError(PROFILE_REQUIRED)
    return _profile_view(profile.id)


def get_profile(ctx: CallerContext, profile_id: int, include_orders: bool = False) -> models.Customer:
    require_authenticated(ctx)
    profile = _profile_view(profile_id)
    require_owner(ctx, profile.account_id)
    if include_orders:
        profile.orders = models.Order.summaries("o.customer_id = ?", (profile_id,))
    return profile


def list_profiles(ctx: CallerContext) -> List[models.Customer]:
    require_admin(ctx)
    return models.Customer.profiles()


def delete_profile(ctx: CallerContext, profile_id: int) -> None:
    require_admin(ctx)
    profile = models.Customer.get_by_id(profile_id)
    if profile is None:
        raise NotFoundError("Customer not found.", customer_id=profile_id)
    profile.delete()
    log.info("Customer profile %s deleted by %s", profile_id, ctx.username)
