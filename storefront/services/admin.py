from typing import Any, Dict, List, Optional, Sequence, Tuple

from storefront.models import models
from storefront.services import catalog, orders, reviews
from storefront.services.policy import CallerContext, Role, require_admin
from storefront.utils.exceptions import NotFoundError, ValidationError
from storefront.utils.helpers import PaginationMetadata, utcnow
from storefront.utils.logging import get_logger

log = get_logger(__name__)

INVALID_ROLE = "Role must be either 'Admin' or 'User'."


def dashboard_stats(ctx: CallerContext) -> Dict[str, Any]:
    require_admin(ctx)
    stats: Dict[str, Any] = {
        "total_users": models.Account.count(),
        "total_customers": models.Customer.count(),
        "total_products": models.Product.count(),
    }
    stats.update(orders.order_totals())
    stats["last_updated"] = utcnow()
    return stats


def bulk_approve_reviews(ctx: CallerContext, review_ids: Sequence[int], approve: bool = True) -> int:
    require_admin(ctx)
    updated = reviews.set_approval(list(review_ids), approve)
    log.info("%s %d review(s) via bulk moderation by %s",
             "Approved" if approve else "Unapproved", updated, ctx.username)
    return updated


def update_user_role(ctx: CallerContext, account_id: int, role: str) -> models.Account:
    require_admin(ctx)
    if role not in (Role.ADMIN, Role.USER):
        raise ValidationError(INVALID_ROLE, role=role)
    account = models.Account.get_by_id(account_id)
    if account is None:
        raise NotFoundError("User not found.", account_id=account_id)
    account.role = str(role)
    account.update("role")
    log.info("Account %s role set to %s by %s", account_id, role, ctx.username)
    return account


def list_users(ctx: CallerContext) -> List[models.Account]:
    require_admin(ctx)
    return models.Account.get()


def list_pending_reviews(ctx: CallerContext) -> List[models.Review]:
    require_admin(ctx)
    return reviews.list_pending()


def list_all_products(ctx: CallerContext) -> List[models.Product]:
    require_admin(ctx)
    return catalog.list_all_products()


def update_order_status(ctx: CallerContext, order_id: int, status: str) -> models.Order:
    require_admin(ctx)
    return orders.update_order_status(ctx, order_id, status)


def list_orders(
    ctx: CallerContext,
    status: Optional[str] = None,
    page_number: Optional[int] = None,
    page_size: Optional[int] = None,
) -> Tuple[List[models.Order], PaginationMetadata]:
    require_admin(ctx)
    return orders.list_orders(ctx, status=status, page_number=page_number, page_size=page_size)
