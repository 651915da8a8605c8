from typing import List, Optional

from storefront.database import db
from storefront.models import models
from storefront.services.policy import CallerContext, require_admin, require_authenticated
from storefront.utils.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from storefront.utils.helpers import clean_text
from storefront.utils.logging import get_logger

log = get_logger(__name__)

PROFILE_REQUIRED = "Customer profile not found. Please create a customer profile first."
ALREADY_REVIEWED = "You have already reviewed this product."


def _require_product(product_id: int) -> models.Product:
    product = models.Product.get_by_id(product_id)
    if product is None:
        raise NotFoundError("Product not found.", product_id=product_id)
    return product


def _is_author(ctx: CallerContext, review: models.Review) -> bool:
    return (
        ctx.is_authenticated
        and ctx.email is not None
        and review.customer_email.lower() == ctx.email.lower()
    )


def _find_review(product_id: int, review_id: int) -> models.Review:
    review = models.Review.first(id=review_id, product_id=product_id)
    if review is None:
        raise NotFoundError("Review not found.", product_id=product_id, review_id=review_id)
    return review


def list_reviews(product_id: int) -> List[models.Review]:
    _require_product(product_id)
    return models.Review.get(product_id=product_id, approved=True)


def get_review(ctx: CallerContext, product_id: int, review_id: int) -> models.Review:
    _require_product(product_id)
    review = _find_review(product_id, review_id)
    # Pending reviews stay hidden from everyone but moderators and the author
    if not review.approved and not (ctx.is_admin or _is_author(ctx, review)):
        raise NotFoundError("Review not found.", product_id=product_id, review_id=review_id)
    return review


def create_review(ctx: CallerContext, product_id: int, rating: int, comment: Optional[str] = None) -> models.Review:
    require_authenticated(ctx)
    _require_product(product_id)

    if rating is None or not 1 <= int(rating) <= 5:
        raise ValidationError("Rating must be between 1 and 5.", rating=rating)

    profile = models.Customer.first(account_id=ctx.account_id)
    if profile is None:
        raise ValidationError(PROFILE_REQUIRED)
    account = models.Account.get_by_id(ctx.account_id)

    if models.Review.count(
        "product_id = ? AND LOWER(customer_email) = LOWER(?)", (product_id, account.email)
    ):
        raise ConflictError(ALREADY_REVIEWED, product_id=product_id)

    try:
        review = models.Review.new(
            product_id=product_id,
            rating=int(rating),
            comment=clean_text(comment),
            customer_name=account.full_name,
            customer_email=account.email,
            approved=False,
        )
    except db.IntegrityError as e:
        if db.is_duplicate(e):
            raise ConflictError(ALREADY_REVIEWED, product_id=product_id) from e
        raise
    log.info("Review %s added to product %s by %s", review.id, product_id, ctx.username)
    return review


def approve_review(ctx: CallerContext, product_id: int, review_id: int, approve: bool = True) -> models.Review:
    require_admin(ctx)
    _require_product(product_id)
    review = _find_review(product_id, review_id)
    review.approved = bool(approve)
    review.update("approved")
    return review


def delete_review(ctx: CallerContext, product_id: int, review_id: int) -> None:
    require_authenticated(ctx)
    _require_product(product_id)
    review = _find_review(product_id, review_id)
    if not ctx.is_admin and not _is_author(ctx, review):
        raise AuthorizationError("You can only delete your own reviews.")
    review.delete()
    log.info("Review %s deleted by %s", review_id, ctx.username)


def list_pending() -> List[models.Review]:
    """Unapproved reviews, newest first, with the product name attached."""
    query = """
        SELECT r.*, p.name AS product_name
        FROM review_table AS r
        JOIN product_table AS p ON p.id = r.product_id
        WHERE r.approved = ?
        ORDER BY r.created_at DESC, r.id DESC
    """
    with db.connection() as (conn, cur):
        cur.execute(db.sql(query), (False,))
        return [models.Review(**row) for row in cur.fetchall()]


def set_approval(review_ids: List[int], approve: bool) -> int:
    """Flag every existing review in `review_ids` in one transaction; unknown ids are skipped."""
    ids = sorted({int(i) for i in review_ids})
    if not ids:
        return 0
    placeholders = ", ".join("?" for _ in ids)
    with db.connection() as (conn, cur):
        cur.execute(db.sql(f"SELECT id FROM review_table WHERE id IN ({placeholders})"), tuple(ids))
        found = [row["id"] for row in cur.fetchall()]
        if not found:
            return 0
        placeholders = ", ".join("?" for _ in found)
        cur.execute(
            db.sql(f"UPDATE review_table SET approved = ? WHERE id IN ({placeholders})"),
            (bool(approve), *found),
        )
    return len(found)
