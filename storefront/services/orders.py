"""
Order placement and lifecycle.

    Pending -> Processing -> Shipped -> Delivered
    any state except Shipped/Delivered -> Cancelled

Placement validates stock line by line, snapshots unit prices and writes the
order with all of its items in a single transaction.
"""
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import StrEnum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from flask import current_app

from storefront.database import db
from storefront.models import models
from storefront.services.policy import CallerContext, require_admin, require_authenticated, require_owner
from storefront.utils.exceptions import ConflictError, NotFoundError, ValidationError
from storefront.utils.helpers import PaginationMetadata, clamp_paging, clean_text, is_blank, to_money, utcnow
from storefront.utils.logging import get_logger

log = get_logger(__name__)

PROFILE_REQUIRED = "Customer profile not found. Please create a customer profile first."
MAX_LINE_QUANTITY = 1000


class OrderStatus(StrEnum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


def parse_status(value: Any) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError(
            "Invalid order status.",
            status=value,
            allowed=[s.value for s in OrderStatus],
        ) from None


def generate_order_number(now: Optional[datetime] = None) -> str:
    """ORD-<UTC yyyyMMdd>-<8 uppercase hex>"""
    now = now or datetime.now(timezone.utc)
    return f"ORD-{now:%Y%m%d}-{uuid.uuid4().hex[:8].upper()}"


def _insufficient_stock(product: models.Product, requested: int) -> ValidationError:
    return ValidationError(
        f"Insufficient stock for product '{product.name}'. "
        f"Available: {product.stock_quantity}, Requested: {requested}",
        product_id=product.id,
        available=product.stock_quantity,
        requested=requested,
    )


def _take_stock(cur: Any, product_id: int, quantity: int) -> None:
    """Guarded decrement; fails when stock dropped below `quantity` since it was checked."""
    cur.execute(
        db.sql(
            "UPDATE product_table SET stock_quantity = stock_quantity - ? "
            "WHERE id = ? AND stock_quantity >= ?"
        ),
        (quantity, product_id, quantity),
    )
    if cur.rowcount != 1:
        product = models.Product.get_by_id(product_id)
        if product is None:
            raise NotFoundError(f"Product with ID {product_id} not found.", product_id=product_id)
        raise _insufficient_stock(product, quantity)


def _restock(cur: Any, items: Sequence[models.OrderItem]) -> None:
    for item in items:
        cur.execute(
            db.sql("UPDATE product_table SET stock_quantity = stock_quantity + ? WHERE id = ?"),
            (item.quantity, item.product_id),
        )


def _price_lines(items: Sequence[Mapping[str, Any]]) -> Tuple[List[Tuple[models.Product, int]], Decimal]:
    if not items:
        raise ValidationError("Order must contain at least one item.")

    lines: List[Tuple[models.Product, int]] = []
    total = Decimal("0")
    for item in items:
        product_id = item.get("product_id")
        quantity = item.get("quantity")
        if product_id is None or int(product_id) < 1:
            raise ValidationError("Product ID must be a positive number.", product_id=product_id)
        if quantity is None or not 1 <= int(quantity) <= MAX_LINE_QUANTITY:
            raise ValidationError(
                f"Quantity must be between 1 and {MAX_LINE_QUANTITY}.",
                product_id=product_id,
                quantity=quantity,
            )
        product_id, quantity = int(product_id), int(quantity)

        product = models.Product.get_by_id(product_id)
        if product is None:
            raise NotFoundError(f"Product with ID {product_id} not found.", product_id=product_id)
        if product.stock_quantity < quantity:
            raise _insufficient_stock(product, quantity)

        lines.append((product, quantity))
        total += product.price * quantity
    return lines, to_money(total)


def create_order(
    ctx: CallerContext,
    items: Sequence[Mapping[str, Any]],
    notes: Optional[str] = None,
    shipping_address: Optional[str] = None,
) -> models.Order:
    require_authenticated(ctx)
    profile = models.Customer.first(account_id=ctx.account_id)
    if profile is None:
        raise ValidationError(PROFILE_REQUIRED)

    lines, total = _price_lines(items)
    decrement = current_app.config.get("DECREMENT_STOCK_ON_ORDER", False)
    order_number = generate_order_number()

    try:
        with db.connection() as (conn, cur):
            order = models.Order.new(
                cursor=cur,
                order_number=order_number,
                order_date=utcnow(),
                total_amount=total,
                status=str(OrderStatus.PENDING),
                notes=clean_text(notes),
                shipping_address=clean_text(shipping_address),
                customer_id=profile.id,
            )
            for product, quantity in lines:
                models.OrderItem.new(
                    cursor=cur,
                    order_id=order.id,
                    product_id=product.id,
                    quantity=quantity,
                    unit_price=product.price,
                )
                if decrement:
                    _take_stock(cur, product.id, quantity)
    except db.IntegrityError as e:
        if db.is_duplicate(e, "order_number"):
            raise ConflictError("Could not allocate a unique order number, please retry.") from e
        raise

    log.info("Order %s placed by %s (%d lines, total %s)", order_number, ctx.username, len(lines), total)
    return get_order(ctx, order.id)


def get_order(ctx: CallerContext, order_id: int, include_items: bool = True) -> models.Order:
    require_authenticated(ctx)
    order = models.Order.summary(order_id)
    if order is None:
        raise NotFoundError("Order not found.", order_id=order_id)
    require_owner(ctx, order.account_id)
    if include_items:
        order.load_items()
    return order


def list_orders(
    ctx: CallerContext,
    status: Optional[str] = None,
    page_number: Optional[int] = None,
    page_size: Optional[int] = None,
) -> Tuple[List[models.Order], PaginationMetadata]:
    require_admin(ctx)
    page_number, page_size = clamp_paging(page_number, page_size)
    clause, params = "", ()
    if not is_blank(status):
        clause, params = "o.status = ?", (str(parse_status(status)),)

    total = models.Order.count(clause.replace("o.", ""), params)
    meta = PaginationMetadata(total_item_count=total, page_size=page_size, current_page=page_number)
    orders = models.Order.summaries(clause, params, limit=page_size, offset=meta.offset)
    return orders, meta


def list_my_orders(ctx: CallerContext) -> List[models.Order]:
    require_authenticated(ctx)
    profile = models.Customer.first(account_id=ctx.account_id)
    if profile is None:
        raise NotFoundError(PROFILE_REQUIRED)
    orders = models.Order.summaries("o.customer_id = ?", (profile.id,))
    for order in orders:
        order.load_items()
    return orders


def update_order(
    ctx: CallerContext,
    order_id: int,
    status: Optional[str] = None,
    notes: Optional[str] = None,
    shipping_address: Optional[str] = None,
) -> models.Order:
    """
    Administrative override: status is written as given, no transition checks.
    With stock decrement on, moving into Cancelled puts the stock back and
    moving out of it takes the stock again.
    """
    require_admin(ctx)
    order = models.Order.get_by_id(order_id)
    if order is None:
        raise NotFoundError("Order not found.", order_id=order_id)
    previous = order.status
    changed = []
    if status is not None:
        order.status = str(parse_status(status))
        changed.append("status")
    if not is_blank(notes):
        order.notes = notes.strip()
        changed.append("notes")
    if not is_blank(shipping_address):
        order.shipping_address = shipping_address.strip()
        changed.append("shipping_address")

    was_cancelled = previous == OrderStatus.CANCELLED
    is_cancelled = order.status == OrderStatus.CANCELLED
    items = []
    if was_cancelled != is_cancelled and current_app.config.get("DECREMENT_STOCK_ON_ORDER", False):
        items = models.OrderItem.for_order(order_id)

    if changed:
        with db.connection() as (conn, cur):
            order.update(*changed, cursor=cur)
            if is_cancelled:
                _restock(cur, items)
            else:
                for item in items:
                    _take_stock(cur, item.product_id, item.quantity)
    log.info("Order %s updated by %s (%s)", order_id, ctx.username, ", ".join(changed) or "no changes")
    return get_order(ctx, order_id)


def update_order_status(ctx: CallerContext, order_id: int, status: str) -> models.Order:
    return update_order(ctx, order_id, status=status)


def cancel_order(ctx: CallerContext, order_id: int) -> models.Order:
    require_authenticated(ctx)
    order = models.Order.summary(order_id)
    if order is None:
        raise NotFoundError("Order not found.", order_id=order_id)
    require_owner(ctx, order.account_id)

    if order.status in (OrderStatus.SHIPPED, OrderStatus.DELIVERED):
        raise ValidationError("Cannot cancel order that has been shipped or delivered.", status=order.status)
    if order.status == OrderStatus.CANCELLED:
        raise ValidationError("Order is already cancelled.", status=order.status)

    restock = []
    if current_app.config.get("DECREMENT_STOCK_ON_ORDER", False):
        restock = models.OrderItem.for_order(order_id)

    with db.connection() as (conn, cur):
        order.status = str(OrderStatus.CANCELLED)
        order.update("status", cursor=cur)
        _restock(cur, restock)
    log.info("Order %s cancelled by %s", order.order_number, ctx.username)
    return get_order(ctx, order_id)


def order_totals() -> Dict[str, Any]:
    """Figures for the admin dashboard; revenue only counts delivered orders."""
    with db.connection() as (conn, cur):
        cur.execute(
            db.sql("SELECT COALESCE(SUM(total_amount), 0) AS revenue FROM order_table WHERE status = ?"),
            (str(OrderStatus.DELIVERED),),
        )
        revenue = to_money(cur.fetchone()["revenue"])
        cur.execute(
            db.sql("SELECT COUNT(*) AS pending FROM order_table WHERE status = ?"),
            (str(OrderStatus.PENDING),),
        )
        pending = int(cur.fetchone()["pending"])
        cur.execute("SELECT COUNT(*) AS total FROM order_table")
        total = int(cur.fetchone()["total"])
    return {"total_orders": total, "total_revenue": revenue, "pending_orders": pending}
