"""
Products and categories. Reads are public, every write is admin-only.
"""
from typing import Any, Dict, List, Mapping, Optional, Tuple

from storefront.database import db
from storefront.models import models
from storefront.services.policy import CallerContext, require_admin
from storefront.utils.exceptions import ConflictError, NotFoundError, ValidationError
from storefront.utils.helpers import PaginationMetadata, clamp_paging, clean_text, is_blank, to_money, utcnow
from storefront.utils.logging import get_logger

log = get_logger(__name__)

OPTIONAL_TEXT_FIELDS = ("description", "sku", "image_url")


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------

LIKE_ESCAPE = "!"


def _contains_pattern(text: str) -> str:
    """Case-folded LIKE pattern matching `text` literally anywhere."""
    for char in (LIKE_ESCAPE, "%", "_"):
        text = text.replace(char, LIKE_ESCAPE + char)
    return f"%{text.lower()}%"


def _product_filters(filters: Mapping[str, Any]) -> Tuple[str, tuple]:
    clauses = ["p.active = ?"]
    params: List[Any] = [True]

    name = clean_text(filters.get("name"))
    if name:
        clauses.append("LOWER(p.name) LIKE ? ESCAPE '!'")
        params.append(_contains_pattern(name))

    search = clean_text(filters.get("search_query"))
    if search:
        clauses.append("(LOWER(p.name) LIKE ? ESCAPE '!' OR LOWER(COALESCE(p.description, '')) LIKE ? ESCAPE '!')")
        params.extend([_contains_pattern(search)] * 2)

    if filters.get("category_id") is not None:
        clauses.append("p.category_id = ?")
        params.append(filters["category_id"])

    min_price = filters.get("min_price")
    max_price = filters.get("max_price")
    if min_price is not None and max_price is not None and min_price > max_price:
        raise ValidationError("Minimum price cannot be greater than maximum price.",
                              min_price=str(min_price), max_price=str(max_price))
    if min_price is not None:
        clauses.append("p.price >= ?")
        params.append(to_money(min_price))
    if max_price is not None:
        clauses.append("p.price <= ?")
        params.append(to_money(max_price))

    if filters.get("in_stock"):
        clauses.append("p.stock_quantity > 0")

    return " AND ".join(clauses), tuple(params)


def list_products(
    filters: Mapping[str, Any],
    page_number: Optional[int] = None,
    page_size: Optional[int] = None,
) -> Tuple[List[models.Product], PaginationMetadata]:
    page_number, page_size = clamp_paging(page_number, page_size)
    clause, params = _product_filters(filters)

    with db.connection() as (conn, cur):
        cur.execute(db.sql(f"SELECT COUNT(*) AS total FROM product_table AS p WHERE {clause}"), params)
        total = int(cur.fetchone()["total"])

    meta = PaginationMetadata(total_item_count=total, page_size=page_size, current_page=page_number)
    products = models.Product.details(clause, params, limit=page_size, offset=meta.offset)
    return products, meta


def get_product(product_id: int, include_reviews: bool = False) -> models.Product:
    product = models.Product.detail(product_id)
    if product is None:
        raise NotFoundError("Product not found.", product_id=product_id)
    if include_reviews:
        product.reviews = models.Review.get(product_id=product_id, approved=True)
    return product


def _require_category(category_id: int) -> models.Category:
    category = models.Category.get_by_id(category_id)
    if category is None:
        raise ValidationError("Product category does not exist.", category_id=category_id)
    return category


def _check_sku(sku: Optional[str], exclude_id: Optional[int] = None) -> None:
    if not sku:
        return
    existing = models.Product.first(sku=sku)
    if existing is not None and existing.id != exclude_id:
        raise ConflictError("A product with this SKU already exists.", sku=sku)


def _product_values(data: Mapping[str, Any]) -> Dict[str, Any]:
    values = {
        "name": data["name"].strip(),
        "price": to_money(data["price"]),
        "stock_quantity": int(data["stock_quantity"]),
        "category_id": int(data["category_id"]),
        "active": True if data.get("active") is None else bool(data["active"]),
    }
    for field in OPTIONAL_TEXT_FIELDS:
        values[field] = clean_text(data.get(field))
    if values["price"] <= 0:
        raise ValidationError("Price must be greater than zero.", price=str(values["price"]))
    if values["stock_quantity"] < 0:
        raise ValidationError("Stock quantity cannot be negative.", stock_quantity=values["stock_quantity"])
    return values


def create_product(ctx: CallerContext, data: Mapping[str, Any]) -> models.Product:
    require_admin(ctx)
    values = _product_values(data)
    _require_category(values["category_id"])
    _check_sku(values["sku"])
    try:
        product = models.Product.new(**values)
    except db.IntegrityError as e:
        if db.is_duplicate(e, "sku"):
            raise ConflictError("A product with this SKU already exists.", sku=values["sku"]) from e
        raise
    log.info("Product %s created by %s", product.id, ctx.username)
    return get_product(product.id)


def update_product(ctx: CallerContext, product_id: int, data: Mapping[str, Any]) -> models.Product:
    """Full replace: optional text fields that are absent or blank become null."""
    require_admin(ctx)
    product = models.Product.get_by_id(product_id)
    if product is None:
        raise NotFoundError("Product not found.", product_id=product_id)
    values = _product_values(data)
    _require_category(values["category_id"])
    _check_sku(values["sku"], exclude_id=product_id)

    for key, value in values.items():
        setattr(product, key, value)
    product.updated_at = utcnow()
    product.update(*values.keys(), "updated_at")
    return get_product(product_id)


def partial_update_product(ctx: CallerContext, product_id: int, changes: Mapping[str, Any]) -> models.Product:
    """
    Apply only the keys present in `changes`.

    name                         ignored when blank
    description, sku, image_url  blank clears to null, otherwise trimmed
    price, stock, category, active  overwritten

    Nothing is written when no value actually differs.
    """
    require_admin(ctx)
    product = models.Product.get_by_id(product_id)
    if product is None:
        raise NotFoundError("Product not found.", product_id=product_id)

    pending: Dict[str, Any] = {}

    if "name" in changes and not is_blank(changes["name"]):
        pending["name"] = changes["name"].strip()

    for field in OPTIONAL_TEXT_FIELDS:
        if field in changes:
            pending[field] = clean_text(changes[field])

    if changes.get("price") is not None:
        price = to_money(changes["price"])
        if price <= 0:
            raise ValidationError("Price must be greater than zero.", price=str(price))
        pending["price"] = price

    if changes.get("stock_quantity") is not None:
        stock = int(changes["stock_quantity"])
        if stock < 0:
            raise ValidationError("Stock quantity cannot be negative.", stock_quantity=stock)
        pending["stock_quantity"] = stock

    if changes.get("category_id") is not None:
        pending["category_id"] = int(changes["category_id"])

    if changes.get("active") is not None:
        pending["active"] = bool(changes["active"])

    changed = {k: v for k, v in pending.items() if getattr(product, k, None) != v}
    if not changed:
        log.debug("Partial update of product %s changed nothing", product_id)
        return get_product(product_id)

    if "category_id" in changed:
        _require_category(changed["category_id"])
    if "sku" in changed:
        _check_sku(changed["sku"], exclude_id=product_id)

    for key, value in changed.items():
        setattr(product, key, value)
    product.updated_at = utcnow()
    product.update(*changed.keys(), "updated_at")
    log.info("Product %s patched (%s)", product_id, ", ".join(sorted(changed)))
    return get_product(product_id)


def update_stock(ctx: CallerContext, product_id: int, quantity: int) -> models.Product:
    require_admin(ctx)
    if quantity is None or quantity < 0:
        raise ValidationError("Stock quantity cannot be negative.", stock_quantity=quantity)
    product = models.Product.get_by_id(product_id)
    if product is None:
        raise NotFoundError("Product not found.", product_id=product_id)
    product.stock_quantity = int(quantity)
    product.updated_at = utcnow()
    product.update("stock_quantity", "updated_at")
    return get_product(product_id)


def delete_product(ctx: CallerContext, product_id: int) -> None:
    require_admin(ctx)
    product = models.Product.get_by_id(product_id)
    if product is None:
        raise NotFoundError("Product not found.", product_id=product_id)
    conflict = ConflictError("Product is part of existing orders; deactivate it instead.", product_id=product_id)
    if models.OrderItem.count("product_id = ?", (product_id,)):
        raise conflict
    try:
        product.delete()
    except db.IntegrityError as e:
        raise conflict from e
    log.info("Product %s deleted by %s", product_id, ctx.username)


def list_all_products() -> List[models.Product]:
    """Every product, inactive ones included."""
    return models.Product.details()


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

def list_categories() -> List[models.Category]:
    return models.Category.with_counts("c.active = ?", (True,))


def get_category(category_id: int, include_products: bool = False) -> models.Category:
    found = models.Category.with_counts("c.id = ?", (category_id,))
    if not found:
        raise NotFoundError("Category not found.", category_id=category_id)
    category = found[0]
    if include_products:
        category.products = models.Product.details("p.category_id = ? AND p.active = ?", (category_id, True))
    return category


def _check_category_name(name: str, exclude_id: Optional[int] = None) -> str:
    name = name.strip()
    if not 2 <= len(name) <= 100:
        raise ValidationError("Category name must be between 2 and 100 characters.", name=name)
    for existing in models.Category.where("LOWER(name) = LOWER(?)", (name,)):
        if existing.id != exclude_id:
            raise ValidationError("A category with this name already exists.", name=name)
    return name


def create_category(ctx: CallerContext, data: Mapping[str, Any]) -> models.Category:
    require_admin(ctx)
    name = _check_category_name(data.get("name") or "")
    try:
        category = models.Category.new(
            name=name,
            description=clean_text(data.get("description")),
            active=True if data.get("active") is None else bool(data["active"]),
        )
    except db.IntegrityError as e:
        raise ValidationError("A category with this name already exists.", name=name) from e
    log.info("Category %s created by %s", category.id, ctx.username)
    return get_category(category.id)


def update_category(ctx: CallerContext, category_id: int, data: Mapping[str, Any]) -> models.Category:
    require_admin(ctx)
    category = models.Category.get_by_id(category_id)
    if category is None:
        raise NotFoundError("Category not found.", category_id=category_id)

    if not is_blank(data.get("name")):
        category.name = _check_category_name(data["name"], exclude_id=category_id)
    if "description" in data:
        category.description = clean_text(data["description"])
    category.active = True if data.get("active") is None else bool(data["active"])

    category.update("name", "description", "active")
    return get_category(category_id)


def delete_category(ctx: CallerContext, category_id: int) -> None:
    require_admin(ctx)
    category = models.Category.get_by_id(category_id)
    if category is None:
        raise NotFoundError("Category not found.", category_id=category_id)
    products = category.product_count()
    if products:
        raise ValidationError("Cannot delete category that has products.",
                              category_id=category_id, number_of_products=products)
    category.delete()
    log.info("Category %s deleted by %s", category_id, ctx.username)
