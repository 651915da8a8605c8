from flask import current_app

from flask_login import UserMixin

import bcrypt

from typing import Any, Dict, Optional, List, Sequence

from storefront.database import db
from storefront.utils.helpers import to_money, utcnow
from storefront.utils.logging import get_logger

log = get_logger(__name__)


def set_defaults(default_list):
    classes = {
        "ACCOUNT": Account,
        "CUSTOMER": Customer,
        "CATEGORY": Category,
        "PRODUCT": Product,
    }
    try:
        for entry in default_list:
            if entry["type"] not in ["NOT NULL", "NOT_NULL"]:
                continue
            cls_ = classes[entry["object_name"]]
            if cls_.first(**{entry["key"]: entry["value"]}) is not None:
                continue
            log.info(f"Setting default {entry['object_name']} ({entry['key']}={entry['value']})")
            object_data = entry["data"].copy()
            object_data[entry["key"]] = entry["value"]
            cls_.new(**object_data)
    except Exception as e:
        log.error(f"Failed loading defaults, {e}")
        raise ValueError(f"Failed loading defaults, {e}") from e
    return True


class BaseClass:
    """
    A row of `table_name`. Columns become attributes; attributes starting
    with '_' or not backed by a column are never written back.
    """
    non_update: List[str] = []
    table_name: Optional[str] = None
    decimal_fields: Sequence[str] = ()
    bool_fields: Sequence[str] = ()
    hidden_fields: Sequence[str] = ()
    default_order: str = "id"

    def __init__(self, **kwargs: Any) -> None:
        if self.table_name is None:
            raise ValueError("table_name must be set in subclass")
        for key, value in kwargs.items():
            if value is not None and key in self.decimal_fields:
                value = to_money(value)
            elif value is not None and key in self.bool_fields:
                value = bool(value)
            setattr(self, key, value)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={getattr(self, 'id', None)}>"

    @classmethod
    def columns(cls) -> Dict[str, str]:
        return db.get_columns(table_name=cls.table_name)

    @classmethod
    def new(cls, cursor: Any = None, **kwargs) -> 'BaseClass':
        if "id" in kwargs:
            raise KeyError("Invalid ID key found")
        table_columns = cls.columns()
        excess = [col for col in kwargs if col not in table_columns]
        if excess:
            raise KeyError(f"Unknown arguments: {', '.join(excess)}")
        if "created_at" in table_columns and not kwargs.get("created_at"):
            kwargs["created_at"] = utcnow()

        if cursor is not None:
            return cls._insert(cursor, kwargs)
        with db.connection() as (conn, cur):
            return cls._insert(cur, kwargs)

    @classmethod
    def _insert(cls, cur: Any, data: Dict[str, Any]) -> 'BaseClass':
        new_id = db.insert(cur, cls.table_name, data)
        cur.execute(db.sql(f"SELECT * FROM {cls.table_name} WHERE id = ?"), (new_id,))
        return cls(**cur.fetchone())

    @classmethod
    def get(cls, **kwargs) -> List['BaseClass']:
        if not kwargs:
            return cls.where()
        where_clause = " AND ".join(f"{key} = ?" for key in kwargs)
        return cls.where(where_clause, tuple(kwargs.values()))

    @classmethod
    def where(cls, clause: str = "", params: tuple = (), order_by: Optional[str] = None) -> List['BaseClass']:
        query = f"SELECT * FROM {cls.table_name}"
        if clause:
            query += f" WHERE {clause}"
        query += f" ORDER BY {order_by or cls.default_order}"
        with db.connection() as (conn, cursor):
            cursor.execute(db.sql(query), params)
            return [cls(**entry) for entry in cursor.fetchall()]

    @classmethod
    def first(cls, **kwargs) -> Optional['BaseClass']:
        found = cls.get(**kwargs)
        return found[0] if found else None

    @classmethod
    def get_by_id(cls, id: int) -> Optional['BaseClass']:
        return cls.first(id=id)

    @classmethod
    def count(cls, clause: str = "", params: tuple = ()) -> int:
        query = f"SELECT COUNT(*) AS total FROM {cls.table_name}"
        if clause:
            query += f" WHERE {clause}"
        with db.connection() as (conn, cursor):
            cursor.execute(db.sql(query), params)
            return int(cursor.fetchone()["total"])

    def update(self, *keys, cursor: Any = None) -> bool:
        table_columns = self.columns()
        if not keys:
            update_data = {
                k: v for k, v in vars(self).items()
                if k in table_columns and k not in self.non_update and not k.startswith("_")
            }
        else:
            invalid = [k for k in keys if k in self.non_update or k not in table_columns]
            if invalid:
                raise KeyError(f"Invalid keys for update: {', '.join(invalid)}")
            update_data = {k: getattr(self, k) for k in keys}
        if not update_data:
            log.debug(f"Nothing updated to {self.table_name}")
            return True
        set_clause = ", ".join(f"{k} = ?" for k in update_data)
        params = tuple(update_data.values()) + (getattr(self, 'id'),)
        query = db.sql(f"UPDATE {self.table_name} SET {set_clause} WHERE id = ?")
        if cursor is not None:
            cursor.execute(query, params)
            return True
        with db.connection() as (conn, cur):
            cur.execute(query, params)
        return True

    def delete(self, cursor: Any = None) -> None:
        query = db.sql(f"DELETE FROM {self.table_name} WHERE id = ?")
        if cursor is not None:
            cursor.execute(query, (self.id,))
            return
        with db.connection() as (conn, cur):
            cur.execute(query, (self.id,))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for key, value in vars(self).items():
            if key.startswith("_") or key in self.hidden_fields:
                continue
            if isinstance(value, BaseClass):
                value = value.to_dict()
            elif isinstance(value, list):
                value = [v.to_dict() if isinstance(v, BaseClass) else v for v in value]
            data[key] = value
        return data


class Account(UserMixin, BaseClass):
    table_name = "account_table"
    non_update = ["id", "username", "created_at"]
    bool_fields = ("active",)
    hidden_fields = ("password_hash", "token_role")

    @classmethod
    def new(cls, cursor: Any = None, **kwargs) -> 'Account':
        if "password" in kwargs:
            kwargs["password_hash"] = cls.hash_password(kwargs.pop("password"))
        return super().new(cursor=cursor, **kwargs)

    @staticmethod
    def hash_password(raw_password: str) -> str:
        rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
        return bcrypt.hashpw(raw_password.encode('utf-8'), bcrypt.gensalt(rounds=rounds)).decode('utf-8')

    def check_password(self, input_password: str) -> bool:
        try:
            return bcrypt.checkpw(input_password.encode('utf-8'), self.password_hash.encode('utf-8'))
        except ValueError:
            # Malformed stored hash
            return False

    @property
    def is_active(self) -> bool:
        return bool(getattr(self, "active", False))

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def request_role(self) -> str:
        """Role as asserted by the bearer token, falling back to the stored one."""
        return getattr(self, "token_role", None) or self.role


class Customer(BaseClass):
    table_name = "customer_table"
    non_update = ["id", "account_id", "created_at"]

    PROFILE_SELECT = """
        SELECT c.*,
               a.username, a.email, a.first_name, a.last_name, a.active,
               (SELECT COUNT(*) FROM order_table o WHERE o.customer_id = c.id) AS number_of_orders
        FROM customer_table AS c
        JOIN account_table AS a ON a.id = c.account_id
    """
    bool_fields = ("active",)

    @classmethod
    def profiles(cls, clause: str = "", params: tuple = ()) -> List['Customer']:
        query = cls.PROFILE_SELECT
        if clause:
            query += f" WHERE {clause}"
        query += " ORDER BY c.id"
        with db.connection() as (conn, cursor):
            cursor.execute(db.sql(query), params)
            return [cls(**row) for row in cursor.fetchall()]

    @classmethod
    def profile(cls, clause: str, params: tuple) -> Optional['Customer']:
        found = cls.profiles(clause, params)
        return found[0] if found else None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Category(BaseClass):
    table_name = "category_table"
    non_update = ["id", "created_at"]
    bool_fields = ("active",)
    default_order = "name"

    @classmethod
    def with_counts(cls, clause: str = "", params: tuple = ()) -> List['Category']:
        """Categories plus the number of active products in each."""
        query = """
            SELECT c.*,
                   (SELECT COUNT(*) FROM product_table p
                     WHERE p.category_id = c.id AND p.active = ?) AS number_of_products
            FROM category_table AS c
        """
        if clause:
            query += f" WHERE {clause}"
        query += " ORDER BY c.name, c.id"
        with db.connection() as (conn, cursor):
            cursor.execute(db.sql(query), (True,) + tuple(params))
            return [cls(**row) for row in cursor.fetchall()]

    def product_count(self) -> int:
        """Products of any state, active or not."""
        return Product.count("category_id = ?", (self.id,))


class Product(BaseClass):
    table_name = "product_table"
    non_update = ["id", "created_at"]
    decimal_fields = ("price",)
    bool_fields = ("active",)

    # Joined read model: category name + approved-review aggregates
    DETAIL_SELECT = """
        SELECT p.*,
               cat.name AS category_name,
               (SELECT COUNT(*) FROM review_table r
                 WHERE r.product_id = p.id AND r.approved = ?) AS number_of_reviews,
               (SELECT AVG(r.rating) FROM review_table r
                 WHERE r.product_id = p.id AND r.approved = ?) AS average_rating
        FROM product_table AS p
        JOIN category_table AS cat ON cat.id = p.category_id
    """

    def __init__(self, **kwargs: Any) -> None:
        if "average_rating" in kwargs:
            kwargs["average_rating"] = round(float(kwargs["average_rating"] or 0), 2)
        if "number_of_reviews" in kwargs:
            kwargs["number_of_reviews"] = int(kwargs["number_of_reviews"] or 0)
        super().__init__(**kwargs)

    @classmethod
    def details(
        cls,
        clause: str = "",
        params: tuple = (),
        order_by: str = "p.name, p.id",
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List['Product']:
        query = cls.DETAIL_SELECT
        if clause:
            query += f" WHERE {clause}"
        query += f" ORDER BY {order_by}"
        all_params = (True, True) + tuple(params)
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            all_params += (limit, offset)
        with db.connection() as (conn, cursor):
            cursor.execute(db.sql(query), all_params)
            return [cls(**row) for row in cursor.fetchall()]

    @classmethod
    def detail(cls, product_id: int) -> Optional['Product']:
        found = cls.details("p.id = ?", (product_id,))
        return found[0] if found else None


class Review(BaseClass):
    table_name = "review_table"
    non_update = ["id", "product_id", "customer_email", "created_at"]
    bool_fields = ("approved",)
    # Snapshot kept for duplicate and ownership checks only
    hidden_fields = ("customer_email",)
    default_order = "created_at DESC, id DESC"


class Order(BaseClass):
    table_name = "order_table"
    non_update = ["id", "order_number", "customer_id", "order_date", "total_amount"]
    decimal_fields = ("total_amount",)
    default_order = "order_date DESC, id DESC"

    SUMMARY_SELECT = """
        SELECT o.*,
               a.first_name || ' ' || a.last_name AS customer_name,
               c.account_id AS account_id
        FROM order_table AS o
        JOIN customer_table AS c ON c.id = o.customer_id
        JOIN account_table AS a ON a.id = c.account_id
    """

    @classmethod
    def summaries(
        cls,
        clause: str = "",
        params: tuple = (),
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List['Order']:
        query = cls.SUMMARY_SELECT
        if db.backend == "mysql":
            query = query.replace("a.first_name || ' ' || a.last_name", "CONCAT(a.first_name, ' ', a.last_name)")
        if clause:
            query += f" WHERE {clause}"
        query += " ORDER BY o.order_date DESC, o.id DESC"
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            params = tuple(params) + (limit, offset)
        with db.connection() as (conn, cursor):
            cursor.execute(db.sql(query), params)
            return [cls(**row) for row in cursor.fetchall()]

    @classmethod
    def summary(cls, order_id: int) -> Optional['Order']:
        found = cls.summaries("o.id = ?", (order_id,))
        return found[0] if found else None

    def load_items(self) -> List['OrderItem']:
        self.items = OrderItem.for_order(self.id)
        return self.items


class OrderItem(BaseClass):
    table_name = "order_item_table"
    non_update = ["id", "order_id", "product_id", "unit_price"]
    decimal_fields = ("unit_price",)

    @classmethod
    def for_order(cls, order_id: int) -> List['OrderItem']:
        query = """
            SELECT i.*, p.name AS product_name
            FROM order_item_table AS i
            JOIN product_table AS p ON p.id = i.product_id
            WHERE i.order_id = ?
            ORDER BY i.id
        """
        with db.connection() as (conn, cursor):
            cursor.execute(db.sql(query), (order_id,))
            return [cls(**row) for row in cursor.fetchall()]

    @property
    def total_price(self):
        return to_money(self.quantity * self.unit_price)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["total_price"] = self.total_price
        return data
