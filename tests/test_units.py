import json
from decimal import Decimal

import pytest

from storefront.database.migrations import _create_table, _map_type
from storefront.services.orders import OrderStatus, parse_status
from storefront.services.policy import CallerContext, can_access
from storefront.utils.exceptions import ValidationError
from storefront.utils.helpers import PaginationMetadata, clamp_paging, clean_text, is_blank, to_money


@pytest.mark.parametrize("total, size, pages", [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (45, 20, 3)])
def test_pagination_page_count(total, size, pages):
    meta = PaginationMetadata(total_item_count=total, page_size=size, current_page=1)
    assert meta.total_page_count == pages


def test_pagination_header_and_offset():
    meta = PaginationMetadata(total_item_count=25, page_size=10, current_page=3)
    assert meta.offset == 20
    assert json.loads(meta.header()) == {
        "total_item_count": 25, "page_size": 10, "current_page": 3, "total_page_count": 3,
    }


@pytest.mark.parametrize("page_number, page_size, expected", [
    (None, None, (1, 10)),
    (0, 5, (1, 5)),
    (-3, 100, (1, 20)),
    (4, 0, (4, 1)),
])
def test_clamp_paging(app, page_number, page_size, expected):
    with app.app_context():
        assert clamp_paging(page_number, page_size) == expected


def test_money_is_quantized_to_cents():
    assert to_money("599.99") * 3 == Decimal("1799.97")
    assert str(to_money(0)) == "0.00"
    assert str(to_money(1799.97)) == "1799.97"
    assert str(to_money(Decimal("2.005"))) == "2.01"


def test_text_helpers():
    assert clean_text("  hi ") == "hi"
    assert clean_text("   ") is None
    assert clean_text(None) is None
    assert is_blank("") and is_blank(" \t") and is_blank(None)
    assert not is_blank("x")
    assert not is_blank(0)


def test_parse_status():
    assert parse_status("Shipped") is OrderStatus.SHIPPED
    with pytest.raises(ValidationError):
        parse_status("shipped")


def test_can_access():
    owner = CallerContext(account_id=1, role="User")
    other = CallerContext(account_id=2, role="User")
    admin = CallerContext(account_id=3, role="Admin")
    assert can_access(owner, 1)
    assert not can_access(other, 1)
    assert can_access(admin, 1)
    assert not can_access(CallerContext.anonymous(), 1)
    assert not can_access(owner, None)


@pytest.mark.parametrize("backend, expected", [
    ("sqlite", "INTEGER PRIMARY KEY AUTOINCREMENT"),
    ("postgresql", "SERIAL PRIMARY KEY"),
    ("mysql", "INT AUTO_INCREMENT PRIMARY KEY"),
])
def test_map_type_primary_key(backend, expected):
    assert _map_type("INTEGER PRIMARY KEY AUTOINCREMENT", backend) == expected


def test_map_type_keeps_check_values_verbatim():
    mapped = _map_type("TEXT NOT NULL DEFAULT 'Pending' CHECK (status IN ('Pending', 'Shipped'))", "postgresql")
    assert mapped == "TEXT NOT NULL DEFAULT 'Pending' CHECK (status IN ('Pending', 'Shipped'))"


def test_map_type_backend_specifics():
    assert _map_type("DECIMAL NOT NULL", "postgresql") == "NUMERIC(18, 2) NOT NULL"
    assert _map_type("BOOL NOT NULL DEFAULT 1", "postgresql") == "BOOLEAN NOT NULL DEFAULT TRUE"
    assert _map_type("BOOL NOT NULL DEFAULT 0", "sqlite") == "INTEGER NOT NULL DEFAULT 0"
    assert _map_type("TEXT NOT NULL UNIQUE", "mysql") == "VARCHAR(255) NOT NULL UNIQUE"


def test_map_type_mysql_text_keys_and_defaults():
    status = "TEXT NOT NULL DEFAULT 'Pending' CHECK (status IN ('Pending', 'Shipped'))"
    assert _map_type(status, "mysql") == "VARCHAR(255) NOT NULL DEFAULT 'Pending' CHECK (status IN ('Pending', 'Shipped'))"
    assert _map_type("TEXT NOT NULL", "mysql", in_key=True) == "VARCHAR(255) NOT NULL"
    assert _map_type("TEXT NOT NULL", "mysql") == "TEXT NOT NULL"
    assert _map_type("TEXT NOT NULL", "sqlite", in_key=True) == "TEXT NOT NULL"


def test_create_table_widens_composite_key_columns_on_mysql():
    class Cursor:
        def execute(self, query):
            self.query = query

    cur = Cursor()
    _create_table(cur, "review_table", {
        "id": "INTEGER PRIMARY KEY AUTOINCREMENT",
        "customer_email": "TEXT NOT NULL",
        "comment": "TEXT",
        "product_id": "INTEGER NOT NULL",
        "UNIQUE": ["product_id", "customer_email"],
    }, "mysql")
    assert "customer_email VARCHAR(255) NOT NULL" in cur.query
    assert "comment TEXT" in cur.query
    assert "UNIQUE (product_id, customer_email)" in cur.query
