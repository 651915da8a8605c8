import json
import math
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from flask import current_app

CENT = Decimal("0.01")


def utcnow() -> str:
    """UTC timestamp in a lexicographically sortable ISO-8601 form."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def to_money(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def clean_text(value: Optional[str]) -> Optional[str]:
    """Trim a nullable text value; blank strings become None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass
class PaginationMetadata:
    total_item_count: int
    page_size: int
    current_page: int
    total_page_count: int = 0

    def __post_init__(self) -> None:
        self.total_page_count = math.ceil(self.total_item_count / self.page_size) if self.page_size else 0

    @property
    def offset(self) -> int:
        return self.page_size * (self.current_page - 1)

    def header(self) -> str:
        return json.dumps(asdict(self))


def clamp_paging(page_number: Optional[int], page_size: Optional[int]) -> tuple[int, int]:
    """Floor the page number to 1 and keep the page size within 1..MAX_PAGE_SIZE."""
    max_size = current_app.config.get("MAX_PAGE_SIZE", 20)
    default_size = current_app.config.get("DEFAULT_PAGE_SIZE", 10)
    page_number = page_number if page_number and page_number > 0 else 1
    if page_size is None:
        page_size = default_size
    page_size = max(1, min(page_size, max_size))
    return page_number, page_size
