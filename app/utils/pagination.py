"""Chuẩn hoá tham số phân trang cho các endpoint danh sách."""

from typing import Any, Tuple

MAX_PAGE_SIZE = 100


def _to_int(value: Any, fallback: int) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return fallback


def clamp_paging(page: Any, limit: Any, default_limit: int = 20) -> Tuple[int, int]:
    """Trả về (page, limit) với page >= 1 và 1 <= limit <= 100."""
    page_value = max(_to_int(page, 1) or 1, 1)
    limit_value = min(max(_to_int(limit, default_limit) or default_limit, 1), MAX_PAGE_SIZE)
    return page_value, limit_value
