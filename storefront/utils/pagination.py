# storefront/utils/pagination.py
from typing import Tuple


def normalize_paging(page, limit, max_limit: int = 50, default_limit: int = 10) -> Tuple[int, int]:
    """Clamp page to >= 1 and limit to (0, max_limit]; bad values fall back to defaults."""
    try:
        p = int(page)
    except (TypeError, ValueError):
        p = 1
    try:
        ps = int(limit)
    except (TypeError, ValueError):
        ps = default_limit
    p = max(p, 1)
    ps = default_limit if ps <= 0 else min(ps, max_limit)
    return p, ps


def page_meta(total: int, page: int, limit: int) -> dict:
    return {"total": total, "page": page, "limit": limit}
