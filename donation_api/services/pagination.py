"""Page/limit handling shared by the public feeds."""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from donation_api.core import errors

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# Keeps the OFFSET inside a signed 64-bit integer
MAX_PAGE = 2 ** 63 // MAX_LIMIT


def _parse_int(raw: Optional[str]) -> int:
    """Leading-integer parse; anything unparseable counts as 0 (i.e. "use the default")."""
    if raw is None:
        return 0
    raw = raw.strip()
    sign = -1 if raw.startswith("-") else 1
    digits = raw.lstrip("+-")
    end = 0
    while end < len(digits) and digits[end] in "0123456789":
        end += 1
    # 20 significant digits already exceed any accepted page or limit
    number = digits[:end].lstrip("0")[:20]
    return sign * int(number) if number else 0


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def meta(self, total_count: int) -> Dict[str, Any]:
        total_pages = math.ceil(total_count / self.limit)
        return {
            "page": self.page,
            "limit": self.limit,
            "total_count": total_count,
            "total_pages": total_pages,
            "has_next": self.page < total_pages,
            "has_prev": self.page > 1,
        }


def parse_pagination(page: Optional[str], limit: Optional[str]) -> Pagination:
    """Build a :class:`Pagination` from raw query-string values.

    Missing, zero or non-numeric values fall back to page 1 / limit 10,
    the limit is clamped to 100, and a negative or absurdly large page is
    rejected.
    """
    page_value = _parse_int(page) or DEFAULT_PAGE
    limit_value = _parse_int(limit) or DEFAULT_LIMIT

    if page_value < 1 or page_value > MAX_PAGE:
        raise errors.validation_error(
            "Invalid pagination parameters", {"page": page_value, "limit": limit_value}
        )
    limit_value = min(max(limit_value, 1), MAX_LIMIT)
    return Pagination(page=page_value, limit=limit_value)
