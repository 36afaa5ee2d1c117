from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, Optional, Sequence, TypeVar

from ..core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT

T = TypeVar("T")


def _as_positive_int(value: Any) -> Optional[int]:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed >= 1 else None


@dataclass(frozen=True)
class Pagination:
    """Offset/limit arithmetic shared by every list endpoint."""

    page: int = 1
    limit: int = DEFAULT_PAGE_LIMIT

    @classmethod
    def from_query(
        cls,
        page: Any = None,
        limit: Any = None,
        *,
        default_limit: int = DEFAULT_PAGE_LIMIT,
        max_limit: int = MAX_PAGE_LIMIT,
    ) -> "Pagination":
        # Bad or missing values fall back to defaults, limit is clamped.
        p = _as_positive_int(page) or 1
        lim = _as_positive_int(limit) or default_limit
        return cls(page=p, limit=min(lim, max_limit))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def meta(self, total: int) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": int(total),
            "totalPages": math.ceil(total / self.limit) if self.limit else 0,
            "hasNext": (self.offset + self.limit) < total,
            "hasPrev": self.page > 1,
        }


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    total: int
    pagination: Pagination

    def meta(self) -> dict:
        return self.pagination.meta(self.total)
