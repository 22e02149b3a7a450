"""
Standardized page/limit pagination for list endpoints.

Usage:
    from rest_api.routers._common.pagination import Pagination, get_pagination

    @router.get("/orders")
    def list_orders(
        pagination: Pagination = Depends(get_pagination),
        db: Session = Depends(get_db),
    ):
        orders, total = OrderQueryService(db).list_orders(offset=pagination.offset, limit=pagination.limit)
        return {"orders": orders, "pagination": pagination.to_dict(total=total)}
"""

from dataclasses import dataclass
from typing import Any

from fastapi import Query

from shared.config.constants import Limits


@dataclass
class Pagination:
    """
    Pagination parameters with validation.

    Attributes:
        page: 1-indexed page number
        limit: Maximum items per page (1 to max_limit)
        max_limit: Maximum allowed limit
    """

    page: int = 1
    limit: int = Limits.DEFAULT_PAGE_SIZE
    max_limit: int = Limits.MAX_PAGE_SIZE

    def __post_init__(self):
        """Validate and normalize values."""
        self.limit = min(max(1, self.limit), self.max_limit)
        self.page = max(1, self.page)

    @property
    def offset(self) -> int:
        """Number of rows to skip for the current page."""
        return (self.page - 1) * self.limit

    def total_pages(self, total: int) -> int:
        return (total + self.limit - 1) // self.limit

    def to_dict(self, total: int) -> dict[str, Any]:
        """
        Convert to the pagination block returned with order lists.

        Args:
            total: Total count of rows matching the filters
        """
        total_pages = self.total_pages(total)
        return {
            "current_page": self.page,
            "total_pages": total_pages,
            "total_orders": total,
            "has_next": self.page < total_pages,
            "has_prev": self.page > 1,
        }


def get_pagination(
    page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(
        default=Limits.DEFAULT_PAGE_SIZE,
        ge=1,
        le=Limits.MAX_PAGE_SIZE,
        description="Maximum number of items per page",
    ),
) -> Pagination:
    """
    FastAPI dependency for pagination.

    Usage:
        @router.get("/items")
        def list_items(pagination: Pagination = Depends(get_pagination)):
            ...
    """
    return Pagination(page=page, limit=limit)
