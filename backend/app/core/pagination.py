"""Pagination envelope for list responses."""

import math


def build_pagination(page: int, limit: int, total: int) -> dict[str, int]:
    """{currentPage, totalPages, totalItems, itemsPerPage}; zero items means zero pages."""
    return {
        "currentPage": page,
        "totalPages": math.ceil(total / limit),
        "totalItems": total,
        "itemsPerPage": limit,
    }
