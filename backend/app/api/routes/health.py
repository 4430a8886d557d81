"""Service Metadata & Health: GET / and GET /health.

Invariants:
    - GET / touches no external state
    - GET /health is always 200; database connectivity is reported, not enforced
"""

import logging

from fastapi import APIRouter, Depends

from app.config import get_settings
from app.core.domain_types import MAX_LIMIT, SortField
from app.core.errors import utc_timestamp
from app.core.repository_protocols import QueryExecutor
from app.infrastructure.database import get_db

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/")
async def service_info():
    """Endpoint and query parameter overview."""
    settings = get_settings()
    return {
        "success": True,
        "message": f"{settings.app_name}: REST API for managing books",
        "version": settings.app_version,
        "endpoints": {
            "GET /api/books": "List books (pagination, filtering, sorting)",
            "GET /api/books/search?q=query": "Search books",
            "GET /api/books/{id}": "Get a book by ID",
            "POST /api/books": "Create a book",
            "PUT /api/books/{id}": "Update a book",
            "PATCH /api/books/{id}": "Partially update a book",
            "DELETE /api/books/{id}": "Delete a book",
        },
        "queryParams": {
            "page": "Page number (default: 1)",
            "limit": f"Items per page (default: 10, max: {MAX_LIMIT})",
            "sortBy": f"Sort field ({', '.join(f.value for f in SortField)})",
            "sortOrder": "Sort order (ASC, DESC)",
            "genre": "Filter by genre",
            "author": "Filter by author",
            "inStock": "Filter by availability (true/false)",
        },
    }


@router.get("/health")
async def health_check(db: QueryExecutor = Depends(get_db)):
    connected = await db.health_check()
    return {
        "success": True,
        "status": "OK",
        "database": "connected" if connected else "disconnected",
        "timestamp": utc_timestamp(),
    }
