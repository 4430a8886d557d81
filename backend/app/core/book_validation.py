"""Book Input Validation: pure per-endpoint validators producing typed parameters.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - On failure they raise BadRequestError whose details list EVERY failed field,
      in declaration order, as {field, message, rejectedValue}
    - validate_update collects path and body failures together
    - Returned update dicts contain only keys the client explicitly sent

Design Decisions:
    - Rules are declared once on the Pydantic schemas; messages are declared here,
      keyed by client-facing field name, so the two stay independently readable
    - Pure functions over FastAPI auto-validation: routes get the same 400 envelope
      for path, query and body problems, and the validators are testable without HTTP
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from app.core.domain_types import MAX_LIMIT, SortField
from app.core.errors import BadRequestError
from app.schemas.book import (
    BookCreate,
    BookIdParam,
    BookListQuery,
    BookSearchQuery,
    BookUpdate,
    MIN_PUBLICATION_YEAR,
    max_publication_year,
)

VALIDATION_FAILED = "Validation failed"


def _field_messages() -> dict[str, str]:
    """Client-facing message per field. Built per call: the year bound moves."""
    sort_fields = ", ".join(f.value for f in SortField)
    return {
        "id": "ID must be a positive integer",
        "title": "Title must be a non-empty string of at most 255 characters",
        "author": "Author must be a non-empty string of at most 255 characters",
        "isbn": "ISBN must be 10-20 characters of digits, hyphens or X",
        "publication_year": (
            f"Publication year must be between {MIN_PUBLICATION_YEAR} "
            f"and {max_publication_year()}"
        ),
        "genre": "Genre must be at most 100 characters",
        "pages": "Pages must be between 1 and 50000",
        "description": "Description must be at most 5000 characters",
        "price": "Price must be between 0 and 1000000",
        "in_stock": "in_stock must be a boolean",
        "page": "Page must be a positive integer",
        "limit": f"Limit must be between 1 and {MAX_LIMIT}",
        "sortBy": f"sortBy must be one of: {sort_fields}",
        "sortOrder": "sortOrder must be ASC or DESC",
        "inStock": "inStock must be true or false",
        "q": "Search query is required and must be 2-100 characters",
    }


def collect_field_errors(errors: list[dict]) -> list[dict[str, Any]]:
    """Convert Pydantic error dicts into {field, message, rejectedValue} entries.

    One entry per field: a field reported twice keeps its first failure.
    """
    messages = _field_messages()
    collected: list[dict[str, Any]] = []
    seen: set[str] = set()
    for err in errors:
        field = ".".join(str(part) for part in err.get("loc", ())) or "body"
        if field in seen:
            continue
        seen.add(field)
        collected.append({
            "field": field,
            "message": messages.get(field, err.get("msg", "Invalid value")),
            "rejectedValue": (
                None if err.get("type") == "missing" else err.get("input")
            ),
        })
    return collected


def _parse(model: type[BaseModel], data: Any) -> tuple[BaseModel | None, list[dict]]:
    try:
        return model.model_validate(data), []
    except ValidationError as e:
        return None, collect_field_errors(e.errors())


def _raise_if(errors: list[dict]) -> None:
    if errors:
        raise BadRequestError(VALIDATION_FAILED, details=errors)


# ─── Per-endpoint validators ─────────────────────────────────────

def validate_book_id(raw: Any) -> int:
    """Path parameter id: integer >= 1."""
    parsed, errors = _parse(BookIdParam, {"id": raw})
    _raise_if(errors)
    return parsed.id


def validate_create(payload: Any) -> BookCreate:
    """POST body."""
    parsed, errors = _parse(BookCreate, payload)
    _raise_if(errors)
    return parsed


def validate_update(raw_id: Any, payload: Any) -> tuple[int, dict[str, Any]]:
    """PUT/PATCH path + body. Returns (id, explicitly supplied fields)."""
    parsed_id, id_errors = _parse(BookIdParam, {"id": raw_id})
    parsed_body, body_errors = _parse(BookUpdate, payload)
    _raise_if(id_errors + body_errors)
    return parsed_id.id, parsed_body.model_dump(exclude_unset=True)


def validate_list_query(params: Mapping[str, Any]) -> BookListQuery:
    """GET /api/books query string."""
    parsed, errors = _parse(BookListQuery, dict(params))
    _raise_if(errors)
    return parsed


def validate_search_query(params: Mapping[str, Any]) -> str:
    """GET /api/books/search query string. Returns the trimmed term."""
    parsed, errors = _parse(BookSearchQuery, dict(params))
    _raise_if(errors)
    return parsed.q
