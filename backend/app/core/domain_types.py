"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - BookId is a positive integer assigned by the store
    - SortField lists the ONLY columns a client may sort by
    - MUTABLE_FIELDS lists the ONLY columns a client may write

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import Any, NewType


# ─── Identity Types ──────────────────────────────────────────────

BookId = NewType("BookId", int)

# A persisted book row as returned by the repository
BookRecord = dict[str, Any]


# ─── Enums ───────────────────────────────────────────────────────

class SortField(str, Enum):
    """Columns the list endpoint may order by."""
    ID = "id"
    TITLE = "title"
    AUTHOR = "author"
    PUBLICATION_YEAR = "publication_year"
    PRICE = "price"
    CREATED_AT = "created_at"


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


# ─── Field Sets ──────────────────────────────────────────────────

MUTABLE_FIELDS: tuple[str, ...] = (
    "title",
    "author",
    "isbn",
    "publication_year",
    "genre",
    "pages",
    "description",
    "price",
    "in_stock",
)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
