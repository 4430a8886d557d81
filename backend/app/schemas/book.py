"""Book Schemas: Pydantic models with field-level validation for API boundaries.

Invariants:
    - Strings are stripped before length rules apply
    - Optional fields accept absence or null; title/author/in_stock never accept null
    - publication_year upper bound is computed per call (currentYear + 1), never frozen at import
    - BookListQuery field names are the client-facing query names (sortBy, sortOrder, inStock)

Design Decisions:
    - Pydantic collects every field failure in declaration order, so one request
      reports all of its problems at once
    - StrictBool for in_stock: "yes", 1 or "true" in a JSON body are rejected
    - Numeric fields stay lax ("1949" is accepted) but refuse JSON booleans
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator

from app.core.domain_types import (
    DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, SortField, SortOrder,
)

ISBN_PATTERN = r"^[0-9Xx-]+$"
MIN_PUBLICATION_YEAR = 1000


def max_publication_year() -> int:
    return datetime.now(timezone.utc).year + 1


class _BookFields(BaseModel):
    """Optional columns shared by create and update payloads."""
    model_config = ConfigDict(str_strip_whitespace=True)

    isbn: str | None = Field(
        None, min_length=10, max_length=20, pattern=ISBN_PATTERN,
    )
    publication_year: int | None = None
    genre: str | None = Field(None, max_length=100)
    pages: int | None = Field(None, ge=1, le=50_000)
    description: str | None = Field(None, max_length=5000)
    price: float | None = Field(None, ge=0, le=1_000_000)

    @field_validator("publication_year", "pages", "price", mode="before")
    @classmethod
    def reject_bool(cls, v):
        # bool is an int subclass; lax mode would store true as 1
        if isinstance(v, bool):
            raise ValueError("must be a number, not a boolean")
        return v

    @field_validator("publication_year")
    @classmethod
    def check_publication_year(cls, v: int | None) -> int | None:
        if v is not None and not MIN_PUBLICATION_YEAR <= v <= max_publication_year():
            raise ValueError("publication year out of range")
        return v

    @field_validator("price")
    @classmethod
    def round_price(cls, v: float | None) -> float | None:
        # NUMERIC(10, 2) column
        return round(v, 2) if v is not None else None


class BookCreate(_BookFields):
    """Book creation: title and author required."""
    title: str = Field(min_length=1, max_length=255)
    author: str = Field(min_length=1, max_length=255)
    in_stock: StrictBool = True


class BookUpdate(_BookFields):
    """Partial book update: every field may be omitted."""
    title: str | None = Field(None, min_length=1, max_length=255)
    author: str | None = Field(None, min_length=1, max_length=255)
    in_stock: StrictBool | None = None

    @field_validator("title", "author", "in_stock", mode="before")
    @classmethod
    def reject_null(cls, v):
        # Only runs for explicitly supplied values; omitted fields keep the default
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class BookIdParam(BaseModel):
    id: int = Field(ge=1)


class BookListQuery(BaseModel):
    """Query string for GET /api/books."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    page: int = Field(DEFAULT_PAGE, ge=1)
    limit: int = Field(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)
    sort_by: SortField = Field(SortField.CREATED_AT, alias="sortBy")
    sort_order: SortOrder = Field(SortOrder.DESC, alias="sortOrder")
    genre: str | None = None
    author: str | None = None
    in_stock: bool | None = Field(None, alias="inStock")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @field_validator("sort_order", mode="before")
    @classmethod
    def upper_sort_order(cls, v):
        return v.upper() if isinstance(v, str) else v

    @field_validator("in_stock", mode="before")
    @classmethod
    def parse_in_stock(cls, v):
        if isinstance(v, bool):
            return v
        if v in ("true", "false"):
            return v == "true"
        raise ValueError("expected 'true' or 'false'")

    @field_validator("genre", "author")
    @classmethod
    def blank_filter_is_absent(cls, v: str | None) -> str | None:
        return v or None


class BookSearchQuery(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    q: str = Field(min_length=2, max_length=100)
