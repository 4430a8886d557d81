"""Book Repository: SQL construction for every books operation, run through an injected executor.

Invariants:
    - Every statement is a SQLAlchemy Core construct with bound parameters;
      no client value is ever formatted into SQL text
    - ORDER BY columns come only from SORT_COLUMNS; SET columns only from MUTABLE_FIELDS
    - Absence is a return value (None / False), never an exception
    - find_all() runs a second COUNT query with the same predicate and no LIMIT/OFFSET
    - update() with no supplied fields returns the existing row without writing

Design Decisions:
    - Executor injected through the constructor (QueryExecutor protocol): the same
      repository runs against the PostgreSQL pool and the SQLite test engine
    - Sort ties broken by id in the same direction, so pages never overlap
    - Substring filters use icontains(autoescape=True): % and _ in client input match literally
"""

from typing import Any

from sqlalchemy import asc, delete, desc, func, insert, or_, select, update
from sqlalchemy.sql import Select

from app.core.domain_types import (
    MUTABLE_FIELDS, BookId, BookRecord, SortField, SortOrder,
)
from app.core.pagination import build_pagination
from app.core.repository_protocols import QueryExecutor
from app.models.book import Book
from app.schemas.book import BookListQuery


books = Book.__table__

SORT_COLUMNS = {
    SortField.ID: books.c.id,
    SortField.TITLE: books.c.title,
    SortField.AUTHOR: books.c.author,
    SortField.PUBLICATION_YEAR: books.c.publication_year,
    SortField.PRICE: books.c.price,
    SortField.CREATED_AT: books.c.created_at,
}


def _filter_conditions(query: BookListQuery) -> list:
    conditions = []
    if query.genre:
        conditions.append(books.c.genre.icontains(query.genre, autoescape=True))
    if query.author:
        conditions.append(books.c.author.icontains(query.author, autoescape=True))
    if query.in_stock is not None:
        conditions.append(books.c.in_stock == query.in_stock)
    return conditions


def _where(stmt: Select, conditions: list) -> Select:
    return stmt.where(*conditions) if conditions else stmt


class BookRepository:
    """Books persistence over a QueryExecutor."""

    def __init__(self, executor: QueryExecutor):
        self._db = executor

    async def find_all(
        self, query: BookListQuery,
    ) -> tuple[list[BookRecord], dict[str, int]]:
        """One page of books plus the pagination envelope."""
        conditions = _filter_conditions(query)
        direction = asc if query.sort_order is SortOrder.ASC else desc
        page_stmt = (
            _where(select(books), conditions)
            .order_by(direction(SORT_COLUMNS[query.sort_by]), direction(books.c.id))
            .limit(query.limit)
            .offset(query.offset)
        )
        rows = await self._db.query(page_stmt)

        count_stmt = _where(
            select(func.count().label("total")).select_from(books), conditions,
        )
        total = (await self._db.query(count_stmt))[0]["total"]
        return rows, build_pagination(query.page, query.limit, total)

    async def find_by_id(self, book_id: BookId) -> BookRecord | None:
        rows = await self._db.query(select(books).where(books.c.id == book_id))
        return rows[0] if rows else None

    async def find_by_isbn(self, isbn: str) -> BookRecord | None:
        rows = await self._db.query(select(books).where(books.c.isbn == isbn))
        return rows[0] if rows else None

    async def create(self, fields: dict[str, Any]) -> BookRecord:
        """Insert all mutable columns; missing optionals become NULL."""
        values = {name: fields.get(name) for name in MUTABLE_FIELDS}
        if values["in_stock"] is None:
            values["in_stock"] = True
        rows = await self._db.query(
            insert(books).values(**values).returning(*books.c),
        )
        return rows[0]

    async def update(
        self, book_id: BookId, fields: dict[str, Any],
    ) -> BookRecord | None:
        """Partial update: only keys present in `fields` are written."""
        existing = await self.find_by_id(book_id)
        if existing is None:
            return None

        values = {name: fields[name] for name in MUTABLE_FIELDS if name in fields}
        if not values:
            return existing

        rows = await self._db.query(
            update(books)
            .where(books.c.id == book_id)
            .values(**values)
            .returning(*books.c),
        )
        # Row may have been deleted between the read and the write
        return rows[0] if rows else None

    async def delete(self, book_id: BookId) -> bool:
        rows = await self._db.query(
            delete(books).where(books.c.id == book_id).returning(books.c.id),
        )
        return bool(rows)

    async def search(self, term: str) -> list[BookRecord]:
        """Case-insensitive substring match on title, author or description."""
        stmt = (
            select(books)
            .where(or_(
                books.c.title.icontains(term, autoescape=True),
                books.c.author.icontains(term, autoescape=True),
                books.c.description.icontains(term, autoescape=True),
            ))
            .order_by(books.c.title.asc())
        )
        return await self._db.query(stmt)
