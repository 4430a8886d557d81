"""Book Repository: SQL behaviour against an in-memory SQLite database.

Invariants:
    - create persists all mutable columns and returns generated id + timestamps
    - update writes only supplied fields; empty input is a no-op; unknown id is None
    - find_all filters, sorts and paginates with a matching COUNT
    - search is case-insensitive over title, author, description, ordered by title
    - duplicate isbn rejected by the store's UNIQUE constraint as ConflictError
"""

import asyncio
from datetime import datetime

import pytest

from app.core.domain_types import SortField, SortOrder
from app.core.errors import ConflictError
from app.schemas.book import BookListQuery


async def _seed(repository, **overrides):
    fields = {"title": "Untitled", "author": "Anonymous", **overrides}
    return await repository.create(fields)


@pytest.fixture
async def library(repository):
    """Five books with distinct titles, prices and genres."""
    return [
        await _seed(repository, title="War and Peace", author="Leo Tolstoy",
                    genre="Novel", price=799.0, isbn="978-5-17-090000-1"),
        await _seed(repository, title="Crime and Punishment", author="Fyodor Dostoevsky",
                    genre="Novel", price=499.0, description="A student named Raskolnikov"),
        await _seed(repository, title="1984", author="George Orwell",
                    genre="Dystopia", price=399.0, in_stock=False),
        await _seed(repository, title="Animal Farm", author="George Orwell",
                    genre="Political satire", price=199.0),
        await _seed(repository, title="The Hobbit", author="J. R. R. Tolkien",
                    genre="Fantasy", price=549.0, in_stock=False),
    ]


# ─── create / find ───────────────────────────────────────────────

async def test_create_returns_persisted_row(repository):
    book = await repository.create({
        "title": "1984", "author": "George Orwell", "isbn": "978-0-452-28423-4",
        "publication_year": 1949, "price": 9.99,
    })
    assert book["id"] > 0
    assert book["title"] == "1984"
    assert book["isbn"] == "978-0-452-28423-4"
    assert book["publication_year"] == 1949
    assert book["price"] == pytest.approx(9.99)
    assert book["in_stock"] is True
    assert book["genre"] is None
    assert book["pages"] is None
    assert isinstance(book["created_at"], datetime)
    assert isinstance(book["updated_at"], datetime)


async def test_create_assigns_fresh_ids(repository):
    first = await _seed(repository)
    second = await _seed(repository)
    assert second["id"] != first["id"]


async def test_create_keeps_explicit_in_stock_false(repository):
    book = await _seed(repository, in_stock=False)
    assert book["in_stock"] is False


async def test_find_by_id_round_trips_create(repository):
    created = await _seed(repository, genre="Essay", pages=120)
    assert await repository.find_by_id(created["id"]) == created


async def test_find_by_id_missing_returns_none(repository):
    assert await repository.find_by_id(999) is None


async def test_find_by_isbn(repository):
    created = await _seed(repository, isbn="0-306-40615-2")
    assert (await repository.find_by_isbn("0-306-40615-2"))["id"] == created["id"]
    assert await repository.find_by_isbn("0-000-00000-0") is None


async def test_duplicate_isbn_rejected_by_store(repository):
    await _seed(repository, isbn="0-306-40615-2")
    with pytest.raises(ConflictError) as exc_info:
        await _seed(repository, title="Other", isbn="0-306-40615-2")
    assert exc_info.value.http_status == 409
    assert exc_info.value.details


async def test_null_isbns_do_not_collide(repository):
    await _seed(repository, isbn=None)
    await _seed(repository, isbn=None)


# ─── update ──────────────────────────────────────────────────────

async def test_update_writes_only_supplied_fields(repository):
    created = await _seed(repository, genre="Novel", price=10.0)
    updated = await repository.update(created["id"], {"price": 12.5})
    assert updated["price"] == pytest.approx(12.5)
    assert updated["genre"] == "Novel"
    assert updated["title"] == created["title"]
    assert updated["created_at"] == created["created_at"]


async def test_update_with_no_fields_returns_existing_row(repository):
    created = await _seed(repository)
    assert await repository.update(created["id"], {}) == created


async def test_update_ignores_non_column_keys(repository):
    created = await _seed(repository)
    assert await repository.update(created["id"], {"id": 500, "created_at": "x"}) == created


async def test_update_can_null_optional_field(repository):
    created = await _seed(repository, isbn="0-306-40615-2")
    updated = await repository.update(created["id"], {"isbn": None})
    assert updated["isbn"] is None


async def test_update_refreshes_updated_at_but_not_created_at(repository):
    created = await _seed(repository)
    # CURRENT_TIMESTAMP has one-second resolution on SQLite
    await asyncio.sleep(1.1)
    await repository.update(created["id"], {"title": "Renamed"})
    reread = await repository.find_by_id(created["id"])
    assert reread["updated_at"] > created["updated_at"]
    assert reread["created_at"] == created["created_at"]


async def test_update_missing_row_returns_none(repository):
    assert await repository.update(404, {"title": "Nope"}) is None


# ─── delete ──────────────────────────────────────────────────────

async def test_delete_existing_row(repository):
    created = await _seed(repository)
    assert await repository.delete(created["id"]) is True
    assert await repository.find_by_id(created["id"]) is None


async def test_delete_missing_row(repository):
    assert await repository.delete(12345) is False


# ─── search ──────────────────────────────────────────────────────

async def test_search_matches_title_case_insensitively(repository, library):
    results = await repository.search("hobbit")
    assert [b["title"] for b in results] == ["The Hobbit"]


async def test_search_matches_author_and_orders_by_title(repository, library):
    results = await repository.search("orwell")
    assert [b["title"] for b in results] == ["1984", "Animal Farm"]


async def test_search_matches_description(repository, library):
    results = await repository.search("raskolnikov")
    assert [b["title"] for b in results] == ["Crime and Punishment"]


async def test_search_without_match_is_empty(repository, library):
    assert await repository.search("zzqxv-no-such-book") == []


# ─── find_all ────────────────────────────────────────────────────

async def test_find_all_paginates_with_count(repository, library):
    rows, pagination = await repository.find_all(BookListQuery(page=1, limit=2))
    assert len(rows) == 2
    assert pagination == {
        "currentPage": 1, "totalPages": 3, "totalItems": 5, "itemsPerPage": 2,
    }


async def test_find_all_last_page_is_partial(repository, library):
    rows, _ = await repository.find_all(BookListQuery(page=3, limit=2))
    assert len(rows) == 1


async def test_find_all_page_beyond_total_is_empty(repository, library):
    rows, pagination = await repository.find_all(BookListQuery(page=10, limit=2))
    assert rows == []
    assert pagination["totalItems"] == 5


async def test_find_all_pages_do_not_overlap(repository, library):
    seen = []
    for page in (1, 2, 3):
        rows, _ = await repository.find_all(BookListQuery(page=page, limit=2))
        seen.extend(b["id"] for b in rows)
    assert sorted(seen) == sorted(b["id"] for b in library)


@pytest.mark.parametrize("order, expected", [
    (SortOrder.ASC, [199.0, 399.0, 499.0, 549.0, 799.0]),
    (SortOrder.DESC, [799.0, 549.0, 499.0, 399.0, 199.0]),
])
async def test_find_all_sorts_by_price(repository, library, order, expected):
    rows, _ = await repository.find_all(
        BookListQuery(sort_by=SortField.PRICE, sort_order=order),
    )
    assert [b["price"] for b in rows] == expected


async def test_find_all_sorts_by_title(repository, library):
    rows, _ = await repository.find_all(
        BookListQuery(sort_by=SortField.TITLE, sort_order=SortOrder.ASC),
    )
    titles = [b["title"] for b in rows]
    assert titles == sorted(titles)


async def test_find_all_filters_genre_substring_case_insensitive(repository, library):
    rows, pagination = await repository.find_all(BookListQuery(genre="novel"))
    assert {b["title"] for b in rows} == {"War and Peace", "Crime and Punishment"}
    assert pagination["totalItems"] == 2


async def test_find_all_combines_filters(repository, library):
    rows, pagination = await repository.find_all(
        BookListQuery(author="orwell", in_stock=True),
    )
    assert [b["title"] for b in rows] == ["Animal Farm"]
    assert pagination["totalItems"] == 1
    assert pagination["totalPages"] == 1


async def test_find_all_in_stock_false(repository, library):
    rows, _ = await repository.find_all(BookListQuery(in_stock=False))
    assert {b["title"] for b in rows} == {"1984", "The Hobbit"}


async def test_find_all_treats_wildcards_literally(repository, library):
    rows, pagination = await repository.find_all(BookListQuery(genre="%"))
    assert rows == []
    assert pagination["totalPages"] == 0


async def test_find_all_empty_table(repository):
    rows, pagination = await repository.find_all(BookListQuery())
    assert rows == []
    assert pagination == {
        "currentPage": 1, "totalPages": 0, "totalItems": 0, "itemsPerPage": 10,
    }
