"""Books Routes: validate, pre-check, call the repository, shape the response.

Invariants:
    - Validation runs before any store access; failures are 400 with every bad field listed
    - Create/update run an isbn uniqueness pre-check (409) before writing; the
      store's UNIQUE constraint stays as the fallback
    - Missing rows are 404 "Book with ID <id> not found"
    - PUT and PATCH share update_book: fields omitted from the body are left unchanged
    - /search is registered before /{book_id} so it is never captured as an id

Design Decisions:
    - Path, query and body arrive raw and go through core/book_validation, so every
      400 has the same {field, message, rejectedValue} shape
    - BookRepository built per request from the executor on app.state (get_db)
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status

from app.core.book_validation import (
    validate_book_id,
    validate_create,
    validate_list_query,
    validate_search_query,
    validate_update,
)
from app.core.errors import ConflictError, NotFoundError
from app.core.repository_protocols import QueryExecutor
from app.infrastructure.database import get_db
from app.services.book_repository import BookRepository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/books", tags=["books"])

ISBN_CONFLICT = "A book with this ISBN already exists"


def get_book_repository(
    db: QueryExecutor = Depends(get_db),
) -> BookRepository:
    return BookRepository(db)


async def _ensure_isbn_free(
    repo: BookRepository, isbn: str | None, book_id: int | None = None,
) -> None:
    """Raise ConflictError if a different book already holds `isbn`."""
    if not isbn:
        return
    holder = await repo.find_by_isbn(isbn)
    if holder is not None and holder["id"] != book_id:
        raise ConflictError(ISBN_CONFLICT, details={"isbn": isbn})


@router.get("")
async def list_books(
    request: Request, repo: BookRepository = Depends(get_book_repository),
):
    """Paginated, filtered, sorted list. Always 200, even when empty."""
    query = validate_list_query(request.query_params)
    data, pagination = await repo.find_all(query)
    return {"success": True, "data": data, "pagination": pagination}


@router.get("/search")
async def search_books(
    request: Request, repo: BookRepository = Depends(get_book_repository),
):
    term = validate_search_query(request.query_params)
    data = await repo.search(term)
    return {"success": True, "count": len(data), "data": data}


@router.get("/{book_id}")
async def get_book(
    book_id: str, repo: BookRepository = Depends(get_book_repository),
):
    parsed_id = validate_book_id(book_id)
    book = await repo.find_by_id(parsed_id)
    if book is None:
        raise NotFoundError.for_book(parsed_id)
    return {"success": True, "data": book}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_book(
    payload: dict[str, Any] | None = Body(None),
    repo: BookRepository = Depends(get_book_repository),
):
    book = validate_create(payload or {})
    await _ensure_isbn_free(repo, book.isbn)
    created = await repo.create(book.model_dump())
    logger.info("Book created", extra={"book_id": created["id"]})
    return {
        "success": True,
        "message": "Book created successfully",
        "data": created,
    }


@router.api_route("/{book_id}", methods=["PUT", "PATCH"])
async def update_book(
    book_id: str,
    payload: dict[str, Any] | None = Body(None),
    repo: BookRepository = Depends(get_book_repository),
):
    """Partial update for both PUT and PATCH."""
    parsed_id, fields = validate_update(book_id, payload or {})
    existing = await repo.find_by_id(parsed_id)
    if existing is None:
        raise NotFoundError.for_book(parsed_id)

    isbn = fields.get("isbn")
    if isbn and isbn != existing["isbn"]:
        await _ensure_isbn_free(repo, isbn, parsed_id)

    updated = await repo.update(parsed_id, fields)
    if updated is None:
        raise NotFoundError.for_book(parsed_id)
    logger.info(
        f"Book updated ({', '.join(sorted(fields)) or 'no fields'})",
        extra={"book_id": parsed_id},
    )
    return {
        "success": True,
        "message": "Book updated successfully",
        "data": updated,
    }


@router.delete("/{book_id}")
async def delete_book(
    book_id: str, repo: BookRepository = Depends(get_book_repository),
):
    parsed_id = validate_book_id(book_id)
    if not await repo.delete(parsed_id):
        raise NotFoundError.for_book(parsed_id)
    logger.info("Book deleted", extra={"book_id": parsed_id})
    return {
        "success": True,
        "message": f"Book with ID {parsed_id} deleted successfully",
    }
