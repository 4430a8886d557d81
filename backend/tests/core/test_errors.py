"""Error Hierarchy: status codes and the response envelope."""

from dataclasses import fields
from datetime import datetime

import pytest

from app.core.errors import (
    BadRequestError,
    ConflictError,
    ErrorContext,
    InternalError,
    NotFoundError,
    ServiceUnavailableError,
)


@pytest.mark.parametrize("error, status", [
    (BadRequestError("bad"), 400),
    (NotFoundError("missing"), 404),
    (ConflictError("dup"), 409),
    (InternalError(), 500),
    (ServiceUnavailableError(), 503),
])
def test_each_kind_has_fixed_status(error, status):
    assert error.http_status == status


def test_envelope_omits_details_when_absent():
    body = NotFoundError("Book with ID 3 not found").to_response()
    assert body["success"] is False
    assert body["error"] == "Book with ID 3 not found"
    assert "details" not in body
    datetime.fromisoformat(body["timestamp"])


def test_envelope_includes_structured_details():
    body = ConflictError("dup", details={"isbn": "1234567890"}).to_response()
    assert body["details"] == {"isbn": "1234567890"}


def test_timestamp_is_fixed_at_creation():
    error = BadRequestError("bad")
    assert error.to_response()["timestamp"] == error.timestamp.isoformat()
    assert error.timestamp.tzinfo is not None


def test_not_found_for_book_names_the_id():
    error = NotFoundError.for_book(42)
    assert error.message == "Book with ID 42 not found"
    assert error.context.book_id == 42


def test_defaults_for_server_errors():
    assert InternalError().message == "Internal server error"
    assert ServiceUnavailableError().message == "Database is unavailable"


def test_error_context_carries_only_timestamp_and_book_id():
    assert [f.name for f in fields(ErrorContext)] == ["timestamp", "book_id"]
    assert ErrorContext().book_id is None
