"""Boundary Protocols: contracts between core and shell.

Invariants:
    - Repositories never open connections themselves: they receive a QueryExecutor
    - QueryExecutor.query either returns rows or raises a BooksApiError subclass
      (store failures are translated inside the executor, once)

Design Decisions:
    - Protocol over ABC: structural subtyping, so tests can pass any object with
      an async query() (ADR: in-memory fakes without inheritance)
"""

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from sqlalchemy.sql import Executable


class QueryExecutor(Protocol):
    """Pooled SQL execution capability, constructed once at process start."""

    async def query(self, statement: "Executable") -> list[dict[str, Any]]:
        """Run one parameterized statement in its own transaction; return rows as dicts."""
        ...

    async def health_check(self) -> bool: ...
