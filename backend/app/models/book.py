"""Book ORM: the books table, its indexes, and the updated_at trigger.

Invariants:
    - id is a generated integer primary key, never written by the application
    - isbn is UNIQUE; NULLs do not collide
    - created_at/updated_at are server defaults; updated_at is refreshed by a
      BEFORE/AFTER UPDATE trigger owned by the database, not by application code
    - Indexes on title, author, genre, isbn

Design Decisions:
    - Trigger DDL attached with execute_if(dialect=...): PostgreSQL in production,
      SQLite for the in-memory test database
    - price as NUMERIC(10, 2) read back as float: JSON-friendly without a custom encoder
"""

from datetime import datetime

from sqlalchemy import (
    DDL, Boolean, DateTime, Index, Integer, Numeric, String, Text, event, func, true,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Book(Base):
    """A single book row."""
    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    isbn: Mapped[str | None] = mapped_column(String(20), unique=True)
    publication_year: Mapped[int | None] = mapped_column(Integer)
    genre: Mapped[str | None] = mapped_column(String(100))
    pages: Mapped[int | None] = mapped_column(Integer)
    description: Mapped[str | None] = mapped_column(Text)
    price: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False))
    in_stock: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=true(),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(),
    )

    __table_args__ = (
        Index("idx_books_title", "title"),
        Index("idx_books_author", "author"),
        Index("idx_books_genre", "genre"),
        Index("idx_books_isbn", "isbn"),
    )


# ─── updated_at trigger ─────────────────────────────────────────

_PG_FUNCTION = DDL("""
CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS TRIGGER AS $$
BEGIN
    NEW.updated_at = CURRENT_TIMESTAMP;
    RETURN NEW;
END;
$$ LANGUAGE plpgsql
""")

_PG_DROP_TRIGGER = DDL("DROP TRIGGER IF EXISTS update_books_updated_at ON books")

_PG_TRIGGER = DDL("""
CREATE TRIGGER update_books_updated_at
    BEFORE UPDATE ON books
    FOR EACH ROW
    EXECUTE FUNCTION update_updated_at_column()
""")

# SQLite cannot assign NEW in a BEFORE trigger; recursive_triggers is off by
# default, so the inner UPDATE does not re-fire this trigger. SQLite RETURNING
# does not see AFTER-trigger writes: the refreshed updated_at shows up in an
# UPDATE ... RETURNING response only on PostgreSQL; later reads see it everywhere.
_SQLITE_TRIGGER = DDL("""
CREATE TRIGGER IF NOT EXISTS update_books_updated_at
AFTER UPDATE ON books
FOR EACH ROW
BEGIN
    UPDATE books SET updated_at = CURRENT_TIMESTAMP WHERE id = NEW.id;
END
""")

for _ddl in (_PG_FUNCTION, _PG_DROP_TRIGGER, _PG_TRIGGER):
    event.listen(Book.__table__, "after_create", _ddl.execute_if(dialect="postgresql"))
event.listen(Book.__table__, "after_create", _SQLITE_TRIGGER.execute_if(dialect="sqlite"))
