"""Schema Bootstrap: creates the books table, trigger and indexes; optionally seeds sample rows.

Usage:
    python -m app.db.bootstrap [--seed]

Invariants:
    - Idempotent: create_all skips an existing table; seed rows skip on isbn conflict
    - Uses the same DATABASE_URL as the API (app.config)
"""

import argparse
import asyncio
import logging

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import create_async_engine

from app.config import get_settings
from app.db.base import Base
from app.infrastructure.observability import setup_logging
from app.models.book import Book

logger = logging.getLogger(__name__)

SAMPLE_BOOKS = [
    {
        "title": "War and Peace", "author": "Leo Tolstoy",
        "isbn": "978-5-17-090000-1", "publication_year": 1869,
        "genre": "Novel", "pages": 1225, "price": 799.00, "in_stock": True,
        "description": "An epic of Russian society during the Napoleonic wars",
    },
    {
        "title": "Crime and Punishment", "author": "Fyodor Dostoevsky",
        "isbn": "978-5-17-090000-2", "publication_year": 1866,
        "genre": "Novel", "pages": 608, "price": 499.00, "in_stock": True,
        "description": "A psychological novel about the student Raskolnikov",
    },
    {
        "title": "The Master and Margarita", "author": "Mikhail Bulgakov",
        "isbn": "978-5-17-090000-3", "publication_year": 1967,
        "genre": "Novel", "pages": 480, "price": 599.00, "in_stock": True,
        "description": "The devil pays a visit to Soviet Moscow",
    },
    {
        "title": "1984", "author": "George Orwell",
        "isbn": "978-5-17-090000-4", "publication_year": 1949,
        "genre": "Dystopia", "pages": 320, "price": 399.00, "in_stock": False,
        "description": "A dystopian novel about a totalitarian society",
    },
    {
        "title": "Harry Potter and the Philosopher's Stone", "author": "J. K. Rowling",
        "isbn": "978-5-17-090000-5", "publication_year": 1997,
        "genre": "Fantasy", "pages": 309, "price": 549.00, "in_stock": True,
        "description": "The first book about the young wizard Harry Potter",
    },
]


async def bootstrap(database_url: str, seed: bool = False) -> None:
    engine = create_async_engine(database_url)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Schema ready")
            if seed:
                stmt = pg_insert(Book.__table__).values(SAMPLE_BOOKS)
                await conn.execute(stmt.on_conflict_do_nothing(index_elements=["isbn"]))
                logger.info(f"Seeded up to {len(SAMPLE_BOOKS)} sample books")
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the books schema.")
    parser.add_argument("--seed", action="store_true", help="insert sample books")
    args = parser.parse_args()

    settings = get_settings()
    setup_logging(settings.log_level, "text")
    asyncio.run(bootstrap(settings.database_url, seed=args.seed))


if __name__ == "__main__":
    main()
