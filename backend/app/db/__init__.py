"""Database Schema: SQLAlchemy Base and the static bootstrap script.

Invariants:
    - Base.metadata is the single source of truth for the books table
    - Schema changes ship as edits to models/book.py plus a re-run of bootstrap

Design Decisions:
    - asyncpg driver for PostgreSQL (ADR: native async, no thread pool overhead)
"""
