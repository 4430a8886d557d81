"""Pydantic Schemas: declarative input rules for API endpoints.

Invariants:
    - Schemas validate at the system boundary (path, query, body)
    - Domain types from core/ used for enum fields

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence (ADR: DDD boundary)
"""
