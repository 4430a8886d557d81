"""Infrastructure Layer: connection pool, error translation, logging setup.

Invariants:
    - Store failures are translated into core error kinds before leaving this layer

Design Decisions:
    - Thin wrappers over SQLAlchemy and stdlib logging
"""
