"""Services Layer: repositories that build SQL and run it through an injected executor.

Invariants:
    - Services never construct engines or connections
    - Services return plain dict records, never ORM instances
"""
