"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All external calls wrapped with timeout/error mapping; only idempotent calls retried
"""
