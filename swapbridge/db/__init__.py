"""Database Layer — declarative Base shared by the ORM models and Alembic.

Invariants:
    - Engine and sessions live in infrastructure/database.py, never here
"""
