"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - ClientAccount is the aggregate root; swaps scoped by client_account_uuid

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from swapbridge.models.client_account import ClientAccount  # noqa: F401
from swapbridge.models.swap import Swap  # noqa: F401
