"""SQLAlchemy Declarative Base — shared base class for the bridge tables.

Invariants:
    - client_accounts and swaps both inherit from Base
    - Unnamed constraints get deterministic names from the naming convention below;
      the migrations spell out the same names so both schemas match on every backend
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_N_name)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all SwapBridge ORM models."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
