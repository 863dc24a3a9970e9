"""Swap ORM — one detected deposit and its eventual payout.

Invariants:
    - deposit_transaction_hash is globally unique (the dedup key)
    - status transitions: pending -> in_flight -> settled | pending
    - transfer_transaction_hashes is empty until settled, then set exactly once
      in the same commit as status=settled
    - settlement_batch_uuid/reserved_at identify the run that reserved the swap

Design Decisions:
    - DelimitedList column: comma-joined on disk, ordered list in the domain
    - BigInteger amount: base units of 10^-9 token exceed 32 bits
    - Index on (direction, status): the settlement selection query; indexes on
      client_account_uuid (swap listing) and settlement_batch_uuid (operator recovery)
"""

import uuid as uuid_lib
from datetime import datetime, timezone

from sqlalchemy import BigInteger, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from swapbridge.db.base import Base
from swapbridge.models.column_types import DelimitedList


class Swap(Base):
    """Swap entity — a deposit awaiting or having received its payout."""
    __tablename__ = "swaps"
    __table_args__ = (
        Index("ix_swaps_direction_status", "direction", "status"),
        Index("ix_swaps_client_account_uuid", "client_account_uuid"),
        Index("ix_swaps_settlement_batch_uuid", "settlement_batch_uuid"),
    )

    uuid: Mapped[uuid_lib.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid_lib.uuid4,
    )
    client_account_uuid: Mapped[uuid_lib.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("client_accounts.uuid"),
        nullable=False,
    )
    direction: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deposit_transaction_hash: Mapped[str] = mapped_column(
        String(200), nullable=False, unique=True,
    )
    transfer_transaction_hashes: Mapped[list[str]] = mapped_column(
        DelimitedList(), nullable=True, default=list,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending",
    )
    settlement_batch_uuid: Mapped[uuid_lib.UUID | None] = mapped_column(
        UUID(as_uuid=True), nullable=True,
    )
    reserved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    client_account: Mapped["ClientAccount"] = relationship(
        "ClientAccount", back_populates="swaps",
    )
