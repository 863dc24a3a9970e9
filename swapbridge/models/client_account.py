"""ClientAccount ORM — pairs a user's payout address with a bridge deposit address.

Invariants:
    - uuid is UUID primary key
    - (user_address, user_address_type) is unique: one deposit address per pair, forever
    - deposit_address_type is always the network opposite user_address_type
    - secret is bridge-owned key material: never serialized to API responses
    - Rows are never updated or deleted after insert

Design Decisions:
    - Unique constraint declared on the model so create_all (tests) and
      migrations agree on the conflict target used by the allocator
"""

import uuid as uuid_lib
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from swapbridge.db.base import Base


class ClientAccount(Base):
    """Client account — aggregate root owning its swaps."""
    __tablename__ = "client_accounts"
    __table_args__ = (
        UniqueConstraint(
            "user_address", "user_address_type",
            name="uq_client_accounts_user_address",
        ),
    )

    uuid: Mapped[uuid_lib.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid_lib.uuid4,
    )
    user_address: Mapped[str] = mapped_column(String(200), nullable=False)
    user_address_type: Mapped[str] = mapped_column(String(10), nullable=False)
    deposit_address: Mapped[str] = mapped_column(String(200), nullable=False)
    deposit_address_type: Mapped[str] = mapped_column(
        String(10), nullable=False,
    )
    secret: Mapped[str] = mapped_column(Text, nullable=False)
    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    swaps: Mapped[list["Swap"]] = relationship(
        "Swap", back_populates="client_account", lazy="noload",
    )
