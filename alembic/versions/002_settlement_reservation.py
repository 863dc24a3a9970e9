"""Settlement reservation — swaps reserved in_flight by a batch before dispatch.

Revision ID: 002_settlement_reservation
Revises: 001_initial
Create Date: 2026-09-20

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "002_settlement_reservation"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column(
        "swaps",
        sa.Column("settlement_batch_uuid", UUID(as_uuid=True), nullable=True),
    )
    op.add_column(
        "swaps",
        sa.Column("reserved_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_swaps_settlement_batch_uuid", "swaps", ["settlement_batch_uuid"],
    )


def downgrade() -> None:
    # in_flight swaps must be resolved (release/settle) before downgrading
    op.drop_index("ix_swaps_settlement_batch_uuid", table_name="swaps")
    op.drop_column("swaps", "reserved_at")
    op.drop_column("swaps", "settlement_batch_uuid")
