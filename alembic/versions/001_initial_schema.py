"""Initial schema — client_accounts, swaps.

Revision ID: 001_initial
Revises: None
Create Date: 2026-09-02

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "client_accounts",
        sa.Column("uuid", UUID(as_uuid=True), nullable=False),
        sa.Column("user_address", sa.String(200), nullable=False),
        sa.Column("user_address_type", sa.String(10), nullable=False),
        sa.Column("deposit_address", sa.String(200), nullable=False),
        sa.Column("deposit_address_type", sa.String(10), nullable=False),
        sa.Column("secret", sa.Text, nullable=False),
        sa.Column("created", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            "user_address", "user_address_type",
            name="uq_client_accounts_user_address",
        ),
        sa.PrimaryKeyConstraint("uuid", name="pk_client_accounts"),
    )

    op.create_table(
        "swaps",
        sa.Column("uuid", UUID(as_uuid=True), nullable=False),
        sa.Column("client_account_uuid", UUID(as_uuid=True), nullable=False),
        sa.Column("direction", sa.String(20), nullable=False),
        sa.Column("amount", sa.BigInteger, nullable=False),
        sa.Column("deposit_transaction_hash", sa.String(200), nullable=False),
        sa.Column("transfer_transaction_hashes", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("uuid", name="pk_swaps"),
        sa.ForeignKeyConstraint(
            ["client_account_uuid"], ["client_accounts.uuid"],
            name="fk_swaps_client_account_uuid_client_accounts",
        ),
        sa.UniqueConstraint(
            "deposit_transaction_hash", name="uq_swaps_deposit_transaction_hash",
        ),
    )
    op.create_index("ix_swaps_direction_status", "swaps", ["direction", "status"])
    op.create_index("ix_swaps_client_account_uuid", "swaps", ["client_account_uuid"])


def downgrade() -> None:
    op.drop_index("ix_swaps_client_account_uuid", table_name="swaps")
    op.drop_index("ix_swaps_direction_status", table_name="swaps")
    op.drop_table("swaps")
    op.drop_table("client_accounts")
