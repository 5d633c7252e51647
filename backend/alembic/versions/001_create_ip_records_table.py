"""Create ip_records table

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates the `ip_records` table and its two lookup indexes.
How:   Same shape as IPRecordRow; RecordStore.initialize() creates the
       identical schema with CREATE ... IF NOT EXISTS semantics, so either
       path can bootstrap a fresh database.

Rollback: downgrade() drops the table (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "ip_records",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("original_ip", sa.String(15), nullable=False),
        sa.Column("reversed_ip", sa.String(15), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index("idx_ip_records_created_at", "ip_records", ["created_at"])
    op.create_index("idx_ip_records_original_ip", "ip_records", ["original_ip"])


def downgrade() -> None:
    op.drop_index("idx_ip_records_original_ip", table_name="ip_records")
    op.drop_index("idx_ip_records_created_at", table_name="ip_records")
    op.drop_table("ip_records")
