"""initial schema — backup attempts, batch executions

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "backup_attempts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("batch_id", sa.String(64), nullable=False),
        sa.Column("category_code", sa.String(64), nullable=False),
        sa.Column("backup_type", sa.String(32), nullable=False),
        sa.Column("status", sa.String(16), server_default="IN_PROGRESS"),
        sa.Column("business_date", sa.String(8), server_default=""),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("external_response", sa.Text, server_default=""),
    )
    op.create_index("ix_backup_attempts_batch_id", "backup_attempts", ["batch_id"])

    op.create_table(
        "batch_executions",
        sa.Column("batch_id", sa.String(64), primary_key=True),
        sa.Column("category_code", sa.String(64), nullable=False),
        sa.Column("execution_date", sa.String(10), server_default=""),
        sa.Column("status", sa.String(16), server_default="STARTED"),
        sa.Column("extension_fields", sa.JSON, server_default="{}"),
        sa.Column("exception_details", sa.Text, server_default=""),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("batch_executions")
    op.drop_index("ix_backup_attempts_batch_id", table_name="backup_attempts")
    op.drop_table("backup_attempts")
