"""Initial schema - events, rate_limit_windows.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "events",
        sa.Column("slug", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("owner_id", sa.String(128), nullable=False),
        sa.Column("event_type", sa.String(20), nullable=False, server_default="architect"),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("config", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_events_owner_id", "events", ["owner_id"])

    op.create_table(
        "rate_limit_windows",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("caller_id", sa.String(128), nullable=False),
        sa.Column("window_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("count", sa.Integer, nullable=False, server_default="0"),
        sa.UniqueConstraint("caller_id", "window_start", name="uq_rate_limit_window"),
    )
    op.create_index(
        "ix_rate_limit_windows_caller_id", "rate_limit_windows", ["caller_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_rate_limit_windows_caller_id", table_name="rate_limit_windows")
    op.drop_table("rate_limit_windows")
    op.drop_index("ix_events_owner_id", table_name="events")
    op.drop_table("events")
