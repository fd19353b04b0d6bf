"""Create alerts_history table.

Revision ID: 001_alerts_history
Revises:
Create Date: 2026-01-19
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision = "001_alerts_history"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "alerts_history",
        sa.Column(
            "id",
            UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("icao", sa.VARCHAR(4), nullable=False),
        sa.Column("alert_type", sa.TEXT, nullable=False),
        sa.Column("content", sa.TEXT, nullable=False),
        sa.Column("status", sa.VARCHAR(10), nullable=False, server_default="active"),
        sa.Column("severity", sa.VARCHAR(10), nullable=False, server_default="medium"),
        sa.Column("valid_from", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("valid_until", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("raw_data", JSONB, nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.CheckConstraint("icao ~ '^[A-Z]{4}$'", name="ck_alerts_history_icao"),
        sa.CheckConstraint(
            "status IN ('active', 'expired', 'archived')",
            name="ck_alerts_history_status",
        ),
        sa.CheckConstraint(
            "severity IN ('low', 'medium', 'high', 'critical')",
            name="ck_alerts_history_severity",
        ),
    )

    op.create_index("ix_alerts_history_icao", "alerts_history", ["icao"])
    op.create_index("ix_alerts_history_status", "alerts_history", ["status"])
    op.create_index("ix_alerts_history_severity", "alerts_history", ["severity"])
    op.create_index(
        "ix_alerts_history_created_at",
        "alerts_history",
        [sa.text("created_at DESC")],
    )

    # At most one active record per (icao, alert_type, content)
    op.create_index(
        "uq_alerts_history_active_triple",
        "alerts_history",
        ["icao", "alert_type", "content"],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
    )

    op.execute("""
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = now();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
    """)
    op.execute("""
        CREATE TRIGGER update_alerts_history_updated_at
            BEFORE UPDATE ON alerts_history
            FOR EACH ROW EXECUTE FUNCTION update_updated_at_column()
    """)


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS update_alerts_history_updated_at ON alerts_history")
    op.drop_index("uq_alerts_history_active_triple", table_name="alerts_history")
    op.drop_index("ix_alerts_history_created_at", table_name="alerts_history")
    op.drop_index("ix_alerts_history_severity", table_name="alerts_history")
    op.drop_index("ix_alerts_history_status", table_name="alerts_history")
    op.drop_index("ix_alerts_history_icao", table_name="alerts_history")
    op.drop_table("alerts_history")
    op.execute("DROP FUNCTION IF EXISTS update_updated_at_column()")
