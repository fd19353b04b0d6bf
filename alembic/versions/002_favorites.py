"""Create favorites table.

Revision ID: 002_favorites
Revises: 001_alerts_history
Create Date: 2026-01-19
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import UUID

revision = "002_favorites"
down_revision = "001_alerts_history"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "favorites",
        sa.Column(
            "id",
            UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("icao", sa.VARCHAR(4), nullable=False),
        sa.Column("name", sa.TEXT, nullable=False),
        sa.Column("enabled", sa.BOOLEAN, nullable=False, server_default=sa.text("true")),
        sa.Column("sort_order", sa.INTEGER, nullable=False, server_default="0"),
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
        sa.CheckConstraint("icao ~ '^[A-Z]{4}$'", name="ck_favorites_icao"),
    )
    op.create_index("ix_favorites_icao", "favorites", ["icao"])
    op.create_index("ix_favorites_enabled", "favorites", ["enabled"])

    op.execute("""
        CREATE TRIGGER update_favorites_updated_at
            BEFORE UPDATE ON favorites
            FOR EACH ROW EXECUTE FUNCTION update_updated_at_column()
    """)


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS update_favorites_updated_at ON favorites")
    op.drop_index("ix_favorites_enabled", table_name="favorites")
    op.drop_index("ix_favorites_icao", table_name="favorites")
    op.drop_table("favorites")
