"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18

Creates:
- city, activity
- itinerary
- currency_config
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

json_doc = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """Create all tables."""
    # city table
    op.create_table(
        "city",
        sa.Column("city_id", sa.Text(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("destination_id", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), nullable=False, server_default="draft"),
        sa.Column("minimum_required_days", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("packages", json_doc, nullable=False),
        sa.Column("transfers", json_doc, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_city_status", "city", ["status"])

    # activity table
    op.create_table(
        "activity",
        sa.Column("activity_id", sa.Text(), primary_key=True),
        sa.Column("city_id", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("badge", sa.Text(), nullable=False, server_default="Quarter Day"),
        sa.Column("price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("start_time", sa.Text(), nullable=True),
        sa.Column("transfers", json_doc, nullable=False),
        sa.Column("is_flight", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("flight_type", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), nullable=False, server_default="draft"),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["city_id"], ["city.city_id"]),
    )
    op.create_index("idx_activity_city_status", "activity", ["city_id", "status"])
    op.create_index("idx_activity_flight", "activity", ["city_id", "flight_type"])

    # itinerary table
    op.create_table(
        "itinerary",
        sa.Column("itinerary_id", sa.Uuid(), primary_key=True),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("destination_id", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), nullable=False, server_default="draft"),
        sa.Column("total_days", sa.Integer(), nullable=False),
        sa.Column("total_travelers", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("selected_package", sa.Text(), nullable=True),
        sa.Column("departure_date", sa.Date(), nullable=True),
        sa.Column("city_allocations", json_doc, nullable=False),
        sa.Column("days", json_doc, nullable=False),
        sa.Column("pricing", json_doc, nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_itinerary_owner_created", "itinerary", ["owner_id", "created_at"])

    # currency_config table (singleton row id=1)
    op.create_table(
        "currency_config",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("base_currency", sa.Text(), nullable=False, server_default="INR"),
        sa.Column("target_currency", sa.Text(), nullable=False, server_default="USD"),
        sa.Column("conversion_percentage", sa.Float(), nullable=False, server_default="0"),
        sa.Column("last_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("last_fetched_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("currency_config")
    op.drop_index("idx_itinerary_owner_created", table_name="itinerary")
    op.drop_table("itinerary")
    op.drop_index("idx_activity_flight", table_name="activity")
    op.drop_index("idx_activity_city_status", table_name="activity")
    op.drop_table("activity")
    op.drop_index("idx_city_status", table_name="city")
    op.drop_table("city")
