"""Create tour, travel and logistics profile tables

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _common_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column(
            "user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("specialties", sa.JSON(), nullable=True),
        sa.Column("certifications", sa.JSON(), nullable=True),
        sa.Column("experience", sa.Integer(), nullable=True),
        sa.Column("rating", sa.Numeric(precision=3, scale=2), nullable=False, server_default="0.00"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    ]


def upgrade() -> None:
    op.create_table(
        "tour_profiles",
        *_common_columns(),
        sa.Column("company_name", sa.String(length=100), nullable=True),
        sa.Column("license_number", sa.String(length=50), nullable=True),
        sa.Column("languages", sa.JSON(), nullable=True),
        sa.Column("total_tours", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_table(
        "travel_profiles",
        *_common_columns(),
        sa.Column("agency_name", sa.String(length=100), nullable=True),
        sa.Column("iata_number", sa.String(length=50), nullable=True),
        sa.Column("destinations", sa.JSON(), nullable=True),
        sa.Column("total_bookings", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_table(
        "logistics_profiles",
        *_common_columns(),
        sa.Column("company_name", sa.String(length=100), nullable=True),
        sa.Column("license_number", sa.String(length=50), nullable=True),
        sa.Column("vehicle_types", sa.JSON(), nullable=True),
        sa.Column("coverage_areas", sa.JSON(), nullable=True),
        sa.Column("total_shipments", sa.Integer(), nullable=False, server_default="0"),
    )
    for table in ("tour_profiles", "travel_profiles", "logistics_profiles"):
        op.create_index(op.f(f"ix_{table}_user_id"), table, ["user_id"], unique=True)


def downgrade() -> None:
    for table in ("logistics_profiles", "travel_profiles", "tour_profiles"):
        op.drop_index(op.f(f"ix_{table}_user_id"), table_name=table)
        op.drop_table(table)
