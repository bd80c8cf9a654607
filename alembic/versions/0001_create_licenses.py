"""Create licenses table

Revision ID: 0001
Revises:
Create Date: 2026-10-17

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "licenses",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_uuid", sa.String(36), nullable=False),
        sa.Column("service_name", sa.String(100), nullable=False),
        sa.Column("activation_type", sa.String(20), nullable=False),
        sa.Column("service_start_time", sa.DateTime, nullable=False),
        sa.Column("service_duration", sa.Integer, nullable=False),
        sa.Column("service_end_time", sa.DateTime, nullable=False),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
        sa.UniqueConstraint("user_uuid", "service_name", name="uq_licenses_user_service"),
    )

    op.create_index("ix_licenses_user_uuid", "licenses", ["user_uuid"])
    op.create_index("ix_licenses_service_name", "licenses", ["service_name"])


def downgrade() -> None:
    op.drop_index("ix_licenses_service_name", table_name="licenses")
    op.drop_index("ix_licenses_user_uuid", table_name="licenses")
    op.drop_table("licenses")
