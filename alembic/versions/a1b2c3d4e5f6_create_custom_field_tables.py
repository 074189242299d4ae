"""create_custom_field_tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19

Creates the `schemas` table (one field-definition list per host model type)
and the `field_values` table (one JSON payload per host instance and field).
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: str | None = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "schemas",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        sa.Column("owner_type", sa.String(255), nullable=False),
        sa.Column("name", sa.JSON, nullable=False),
        sa.Column("description", sa.JSON, nullable=True),
        sa.Column("field_definitions", sa.JSON, nullable=False),
        sa.Column(
            "is_active",
            sa.Boolean,
            nullable=False,
            server_default=sa.true(),
        ),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
        # One schema per host model type
        sa.UniqueConstraint("owner_type", name="uq_schemas_owner_type"),
    )

    op.create_index(
        "idx_schemas_owner_type_active",
        "schemas",
        ["owner_type", "is_active"],
    )
    op.create_index(
        "idx_schemas_owner_type",
        "schemas",
        ["owner_type"],
    )

    op.create_table(
        "field_values",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        sa.Column(
            "schema_id",
            sa.Integer,
            sa.ForeignKey("schemas.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("owner_type", sa.String(255), nullable=False),
        sa.Column("owner_id", sa.BigInteger().with_variant(sa.Integer, "sqlite"), nullable=False),
        sa.Column("field_key", sa.String(100), nullable=False),
        sa.Column("payload", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
        # One value per field per host instance
        sa.UniqueConstraint(
            "schema_id",
            "owner_type",
            "owner_id",
            "field_key",
            name="uq_field_values_identity",
        ),
    )

    op.create_index(
        "idx_field_values_schema_id",
        "field_values",
        ["schema_id"],
    )
    op.create_index(
        "idx_field_values_owner",
        "field_values",
        ["owner_type", "owner_id"],
    )
    op.create_index(
        "idx_field_values_field_key",
        "field_values",
        ["field_key"],
    )


def downgrade() -> None:
    op.drop_index("idx_field_values_field_key", table_name="field_values")
    op.drop_index("idx_field_values_owner", table_name="field_values")
    op.drop_index("idx_field_values_schema_id", table_name="field_values")
    op.drop_table("field_values")
    op.drop_index("idx_schemas_owner_type", table_name="schemas")
    op.drop_index("idx_schemas_owner_type_active", table_name="schemas")
    op.drop_table("schemas")
