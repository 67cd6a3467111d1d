"""Initial schema: people, work item types and work items.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-06-05 11:03:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from flowtrack.adapters.sqlalchemy.mappings import UTCDateTime

revision: str = "0001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _create_dimension_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("name_normalized", sa.String(length=255), nullable=False),
        sa.Column("created_at", UTCDateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=f"pk_{name}"),
        sa.UniqueConstraint("name_normalized", name=f"uq_{name}_name_normalized"),
    )


def upgrade() -> None:
    _create_dimension_table("person")
    _create_dimension_table("work_item_type")

    op.create_table(
        "work_item",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("work_item_type_id", sa.Uuid(), nullable=False),
        sa.Column("state", sa.String(length=100), nullable=False),
        sa.Column("created_date", UTCDateTime(), nullable=False),
        sa.Column("activated_date", UTCDateTime(), nullable=True),
        sa.Column("closed_date", UTCDateTime(), nullable=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("assigned_to_id", sa.Uuid(), nullable=True),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column("created_at", UTCDateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ["work_item_type_id"],
            ["work_item_type.id"],
            name="fk_work_item_work_item_type_id_work_item_type",
        ),
        sa.ForeignKeyConstraint(
            ["assigned_to_id"],
            ["person.id"],
            name="fk_work_item_assigned_to_id_person",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_work_item"),
    )
    op.create_index("ix_work_item_parent_id", "work_item", ["parent_id"])
    op.create_index("ix_work_item_work_item_type_id", "work_item", ["work_item_type_id"])
    op.create_index("ix_work_item_assigned_to_id", "work_item", ["assigned_to_id"])
    op.create_index("ix_work_item_closed_date", "work_item", ["closed_date"])


def downgrade() -> None:
    op.drop_index("ix_work_item_closed_date", table_name="work_item")
    op.drop_index("ix_work_item_assigned_to_id", table_name="work_item")
    op.drop_index("ix_work_item_work_item_type_id", table_name="work_item")
    op.drop_index("ix_work_item_parent_id", table_name="work_item")
    op.drop_table("work_item")
    op.drop_table("work_item_type")
    op.drop_table("person")
