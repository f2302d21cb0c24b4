"""add people table

Revision ID: add_people_table
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "add_people_table"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Check if table exists
    from sqlalchemy import inspect

    conn = op.get_bind()
    inspector = inspect(conn)
    existing_tables = inspector.get_table_names()

    if "people" not in existing_tables:
        op.create_table(
            "people",
            sa.Column("id", sa.BigInteger().with_variant(sa.Integer(), "sqlite"), primary_key=True, autoincrement=True, nullable=False),
            sa.Column("name", sa.String(length=255), nullable=True),
            sa.Column("city", sa.String(length=255), nullable=True),
        )

        op.create_index("idx_people_name", "people", ["name"])


def downgrade() -> None:
    op.drop_index("idx_people_name", table_name="people")
    op.drop_table("people")
