"""time off requests and employee addresses

Revision ID: 5f6e7d8c9b0a
Revises: 0a1b2c3d4e5f
Create Date: 2026-10-19 15:30:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
import sqlmodel.sql.sqltypes
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5f6e7d8c9b0a"
down_revision: Union[str, Sequence[str], None] = "0a1b2c3d4e5f"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _str(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sqlmodel.sql.sqltypes.AutoString(), nullable=nullable)


def upgrade() -> None:
    """Create time_off and employee_addresses."""
    op.create_table(
        "time_off",
        _str("id"),
        _str("employee_id"),
        _str("type"),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("total_days", sa.Integer(), nullable=False),
        _str("reason"),
        _str("status"),
        _str("approved_by", nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"]),
        sa.ForeignKeyConstraint(["approved_by"], ["employees.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_time_off_employee_id"), "time_off", ["employee_id"])

    op.create_table(
        "employee_addresses",
        _str("id"),
        _str("employee_id"),
        _str("street"),
        _str("number"),
        _str("complement", nullable=True),
        _str("neighborhood"),
        _str("postal_code"),
        _str("city"),
        _str("state"),
        _str("country"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_employee_addresses_employee_id"), "employee_addresses", ["employee_id"]
    )


def downgrade() -> None:
    op.drop_table("employee_addresses")
    op.drop_table("time_off")
