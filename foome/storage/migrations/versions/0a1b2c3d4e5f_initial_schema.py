"""initial schema

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
import sqlmodel.sql.sqltypes
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0a1b2c3d4e5f"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _str(name: str, nullable: bool = False, **kwargs: object) -> sa.Column:
    return sa.Column(name, sqlmodel.sql.sqltypes.AutoString(), nullable=nullable, **kwargs)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    """Create accounts, tenancy, team, role, onboarding and employee record tables."""
    op.create_table(
        "users",
        _str("id"),
        _str("email"),
        _str("password_hash"),
        _str("full_name"),
        _str("phone", nullable=True),
        _str("avatar_url", nullable=True),
        sa.Column("email_confirmed_at", sa.DateTime(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "auth_sessions",
        _str("id"),
        _str("token_hash"),
        _str("user_id"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_auth_sessions_token_hash"), "auth_sessions", ["token_hash"], unique=True
    )
    op.create_index(op.f("ix_auth_sessions_user_id"), "auth_sessions", ["user_id"])

    op.create_table(
        "companies",
        _str("id"),
        _str("name"),
        _str("cnpj"),
        _str("size_range", nullable=True),
        _str("created_by", nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_companies_cnpj"), "companies", ["cnpj"], unique=True)

    op.create_table(
        "employees",
        _str("id"),
        _str("company_id"),
        _str("user_id", nullable=True),
        _str("full_name"),
        _str("email"),
        _str("phone", nullable=True),
        _str("cpf", nullable=True),
        _str("position", nullable=True),
        _str("department", nullable=True),
        _str("status"),
        _str("contract_type"),
        sa.Column("hire_date", sa.Date(), nullable=True),
        sa.Column("is_admin", sa.Boolean(), nullable=True),
        _str("created_by", nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_employees_company_id"), "employees", ["company_id"])
    op.create_index(op.f("ix_employees_user_id"), "employees", ["user_id"], unique=True)
    op.create_index(op.f("ix_employees_email"), "employees", ["email"])

    op.create_table(
        "teams",
        _str("id"),
        _str("company_id"),
        _str("name"),
        _str("description", nullable=True),
        _str("manager_id", nullable=True),
        _str("created_by", nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.ForeignKeyConstraint(["manager_id"], ["employees.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_teams_company_id"), "teams", ["company_id"])
    op.create_index(op.f("ix_teams_name"), "teams", ["name"])

    op.create_table(
        "team_members",
        _str("id"),
        _str("team_id"),
        _str("employee_id"),
        sa.Column("joined_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"]),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("team_id", "employee_id"),
    )
    op.create_index(op.f("ix_team_members_team_id"), "team_members", ["team_id"])
    op.create_index(op.f("ix_team_members_employee_id"), "team_members", ["employee_id"])

    op.create_table(
        "subteams",
        _str("id"),
        _str("team_id"),
        _str("name"),
        _str("description", nullable=True),
        _str("manager_id", nullable=True),
        _str("created_by", nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"]),
        sa.ForeignKeyConstraint(["manager_id"], ["employees.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_subteams_team_id"), "subteams", ["team_id"])

    op.create_table(
        "subteam_members",
        _str("id"),
        _str("subteam_id"),
        _str("employee_id"),
        _str("added_by", nullable=True),
        sa.Column("joined_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["subteam_id"], ["subteams.id"]),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("subteam_id", "employee_id"),
    )
    op.create_index(op.f("ix_subteam_members_subteam_id"), "subteam_members", ["subteam_id"])
    op.create_index(op.f("ix_subteam_members_employee_id"), "subteam_members", ["employee_id"])

    op.create_table(
        "roles",
        _str("id"),
        _str("company_id"),
        _str("title"),
        _str("cbo_name", nullable=True),
        _str("cbo_number", nullable=True),
        _str("contract_type"),
        sa.Column("active", sa.Boolean(), nullable=False),
        _str("team_id", nullable=True),
        _str("description", nullable=True),
        _str("salary_periodicity", nullable=True),
        sa.Column("salary", sa.Float(), nullable=True),
        _str("work_model", nullable=True),
        _str("level", nullable=True),
        _str("seniority_level", nullable=True),
        _str("required_requirements", nullable=True),
        _str("desired_requirements", nullable=True),
        _str("deliveries_results", nullable=True),
        _str("education_level", nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_roles_company_id"), "roles", ["company_id"])

    op.create_table(
        "role_employees",
        _str("id"),
        _str("role_id"),
        _str("employee_id"),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_current", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"]),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_role_employees_role_id"), "role_employees", ["role_id"])
    op.create_index(op.f("ix_role_employees_employee_id"), "role_employees", ["employee_id"])

    op.create_table(
        "onboarding_tasks",
        _str("id"),
        _str("company_id"),
        _str("name"),
        _str("description", nullable=True),
        _str("category"),
        sa.Column("is_required", sa.Boolean(), nullable=False),
        sa.Column("default_due_days", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_onboarding_tasks_company_id"), "onboarding_tasks", ["company_id"])

    op.create_table(
        "employee_onboarding",
        _str("id"),
        _str("employee_id"),
        _str("task_id"),
        _str("status"),
        sa.Column("due_date", sa.Date(), nullable=True),
        _str("notes", nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        _str("completed_by", nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"]),
        sa.ForeignKeyConstraint(["task_id"], ["onboarding_tasks.id"]),
        sa.ForeignKeyConstraint(["completed_by"], ["employees.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_employee_onboarding_employee_id"), "employee_onboarding", ["employee_id"]
    )
    op.create_index(op.f("ix_employee_onboarding_task_id"), "employee_onboarding", ["task_id"])

    op.create_table(
        "employee_documents",
        _str("id"),
        _str("employee_id"),
        _str("name"),
        _str("type"),
        _str("status"),
        _str("file_path"),
        _str("file_name"),
        _str("file_type", nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("expiration_date", sa.Date(), nullable=True),
        _str("notes", nullable=True),
        _str("uploaded_by", nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_employee_documents_employee_id"), "employee_documents", ["employee_id"]
    )

    op.create_table(
        "employee_photos",
        _str("id"),
        _str("employee_id"),
        _str("admission_photo"),
        _str("photo_url"),
        _str("content_type", nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_employee_photos_employee_id"), "employee_photos", ["employee_id"], unique=True
    )

    op.create_table(
        "employee_dependents",
        _str("id"),
        _str("employee_id"),
        _str("full_name"),
        _str("cpf", nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=False),
        _str("relationship"),
        _str("gender"),
        _str("birth_certificate_number", nullable=True),
        sa.Column("has_disability", sa.Boolean(), nullable=False),
        sa.Column("is_student", sa.Boolean(), nullable=False),
        _str("notes", nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_employee_dependents_employee_id"), "employee_dependents", ["employee_id"]
    )


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    for table in (
        "employee_dependents",
        "employee_photos",
        "employee_documents",
        "employee_onboarding",
        "onboarding_tasks",
        "role_employees",
        "roles",
        "subteam_members",
        "subteams",
        "team_members",
        "teams",
        "employees",
        "companies",
        "auth_sessions",
        "users",
    ):
        op.drop_table(table)
