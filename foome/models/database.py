"""SQLModel database table models."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


def _utc_now() -> datetime:
    """Return current UTC time as naive datetime for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


def _new_uuid() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Accounts and tenancy
# ---------------------------------------------------------------------------


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    full_name: str = ""
    phone: str | None = None
    avatar_url: str | None = None
    email_confirmed_at: datetime | None = None
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class AuthSession(SQLModel, table=True):
    __tablename__ = "auth_sessions"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    token_hash: str = Field(index=True, unique=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=_utc_now)
    expires_at: datetime


class Company(SQLModel, table=True):
    __tablename__ = "companies"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    name: str
    cnpj: str = Field(index=True, unique=True)
    size_range: str | None = None
    created_by: str | None = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class Employee(SQLModel, table=True):
    __tablename__ = "employees"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    company_id: str = Field(foreign_key="companies.id", index=True)
    user_id: str | None = Field(default=None, foreign_key="users.id", index=True, unique=True)
    full_name: str
    email: str = Field(index=True)
    phone: str | None = None
    cpf: str | None = None
    position: str | None = None
    department: str | None = None
    status: str = Field(default="active")  # active | inactive | vacation | terminated
    contract_type: str = Field(default="clt")
    hire_date: date | None = None
    is_admin: bool | None = Field(default=False)
    created_by: str | None = None
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------


class Team(SQLModel, table=True):
    __tablename__ = "teams"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    company_id: str = Field(foreign_key="companies.id", index=True)
    name: str = Field(index=True)
    description: str | None = None
    manager_id: str | None = Field(default=None, foreign_key="employees.id")
    created_by: str | None = None
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class TeamMember(SQLModel, table=True):
    __tablename__ = "team_members"
    __table_args__ = (UniqueConstraint("team_id", "employee_id"),)

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    team_id: str = Field(foreign_key="teams.id", index=True)
    employee_id: str = Field(foreign_key="employees.id", index=True)
    joined_at: datetime = Field(default_factory=_utc_now)


class Subteam(SQLModel, table=True):
    __tablename__ = "subteams"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    team_id: str = Field(foreign_key="teams.id", index=True)
    name: str
    description: str | None = None
    manager_id: str | None = Field(default=None, foreign_key="employees.id")
    created_by: str | None = None
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class SubteamMember(SQLModel, table=True):
    __tablename__ = "subteam_members"
    __table_args__ = (UniqueConstraint("subteam_id", "employee_id"),)

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    subteam_id: str = Field(foreign_key="subteams.id", index=True)
    employee_id: str = Field(foreign_key="employees.id", index=True)
    added_by: str | None = None
    joined_at: datetime = Field(default_factory=_utc_now)


# ---------------------------------------------------------------------------
# Roles (job positions)
# ---------------------------------------------------------------------------


class Role(SQLModel, table=True):
    __tablename__ = "roles"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    company_id: str = Field(foreign_key="companies.id", index=True)
    title: str
    cbo_name: str | None = None
    cbo_number: str | None = None
    contract_type: str = Field(default="clt")
    active: bool = Field(default=True)
    team_id: str | None = Field(default=None, foreign_key="teams.id")
    description: str | None = None
    salary_periodicity: str | None = None
    salary: float | None = None
    work_model: str | None = None
    level: str | None = None
    seniority_level: str | None = None
    required_requirements: str | None = None
    desired_requirements: str | None = None
    deliveries_results: str | None = None
    education_level: str | None = None
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class RoleEmployee(SQLModel, table=True):
    __tablename__ = "role_employees"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    role_id: str = Field(foreign_key="roles.id", index=True)
    employee_id: str = Field(foreign_key="employees.id", index=True)
    start_date: date
    end_date: date | None = None
    is_current: bool = Field(default=True)
    created_at: datetime = Field(default_factory=_utc_now)


# ---------------------------------------------------------------------------
# Onboarding
# ---------------------------------------------------------------------------


class OnboardingTask(SQLModel, table=True):
    __tablename__ = "onboarding_tasks"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    company_id: str = Field(foreign_key="companies.id", index=True)
    name: str
    description: str | None = None
    category: str = Field(default="other")
    is_required: bool = Field(default=True)
    default_due_days: int = Field(default=7)
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class EmployeeOnboarding(SQLModel, table=True):
    __tablename__ = "employee_onboarding"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    employee_id: str = Field(foreign_key="employees.id", index=True)
    task_id: str = Field(foreign_key="onboarding_tasks.id", index=True)
    status: str = Field(default="pending")  # pending | completed
    due_date: date | None = None
    notes: str | None = None
    completed_at: datetime | None = None
    completed_by: str | None = Field(default=None, foreign_key="employees.id")
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


# ---------------------------------------------------------------------------
# Employee-owned records
# ---------------------------------------------------------------------------


class EmployeeDocument(SQLModel, table=True):
    __tablename__ = "employee_documents"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    employee_id: str = Field(foreign_key="employees.id", index=True)
    name: str
    type: str
    status: str = Field(default="pending")  # pending | approved | rejected
    file_path: str
    file_name: str
    file_type: str | None = None
    file_size: int = Field(default=0)
    expiration_date: date | None = None
    notes: str | None = None
    uploaded_by: str | None = None
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class EmployeePhoto(SQLModel, table=True):
    __tablename__ = "employee_photos"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    employee_id: str = Field(foreign_key="employees.id", unique=True, index=True)
    admission_photo: str
    photo_url: str
    content_type: str | None = None
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class EmployeeDependent(SQLModel, table=True):
    __tablename__ = "employee_dependents"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    employee_id: str = Field(foreign_key="employees.id", index=True)
    full_name: str
    cpf: str | None = None
    birth_date: date
    relationship: str
    gender: str
    birth_certificate_number: str | None = None
    has_disability: bool = Field(default=False)
    is_student: bool = Field(default=False)
    notes: str | None = None
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class TimeOff(SQLModel, table=True):
    __tablename__ = "time_off"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    employee_id: str = Field(foreign_key="employees.id", index=True)
    type: str
    start_date: date
    end_date: date
    total_days: int
    reason: str
    status: str = Field(default="pending")  # pending | approved | rejected
    approved_by: str | None = Field(default=None, foreign_key="employees.id")
    approved_at: datetime | None = None
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class EmployeeAddress(SQLModel, table=True):
    __tablename__ = "employee_addresses"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    employee_id: str = Field(foreign_key="employees.id", index=True)
    street: str
    number: str
    complement: str | None = None
    neighborhood: str
    postal_code: str
    city: str
    state: str
    country: str = Field(default="Brasil")
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)
