"""API request/response schemas for FastAPI endpoints."""

from __future__ import annotations

from datetime import date
from typing import Any, ClassVar

from pydantic import BaseModel, EmailStr, Field, model_validator

from foome.types import (
    CompanySize,
    ContractType,
    DependentRelationship,
    DocumentStatus,
    DocumentType,
    EmployeeStatus,
    ErrorCode,
    Gender,
    OnboardingCategory,
    OnboardingStatus,
    TimeOffStatus,
    TimeOffType,
)

# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------


class ErrorBody(BaseModel):
    message: str
    details: Any = None
    code: ErrorCode | None = None


class PageMeta(BaseModel):
    page: int
    page_size: int = Field(serialization_alias="pageSize")
    total_items: int = Field(serialization_alias="totalItems")
    total_pages: int = Field(serialization_alias="totalPages")


class PartialUpdate(BaseModel):
    """Partial-update body. Fields in ``not_null`` may be omitted but not sent as null."""

    not_null: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_explicit_nulls(self) -> PartialUpdate:
        nulled = sorted(
            name for name in self.model_fields_set & self.not_null if getattr(self, name) is None
        )
        if nulled:
            msg = f"{', '.join(nulled)} cannot be null"
            raise ValueError(msg)
        return self


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    full_name: str = Field(min_length=2, max_length=200)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    phone: str | None = None


class ConfirmEmailRequest(BaseModel):
    token: str = Field(min_length=1)


class EmailOnlyRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=8, max_length=128)
    confirm_password: str


# ---------------------------------------------------------------------------
# Companies and employees
# ---------------------------------------------------------------------------


class CompanyAdminInput(BaseModel):
    full_name: str = Field(min_length=2, max_length=200)
    email: EmailStr
    phone: str | None = None
    position: str | None = None
    department: str | None = None


class CreateCompanyRequest(BaseModel):
    name: str = Field(min_length=2, max_length=200)
    cnpj: str = Field(min_length=14, max_length=18)
    size_range: CompanySize | None = None
    admin: CompanyAdminInput


class EmployeeCreate(BaseModel):
    full_name: str = Field(min_length=2, max_length=200)
    email: EmailStr
    phone: str | None = None
    cpf: str | None = Field(default=None, max_length=14)
    position: str | None = None
    department: str | None = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    contract_type: ContractType = ContractType.CLT
    hire_date: date | None = None
    is_admin: bool = False


class EmployeeUpdate(PartialUpdate):
    not_null = frozenset({"full_name", "email", "status", "contract_type", "is_admin"})

    full_name: str | None = Field(default=None, min_length=2, max_length=200)
    email: EmailStr | None = None
    phone: str | None = None
    cpf: str | None = Field(default=None, max_length=14)
    position: str | None = None
    department: str | None = None
    status: EmployeeStatus | None = None
    contract_type: ContractType | None = None
    hire_date: date | None = None
    is_admin: bool | None = None


class EmployeeStatusUpdate(BaseModel):
    status: EmployeeStatus


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------


class TeamCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    manager_id: str | None = None


class TeamUpdate(PartialUpdate):
    not_null = frozenset({"name"})

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    manager_id: str | None = None


class SubteamCreate(TeamCreate):
    pass


class SubteamUpdate(TeamUpdate):
    pass


class MemberAdd(BaseModel):
    employee_id: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------


class RoleCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    cbo_name: str | None = None
    cbo_number: str | None = None
    contract_type: ContractType = ContractType.CLT
    active: bool = True
    team_id: str | None = None
    description: str | None = None
    salary_periodicity: str | None = None
    salary: float | None = Field(default=None, ge=0)
    work_model: str | None = None
    level: str | None = None
    seniority_level: str | None = None
    required_requirements: str | None = None
    desired_requirements: str | None = None
    deliveries_results: str | None = None
    education_level: str | None = None


class RoleUpdate(PartialUpdate):
    not_null = frozenset({"title", "contract_type", "active"})

    title: str | None = Field(default=None, min_length=1, max_length=200)
    cbo_name: str | None = None
    cbo_number: str | None = None
    contract_type: ContractType | None = None
    active: bool | None = None
    team_id: str | None = None
    description: str | None = None
    salary_periodicity: str | None = None
    salary: float | None = Field(default=None, ge=0)
    work_model: str | None = None
    level: str | None = None
    seniority_level: str | None = None
    required_requirements: str | None = None
    desired_requirements: str | None = None
    deliveries_results: str | None = None
    education_level: str | None = None


class RoleActiveUpdate(BaseModel):
    active: bool


class RoleAssign(BaseModel):
    employee_id: str = Field(min_length=1)
    start_date: date | None = None


class RoleAssignmentEnd(BaseModel):
    end_date: date | None = None


# ---------------------------------------------------------------------------
# Onboarding
# ---------------------------------------------------------------------------


class OnboardingTaskCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    category: OnboardingCategory = OnboardingCategory.OTHER
    is_required: bool = True
    default_due_days: int = Field(default=7, ge=0, le=365)


class OnboardingTaskUpdate(PartialUpdate):
    not_null = frozenset({"name", "category", "is_required", "default_due_days"})

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    category: OnboardingCategory | None = None
    is_required: bool | None = None
    default_due_days: int | None = Field(default=None, ge=0, le=365)


class OnboardingAssign(BaseModel):
    employee_id: str = Field(min_length=1)
    task_ids: list[str] = Field(min_length=1)
    notes: str | None = None
    due_date: date | None = None


class OnboardingStatusUpdate(BaseModel):
    status: OnboardingStatus
    notes: str | None = None
    completed_by: str | None = None


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class DocumentPatch(PartialUpdate):
    not_null = frozenset({"name", "type", "status"})

    name: str | None = Field(default=None, min_length=1, max_length=200)
    type: DocumentType | None = None
    expiration_date: date | None = None
    notes: str | None = None
    status: DocumentStatus | None = None


class DocumentPut(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    type: DocumentType
    status: DocumentStatus
    expiration_date: date | None = None
    notes: str | None = None


# ---------------------------------------------------------------------------
# Dependents
# ---------------------------------------------------------------------------


class DependentCreate(BaseModel):
    full_name: str = Field(min_length=2, max_length=200)
    cpf: str | None = Field(default=None, max_length=14)
    birth_date: date
    relationship: DependentRelationship
    gender: Gender
    birth_certificate_number: str | None = None
    has_disability: bool = False
    is_student: bool = False
    notes: str | None = None

    @model_validator(mode="after")
    def _birth_date_not_in_future(self) -> DependentCreate:
        if self.birth_date > date.today():
            msg = "birth_date cannot be in the future"
            raise ValueError(msg)
        return self


class DependentUpdate(PartialUpdate):
    not_null = frozenset(
        {"full_name", "birth_date", "relationship", "gender", "has_disability", "is_student"}
    )

    full_name: str | None = Field(default=None, min_length=2, max_length=200)
    cpf: str | None = Field(default=None, max_length=14)
    birth_date: date | None = None
    relationship: DependentRelationship | None = None
    gender: Gender | None = None
    birth_certificate_number: str | None = None
    has_disability: bool | None = None
    is_student: bool | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _birth_date_not_in_future(self) -> DependentUpdate:
        if self.birth_date is not None and self.birth_date > date.today():
            msg = "birth_date cannot be in the future"
            raise ValueError(msg)
        return self


# ---------------------------------------------------------------------------
# Time off
# ---------------------------------------------------------------------------


class TimeOffCreate(BaseModel):
    employee_id: str | None = None
    type: TimeOffType
    start_date: date
    end_date: date
    reason: str = Field(min_length=3, max_length=1000)

    @model_validator(mode="after")
    def _end_not_before_start(self) -> TimeOffCreate:
        if self.end_date < self.start_date:
            msg = "end_date must be on or after start_date"
            raise ValueError(msg)
        return self


class TimeOffStatusUpdate(BaseModel):
    status: TimeOffStatus


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------


class AddressCreate(BaseModel):
    street: str = Field(min_length=3, max_length=200)
    number: str = Field(min_length=1, max_length=20)
    complement: str | None = Field(default=None, max_length=200)
    neighborhood: str = Field(min_length=2, max_length=200)
    postal_code: str = Field(min_length=8, max_length=10)
    city: str = Field(min_length=2, max_length=200)
    state: str = Field(min_length=2, max_length=100)
    country: str = Field(default="Brasil", min_length=2, max_length=100)


class AddressUpdate(PartialUpdate):
    not_null = frozenset(
        {"street", "number", "neighborhood", "postal_code", "city", "state", "country"}
    )

    street: str | None = Field(default=None, min_length=3, max_length=200)
    number: str | None = Field(default=None, min_length=1, max_length=20)
    complement: str | None = Field(default=None, max_length=200)
    neighborhood: str | None = Field(default=None, min_length=2, max_length=200)
    postal_code: str | None = Field(default=None, min_length=8, max_length=10)
    city: str | None = Field(default=None, min_length=2, max_length=200)
    state: str | None = Field(default=None, min_length=2, max_length=100)
    country: str | None = Field(default=None, min_length=2, max_length=100)
