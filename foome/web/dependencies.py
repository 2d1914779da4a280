"""FastAPI dependency injection: per-request session, caller identity, tenancy and services."""

from __future__ import annotations

from functools import lru_cache

import structlog
from fastapi import Depends, Request
from sqlmodel.ext.asyncio.session import AsyncSession

from foome.access.context import Principal, TenancyContext
from foome.access.identity import SessionAuth, resolve_current_principal
from foome.access.tenancy import resolve_tenancy
from foome.config.settings import get_settings
from foome.exceptions import AuthenticationError, NotFoundError
from foome.models.database import Employee
from foome.services.accounts import AccountService
from foome.services.addresses import AddressService
from foome.services.companies import CompanyService
from foome.services.dependents import DependentService
from foome.services.documents import DocumentService
from foome.services.employees import EmployeeService
from foome.services.mailer import Mailer
from foome.services.onboarding import OnboardingService
from foome.services.photos import PhotoService
from foome.services.roles import RoleService
from foome.services.teams import TeamService
from foome.services.time_off import TimeOffService
from foome.storage.database import get_session
from foome.storage.object_store import ObjectStore, create_object_store

logger = structlog.get_logger(__name__)


@lru_cache
def get_object_store() -> ObjectStore:
    """Return the process-wide object store (overridden in tests)."""
    return create_object_store()


# ---------------------------------------------------------------------------
# Identity and tenancy
# ---------------------------------------------------------------------------


def get_session_auth(db: AsyncSession = Depends(get_session)) -> SessionAuth:
    settings = get_settings()
    return SessionAuth(db, settings.secret_key, settings.session_max_age)


async def get_principal(
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> Principal | None:
    settings = get_settings()
    return await resolve_current_principal(
        db,
        request.cookies.get(settings.session_cookie_name),
        settings.secret_key,
        settings.session_max_age,
    )


async def require_principal(
    principal: Principal | None = Depends(get_principal),
) -> Principal:
    if principal is None:
        raise AuthenticationError("Not authenticated")
    return principal


async def get_tenancy(
    principal: Principal | None = Depends(get_principal),
    db: AsyncSession = Depends(get_session),
) -> TenancyContext | None:
    return await resolve_tenancy(db, principal)


async def require_tenancy(
    principal: Principal = Depends(require_principal),
    tenancy: TenancyContext | None = Depends(get_tenancy),
) -> TenancyContext:
    """Authenticated caller with a company. A principal without one must onboard first."""
    if tenancy is None:
        logger.info("tenancy_required", user_id=principal.user_id)
        raise AuthenticationError(
            "Company registration required",
            details={"needs_onboarding": True},
        )
    return tenancy


# ---------------------------------------------------------------------------
# Services (one per request, sharing the request's session)
# ---------------------------------------------------------------------------


def get_account_service(db: AsyncSession = Depends(get_session)) -> AccountService:
    settings = get_settings()
    return AccountService(
        db,
        settings.secret_key,
        Mailer(settings.site_url),
        require_confirmation=settings.require_email_confirmation,
        confirmation_ttl=settings.confirmation_token_ttl,
        reset_ttl=settings.reset_token_ttl,
        hash_iterations=settings.password_hash_iterations,
    )


def get_company_service(db: AsyncSession = Depends(get_session)) -> CompanyService:
    return CompanyService(db)


def get_employee_service(db: AsyncSession = Depends(get_session)) -> EmployeeService:
    return EmployeeService(db)


def get_team_service(db: AsyncSession = Depends(get_session)) -> TeamService:
    return TeamService(db)


def get_role_service(db: AsyncSession = Depends(get_session)) -> RoleService:
    return RoleService(db)


def get_onboarding_service(db: AsyncSession = Depends(get_session)) -> OnboardingService:
    return OnboardingService(db)


def get_document_service(
    db: AsyncSession = Depends(get_session),
    store: ObjectStore = Depends(get_object_store),
) -> DocumentService:
    return DocumentService(db, store)


def get_photo_service(
    db: AsyncSession = Depends(get_session),
    store: ObjectStore = Depends(get_object_store),
) -> PhotoService:
    return PhotoService(db, store)


def get_dependent_service(db: AsyncSession = Depends(get_session)) -> DependentService:
    return DependentService(db)


def get_time_off_service(db: AsyncSession = Depends(get_session)) -> TimeOffService:
    return TimeOffService(db)


def get_address_service(db: AsyncSession = Depends(get_session)) -> AddressService:
    return AddressService(db)


# ---------------------------------------------------------------------------
# Lookups shared by routers
# ---------------------------------------------------------------------------


async def load_employee(employees: EmployeeService, employee_id: str) -> Employee:
    """Fetch an employee or raise NotFound. Tenancy is left to the policy evaluator."""
    employee = await employees.get(employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")
    return employee
