"""Authentication routes: registration, login/logout, profile, email confirmation, password reset."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request, Response

from foome.access.context import Principal, TenancyContext
from foome.access.identity import SessionAuth
from foome.config.settings import get_settings
from foome.exceptions import NotFoundError, ValidationError
from foome.models.api import (
    ConfirmEmailRequest,
    EmailOnlyRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from foome.services.accounts import AccountService
from foome.services.companies import CompanyService
from foome.services.employees import EmployeeService
from foome.web.dependencies import (
    get_account_service,
    get_company_service,
    get_employee_service,
    get_session_auth,
    get_tenancy,
    require_principal,
)
from foome.web.responses import dump, dump_user, ok

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        max_age=settings.session_max_age,
    )


@router.post("/register", status_code=201)
async def register(
    body: RegisterRequest,
    response: Response,
    accounts: AccountService = Depends(get_account_service),
    employees: EmployeeService = Depends(get_employee_service),
    sessions: SessionAuth = Depends(get_session_auth),
) -> dict[str, Any]:
    user = await accounts.register(body.full_name, body.email, body.password, body.phone)
    if accounts.requires_confirmation:
        return ok(
            {"user": dump_user(user)},
            message="Account created. Check your email to confirm it.",
            requireEmailConfirmation=True,
        )

    await employees.link_user(user)
    _set_session_cookie(response, await sessions.create_session(user.id))
    return ok(
        {"user": dump_user(user)},
        message="Account created",
        requireEmailConfirmation=False,
    )


@router.post("/login")
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    accounts: AccountService = Depends(get_account_service),
    sessions: SessionAuth = Depends(get_session_auth),
) -> dict[str, Any]:
    user = await accounts.authenticate(body.email, body.password)
    _set_session_cookie(response, await sessions.create_session(user.id))
    logger.info(
        "user_logged_in",
        user_id=user.id,
        ip_address=request.client.host if request.client else "",
    )
    return ok({"user": dump_user(user)}, message="Logged in")


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    sessions: SessionAuth = Depends(get_session_auth),
) -> dict[str, Any]:
    settings = get_settings()
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        await sessions.destroy_session(token)
    response.delete_cookie(settings.session_cookie_name)
    return ok(message="Logged out")


@router.get("/user")
async def current_user(
    principal: Principal = Depends(require_principal),
    tenancy: TenancyContext | None = Depends(get_tenancy),
    accounts: AccountService = Depends(get_account_service),
    companies: CompanyService = Depends(get_company_service),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    user = await accounts.get(principal.user_id)
    if user is None:
        raise NotFoundError("User not found")

    data: dict[str, Any] = {
        **dump_user(user),
        "company": None,
        "employee": None,
        "is_admin": False,
    }
    if tenancy is not None:
        company = await companies.get(tenancy.company_id)
        employee = await employees.get(tenancy.employee_id)
        data["company"] = dump(company) if company else None
        data["employee"] = dump(employee) if employee else None
        data["is_admin"] = tenancy.is_admin
    return ok(data)


@router.post("/confirm")
async def confirm_email(
    body: ConfirmEmailRequest,
    accounts: AccountService = Depends(get_account_service),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    user = await accounts.confirm_email(body.token)
    await employees.link_user(user)
    return ok({"user": dump_user(user)}, message="Email confirmed")


@router.post("/resend-confirmation")
async def resend_confirmation(
    body: EmailOnlyRequest,
    accounts: AccountService = Depends(get_account_service),
) -> dict[str, Any]:
    await accounts.resend_confirmation(body.email)
    return ok(message="If the account exists and is unconfirmed, a new email was sent")


@router.post("/forgot-password")
async def forgot_password(
    body: EmailOnlyRequest,
    accounts: AccountService = Depends(get_account_service),
) -> dict[str, Any]:
    await accounts.request_password_reset(body.email)
    return ok(message="If the account exists, a reset link was sent")


@router.post("/reset-password")
async def reset_password(
    body: ResetPasswordRequest,
    accounts: AccountService = Depends(get_account_service),
    sessions: SessionAuth = Depends(get_session_auth),
) -> dict[str, Any]:
    if body.password != body.confirm_password:
        raise ValidationError("Passwords do not match", details={"field": "confirm_password"})
    user = await accounts.reset_password(body.token, body.password)
    await sessions.destroy_user_sessions(user.id)
    return ok(message="Password updated")
