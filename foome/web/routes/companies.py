"""Company registration and the caller's current company."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends

from foome.access.context import Principal, ResourceTenancy, TenancyContext
from foome.access.policy import Action, enforce
from foome.exceptions import ConflictError, NotFoundError
from foome.models.api import CreateCompanyRequest
from foome.services.companies import CompanyService
from foome.web.dependencies import (
    get_company_service,
    get_tenancy,
    require_principal,
    require_tenancy,
)
from foome.web.responses import dump, ok

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/companies", tags=["companies"])


@router.post("", status_code=201)
async def create_company(
    body: CreateCompanyRequest,
    principal: Principal = Depends(require_principal),
    tenancy: TenancyContext | None = Depends(get_tenancy),
    companies: CompanyService = Depends(get_company_service),
) -> dict[str, Any]:
    if tenancy is not None:
        raise ConflictError("User already belongs to a company")
    company, employee = await companies.create_with_admin(
        principal.user_id,
        body.name,
        body.cnpj,
        body.size_range.value if body.size_range else None,
        body.admin.model_dump(),
    )
    return ok({"company": dump(company), "employee": dump(employee)}, message="Company created")


@router.get("/current")
async def current_company(
    tenancy: TenancyContext = Depends(require_tenancy),
    companies: CompanyService = Depends(get_company_service),
) -> dict[str, Any]:
    company = await companies.get(tenancy.company_id)
    if company is None:
        raise NotFoundError("Company not found")
    enforce(tenancy, ResourceTenancy(company.id), Action.COMPANY_VIEW)
    return ok(dump(company))
