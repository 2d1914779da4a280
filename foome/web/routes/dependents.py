"""Employee dependent routes."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends

from foome.access.context import ResourceTenancy, TenancyContext
from foome.access.policy import Action, enforce
from foome.exceptions import NotFoundError
from foome.models.api import DependentCreate, DependentUpdate
from foome.models.database import Employee, EmployeeDependent
from foome.services.dependents import DependentService
from foome.services.employees import EmployeeService
from foome.web.dependencies import (
    get_dependent_service,
    get_employee_service,
    load_employee,
    require_tenancy,
)
from foome.web.responses import dump, ok

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["dependents"])


async def _load_dependent(
    dependents: DependentService, dependent_id: str
) -> tuple[EmployeeDependent, Employee]:
    found = await dependents.get(dependent_id)
    if found is None:
        raise NotFoundError("Dependent not found")
    return found


@router.get("/employees/{employee_id}/dependents")
async def list_dependents(
    employee_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    employees: EmployeeService = Depends(get_employee_service),
    dependents: DependentService = Depends(get_dependent_service),
) -> dict[str, Any]:
    employee = await load_employee(employees, employee_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.DEPENDENT_VIEW)
    return ok([dump(d) for d in await dependents.list_for_employee(employee.id)])


@router.post("/employees/{employee_id}/dependents", status_code=201)
async def create_dependent(
    employee_id: str,
    body: DependentCreate,
    tenancy: TenancyContext = Depends(require_tenancy),
    employees: EmployeeService = Depends(get_employee_service),
    dependents: DependentService = Depends(get_dependent_service),
) -> dict[str, Any]:
    employee = await load_employee(employees, employee_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.DEPENDENT_CREATE)
    dependent = await dependents.create(employee, body.model_dump())
    return ok(dump(dependent), message="Dependent created")


@router.get("/dependents/{dependent_id}")
async def get_dependent(
    dependent_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    dependents: DependentService = Depends(get_dependent_service),
) -> dict[str, Any]:
    dependent, employee = await _load_dependent(dependents, dependent_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.DEPENDENT_VIEW)
    return ok(dump(dependent))


@router.put("/dependents/{dependent_id}")
async def update_dependent(
    dependent_id: str,
    body: DependentUpdate,
    tenancy: TenancyContext = Depends(require_tenancy),
    dependents: DependentService = Depends(get_dependent_service),
) -> dict[str, Any]:
    dependent, employee = await _load_dependent(dependents, dependent_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.DEPENDENT_UPDATE)
    dependent = await dependents.update(dependent, body.model_dump(exclude_unset=True))
    return ok(dump(dependent), message="Dependent updated")


@router.delete("/dependents/{dependent_id}")
async def delete_dependent(
    dependent_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    dependents: DependentService = Depends(get_dependent_service),
) -> dict[str, Any]:
    dependent, employee = await _load_dependent(dependents, dependent_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.DEPENDENT_DELETE)
    await dependents.delete(dependent)
    return ok(message="Dependent deleted")
