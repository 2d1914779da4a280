"""Employee admission and management routes."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query

from foome.access.context import ResourceTenancy, TenancyContext
from foome.access.policy import Action, enforce
from foome.exceptions import ConflictError
from foome.models.api import EmployeeCreate, EmployeeStatusUpdate, EmployeeUpdate
from foome.services.employees import EmployeeService
from foome.storage.object_store import ObjectStore
from foome.types import EmployeeStatus
from foome.web.dependencies import (
    get_employee_service,
    get_object_store,
    load_employee,
    require_tenancy,
)
from foome.web.responses import dump, ok

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/employees", tags=["employees"])


@router.get("")
async def list_employees(
    status: EmployeeStatus | None = Query(default=None),
    department: str | None = Query(default=None),
    search: str | None = Query(default=None, max_length=100),
    tenancy: TenancyContext = Depends(require_tenancy),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    enforce(tenancy, ResourceTenancy(tenancy.company_id), Action.EMPLOYEE_LIST)
    rows = await employees.list_all(
        tenancy.company_id,
        status=status.value if status else None,
        department=department,
        search=search,
    )
    return ok([dump(e) for e in rows], message=f"{len(rows)} employees found")


@router.get("/departments")
async def list_departments(
    tenancy: TenancyContext = Depends(require_tenancy),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    enforce(tenancy, ResourceTenancy(tenancy.company_id), Action.EMPLOYEE_LIST)
    return ok(await employees.departments(tenancy.company_id))


@router.post("", status_code=201)
async def admit_employee(
    body: EmployeeCreate,
    tenancy: TenancyContext = Depends(require_tenancy),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    enforce(tenancy, ResourceTenancy(tenancy.company_id), Action.EMPLOYEE_CREATE)
    employee = await employees.create(
        tenancy.company_id, body.model_dump(), created_by=tenancy.employee_id
    )
    return ok(dump(employee), message="Employee admitted")


@router.get("/{employee_id}")
async def get_employee(
    employee_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    employee = await load_employee(employees, employee_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.EMPLOYEE_VIEW)
    return ok(dump(employee))


@router.put("/{employee_id}")
async def update_employee(
    employee_id: str,
    body: EmployeeUpdate,
    tenancy: TenancyContext = Depends(require_tenancy),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    employee = await load_employee(employees, employee_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.EMPLOYEE_UPDATE)
    data = body.model_dump(exclude_unset=True)
    if employee.id == tenancy.employee_id and "is_admin" in data and data["is_admin"] is not True:
        raise ConflictError("Administrators cannot revoke their own admin access")
    employee = await employees.update(employee, data)
    return ok(dump(employee), message="Employee updated")


@router.patch("/{employee_id}/status")
async def update_employee_status(
    employee_id: str,
    body: EmployeeStatusUpdate,
    tenancy: TenancyContext = Depends(require_tenancy),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    employee = await load_employee(employees, employee_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.EMPLOYEE_UPDATE)
    employee = await employees.set_status(employee, body.status.value)
    return ok(dump(employee), message="Employee status updated")


@router.delete("/{employee_id}")
async def delete_employee(
    employee_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    employees: EmployeeService = Depends(get_employee_service),
    store: ObjectStore = Depends(get_object_store),
) -> dict[str, Any]:
    employee = await load_employee(employees, employee_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.EMPLOYEE_DELETE)
    if employee.id == tenancy.employee_id:
        raise ConflictError("You cannot delete your own employee record")
    for key in await employees.delete(employee):
        await store.delete(key)
    return ok(message="Employee deleted")
