"""Onboarding task catalog and employee onboarding routes."""

from __future__ import annotations

import math
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query

from foome.access.context import ResourceTenancy, TenancyContext
from foome.access.policy import Action, enforce
from foome.exceptions import NotFoundError, ValidationError
from foome.models.api import (
    OnboardingAssign,
    OnboardingStatusUpdate,
    OnboardingTaskCreate,
    OnboardingTaskUpdate,
    PageMeta,
)
from foome.models.database import Employee, EmployeeOnboarding, OnboardingTask
from foome.services.employees import EmployeeService
from foome.services.onboarding import OnboardingService
from foome.types import OnboardingCategory, OnboardingStatus
from foome.web.dependencies import (
    get_employee_service,
    get_onboarding_service,
    load_employee,
    require_tenancy,
)
from foome.web.responses import dump, ok

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/onboarding", tags=["onboarding"])


async def _load_task(onboarding: OnboardingService, task_id: str) -> OnboardingTask:
    task = await onboarding.get_task(task_id)
    if task is None:
        raise NotFoundError("Onboarding task not found")
    return task


async def _load_onboarding(
    onboarding: OnboardingService, tenancy: TenancyContext, onboarding_id: str
) -> tuple[EmployeeOnboarding, Employee]:
    found = await onboarding.get_for_company(onboarding_id, tenancy.company_id)
    if found is None:
        raise NotFoundError("Onboarding not found")
    return found


# ---------------------------------------------------------------------------
# Task catalog
# ---------------------------------------------------------------------------


@router.get("/tasks")
async def list_tasks(
    category: OnboardingCategory | None = Query(default=None),
    search: str | None = Query(default=None, max_length=100),
    tenancy: TenancyContext = Depends(require_tenancy),
    onboarding: OnboardingService = Depends(get_onboarding_service),
) -> dict[str, Any]:
    enforce(tenancy, ResourceTenancy(tenancy.company_id), Action.ONBOARDING_TASK_VIEW)
    tasks = await onboarding.list_tasks(
        tenancy.company_id, category=category.value if category else None, search=search
    )
    return ok([dump(t) for t in tasks])


@router.post("/tasks", status_code=201)
async def create_task(
    body: OnboardingTaskCreate,
    tenancy: TenancyContext = Depends(require_tenancy),
    onboarding: OnboardingService = Depends(get_onboarding_service),
) -> dict[str, Any]:
    enforce(tenancy, ResourceTenancy(tenancy.company_id), Action.ONBOARDING_TASK_MANAGE)
    task = await onboarding.create_task(tenancy.company_id, body.model_dump())
    return ok(dump(task), message="Onboarding task created")


@router.get("/tasks/{task_id}")
async def get_task(
    task_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    onboarding: OnboardingService = Depends(get_onboarding_service),
) -> dict[str, Any]:
    task = await _load_task(onboarding, task_id)
    enforce(tenancy, ResourceTenancy(task.company_id), Action.ONBOARDING_TASK_VIEW)
    return ok(dump(task))


@router.put("/tasks/{task_id}")
async def update_task(
    task_id: str,
    body: OnboardingTaskUpdate,
    tenancy: TenancyContext = Depends(require_tenancy),
    onboarding: OnboardingService = Depends(get_onboarding_service),
) -> dict[str, Any]:
    task = await _load_task(onboarding, task_id)
    enforce(tenancy, ResourceTenancy(task.company_id), Action.ONBOARDING_TASK_MANAGE)
    task = await onboarding.update_task(task, body.model_dump(exclude_unset=True))
    return ok(dump(task), message="Onboarding task updated")


@router.delete("/tasks/{task_id}")
async def delete_task(
    task_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    onboarding: OnboardingService = Depends(get_onboarding_service),
) -> dict[str, Any]:
    task = await _load_task(onboarding, task_id)
    enforce(tenancy, ResourceTenancy(task.company_id), Action.ONBOARDING_TASK_MANAGE)
    await onboarding.delete_task(task)
    return ok(message="Onboarding task deleted")


# ---------------------------------------------------------------------------
# Employee onboarding
# ---------------------------------------------------------------------------


@router.get("")
async def list_onboardings(
    is_admin: bool = Query(default=False, alias="isAdmin"),
    employee_id: str | None = Query(default=None, alias="employeeId"),
    filter_employee_id: str | None = Query(default=None, alias="filterEmployeeId"),
    status: OnboardingStatus | None = Query(default=None),
    search: str | None = Query(default=None, max_length=100),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100, alias="pageSize"),
    tenancy: TenancyContext = Depends(require_tenancy),
    onboarding: OnboardingService = Depends(get_onboarding_service),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    """List onboardings.

    The company-wide view needs ``isAdmin=true`` from a caller who really is an
    admin; anyone else must name the employee whose onboarding they want.
    """
    company_view = is_admin and tenancy.is_admin
    if company_view:
        enforce(tenancy, ResourceTenancy(tenancy.company_id), Action.ONBOARDING_VIEW)
        scope_employee_id = filter_employee_id
    else:
        if not employee_id:
            raise ValidationError("employeeId is required for non-admin users")
        employee = await load_employee(employees, employee_id)
        enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.ONBOARDING_VIEW)
        scope_employee_id = employee.id

    rows = await onboarding.list_all(
        tenancy.company_id,
        employee_id=scope_employee_id,
        status=status.value if status else None,
        search=search,
    )
    total = len(rows)
    start = (page - 1) * page_size
    page_rows = rows[start : start + page_size]
    meta = PageMeta(
        page=page,
        page_size=page_size,
        total_items=total,
        total_pages=math.ceil(total / page_size),
    )
    return ok(page_rows, message=f"{len(page_rows)} onboardings found", meta=meta)


@router.post("", status_code=201)
@router.post("/assign", status_code=201)
async def assign_onboarding(
    body: OnboardingAssign,
    tenancy: TenancyContext = Depends(require_tenancy),
    onboarding: OnboardingService = Depends(get_onboarding_service),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    employee = await load_employee(employees, body.employee_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.ONBOARDING_ASSIGN)

    task_ids = list(dict.fromkeys(body.task_ids))
    tasks = await onboarding.get_tasks(task_ids)
    if len(tasks) != len(task_ids):
        found = {t.id for t in tasks}
        raise NotFoundError(
            "One or more tasks were not found",
            details={"missing": [tid for tid in task_ids if tid not in found]},
        )
    for task in tasks:
        enforce(tenancy, ResourceTenancy(task.company_id), Action.ONBOARDING_TASK_VIEW)

    by_id = {t.id: t for t in tasks}
    created = await onboarding.assign(
        employee, [by_id[tid] for tid in task_ids], notes=body.notes, due_date=body.due_date
    )
    return ok([dump(o) for o in created], message=f"{len(created)} tasks assigned")


@router.get("/{onboarding_id}")
async def get_onboarding(
    onboarding_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    onboarding: OnboardingService = Depends(get_onboarding_service),
) -> dict[str, Any]:
    record, employee = await _load_onboarding(onboarding, tenancy, onboarding_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.ONBOARDING_VIEW)
    return ok(await onboarding.detail(record))


@router.delete("/{onboarding_id}")
async def delete_onboarding(
    onboarding_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    onboarding: OnboardingService = Depends(get_onboarding_service),
) -> dict[str, Any]:
    record, employee = await _load_onboarding(onboarding, tenancy, onboarding_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.ONBOARDING_DELETE)
    await onboarding.delete(record)
    return ok(message="Onboarding deleted")


@router.patch("/{onboarding_id}/status")
async def update_onboarding_status(
    onboarding_id: str,
    body: OnboardingStatusUpdate,
    tenancy: TenancyContext = Depends(require_tenancy),
    onboarding: OnboardingService = Depends(get_onboarding_service),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    record, employee = await _load_onboarding(onboarding, tenancy, onboarding_id)
    enforce(
        tenancy,
        ResourceTenancy(employee.company_id, employee.id),
        Action.ONBOARDING_UPDATE_STATUS,
    )
    completed_by = tenancy.employee_id
    if body.completed_by and body.completed_by != tenancy.employee_id:
        completer = await load_employee(employees, body.completed_by)
        enforce(
            tenancy,
            ResourceTenancy(completer.company_id, completer.id),
            Action.ONBOARDING_UPDATE_STATUS,
        )
        completed_by = completer.id

    record = await onboarding.update_status(
        record, body.status.value, completed_by=completed_by, notes=body.notes
    )
    return ok(await onboarding.detail(record), message="Onboarding status updated")
