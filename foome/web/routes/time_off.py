"""Time-off request routes: filing, review, cancellation and the on-leave check."""

from __future__ import annotations

import math
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query

from foome.access.context import ResourceTenancy, TenancyContext
from foome.access.policy import Action, enforce
from foome.exceptions import NotFoundError
from foome.models.api import PageMeta, TimeOffCreate, TimeOffStatusUpdate
from foome.models.database import Employee, TimeOff
from foome.services.employees import EmployeeService
from foome.services.time_off import TimeOffService
from foome.types import TimeOffStatus, TimeOffType
from foome.web.dependencies import (
    get_employee_service,
    get_time_off_service,
    load_employee,
    require_tenancy,
)
from foome.web.responses import ok

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["time-off"])


async def _load_time_off(
    time_off: TimeOffService, time_off_id: str
) -> tuple[TimeOff, Employee]:
    found = await time_off.get(time_off_id)
    if found is None:
        raise NotFoundError("Time-off request not found")
    return found


@router.get("/time-off")
async def list_time_off(
    employee_id: str | None = Query(default=None, alias="employeeId"),
    status: TimeOffStatus | None = Query(default=None),
    type_: TimeOffType | None = Query(default=None, alias="type"),
    search: str | None = Query(default=None, max_length=100),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100, alias="pageSize"),
    tenancy: TenancyContext = Depends(require_tenancy),
    time_off: TimeOffService = Depends(get_time_off_service),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    """List time-off requests.

    Admins get the whole company unless ``employeeId`` narrows it. Anyone
    else gets their own requests.
    """
    if employee_id is None and tenancy.is_admin:
        enforce(tenancy, ResourceTenancy(tenancy.company_id), Action.TIME_OFF_LIST)
        scope_employee_id = None
    else:
        employee = await load_employee(employees, employee_id or tenancy.employee_id)
        enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.TIME_OFF_VIEW)
        scope_employee_id = employee.id

    rows = await time_off.list_all(
        tenancy.company_id,
        employee_id=scope_employee_id,
        status=status.value if status else None,
        type_=type_.value if type_ else None,
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
    return ok(page_rows, message=f"{len(page_rows)} time-off requests found", meta=meta)


@router.post("/time-off", status_code=201)
async def request_time_off(
    body: TimeOffCreate,
    tenancy: TenancyContext = Depends(require_tenancy),
    time_off: TimeOffService = Depends(get_time_off_service),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    employee = await load_employee(employees, body.employee_id or tenancy.employee_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.TIME_OFF_CREATE)
    record = await time_off.create(employee, body.model_dump(exclude={"employee_id"}))
    return ok(await time_off.detail(record), message="Time-off request created")


@router.get("/time-off/{time_off_id}")
async def get_time_off(
    time_off_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    time_off: TimeOffService = Depends(get_time_off_service),
) -> dict[str, Any]:
    record, employee = await _load_time_off(time_off, time_off_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.TIME_OFF_VIEW)
    return ok(await time_off.detail(record))


@router.patch("/time-off/{time_off_id}/status")
async def review_time_off(
    time_off_id: str,
    body: TimeOffStatusUpdate,
    tenancy: TenancyContext = Depends(require_tenancy),
    time_off: TimeOffService = Depends(get_time_off_service),
) -> dict[str, Any]:
    record, employee = await _load_time_off(time_off, time_off_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.TIME_OFF_REVIEW)
    record = await time_off.set_status(record, body.status.value, reviewer_id=tenancy.employee_id)
    return ok(await time_off.detail(record), message="Time-off status updated")


@router.delete("/time-off/{time_off_id}")
async def delete_time_off(
    time_off_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    time_off: TimeOffService = Depends(get_time_off_service),
) -> dict[str, Any]:
    """Owners may withdraw a request while it is pending; admins may delete any."""
    record, employee = await _load_time_off(time_off, time_off_id)
    resource = ResourceTenancy(employee.company_id, employee.id)
    enforce(tenancy, resource, Action.TIME_OFF_CANCEL)
    if record.status != TimeOffStatus.PENDING:
        enforce(tenancy, resource, Action.TIME_OFF_DELETE)
    await time_off.delete(record)
    return ok(message="Time-off request deleted")


@router.get("/employees/{employee_id}/time-off/current")
async def current_time_off(
    employee_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    time_off: TimeOffService = Depends(get_time_off_service),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    employee = await load_employee(employees, employee_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.TIME_OFF_VIEW)
    on_time_off = await time_off.is_on_time_off(employee.id)
    return ok({"employee_id": employee.id, "on_time_off": on_time_off})
