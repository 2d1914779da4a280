"""Job role routes and role assignment history."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query

from foome.access.context import ResourceTenancy, TenancyContext
from foome.access.policy import Action, enforce
from foome.exceptions import NotFoundError
from foome.models.api import (
    RoleActiveUpdate,
    RoleAssign,
    RoleAssignmentEnd,
    RoleCreate,
    RoleUpdate,
)
from foome.models.database import Role
from foome.services.employees import EmployeeService
from foome.services.roles import RoleService
from foome.services.teams import TeamService
from foome.web.dependencies import (
    get_employee_service,
    get_role_service,
    get_team_service,
    load_employee,
    require_tenancy,
)
from foome.web.responses import dump, ok

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["roles"])


async def _load_role(roles: RoleService, role_id: str) -> Role:
    role = await roles.get(role_id)
    if role is None:
        raise NotFoundError("Role not found")
    return role


async def _check_team(
    teams: TeamService, tenancy: TenancyContext, team_id: str, action: Action
) -> None:
    team = await teams.get(team_id)
    if team is None:
        raise NotFoundError("Team not found")
    enforce(tenancy, ResourceTenancy(team.company_id), action)


@router.get("/roles")
async def list_roles(
    include_inactive: bool = Query(default=False),
    search: str | None = Query(default=None, max_length=100),
    team_id: str | None = Query(default=None),
    tenancy: TenancyContext = Depends(require_tenancy),
    roles: RoleService = Depends(get_role_service),
) -> dict[str, Any]:
    enforce(tenancy, ResourceTenancy(tenancy.company_id), Action.ROLE_VIEW)
    rows = await roles.list_all(
        tenancy.company_id, include_inactive=include_inactive, search=search, team_id=team_id
    )
    return ok([dump(r) for r in rows])


@router.post("/roles", status_code=201)
async def create_role(
    body: RoleCreate,
    tenancy: TenancyContext = Depends(require_tenancy),
    roles: RoleService = Depends(get_role_service),
    teams: TeamService = Depends(get_team_service),
) -> dict[str, Any]:
    enforce(tenancy, ResourceTenancy(tenancy.company_id), Action.ROLE_CREATE)
    if body.team_id:
        await _check_team(teams, tenancy, body.team_id, Action.ROLE_CREATE)
    role = await roles.create(tenancy.company_id, body.model_dump())
    return ok(dump(role), message="Role created")


@router.get("/roles/{role_id}")
async def get_role(
    role_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    roles: RoleService = Depends(get_role_service),
) -> dict[str, Any]:
    role = await _load_role(roles, role_id)
    enforce(tenancy, ResourceTenancy(role.company_id), Action.ROLE_VIEW)
    employees = await roles.current_employees(role.id)
    return ok({**dump(role), "employees": [dump(e) for e in employees]})


@router.put("/roles/{role_id}")
async def update_role(
    role_id: str,
    body: RoleUpdate,
    tenancy: TenancyContext = Depends(require_tenancy),
    roles: RoleService = Depends(get_role_service),
    teams: TeamService = Depends(get_team_service),
) -> dict[str, Any]:
    role = await _load_role(roles, role_id)
    enforce(tenancy, ResourceTenancy(role.company_id), Action.ROLE_UPDATE)
    data = body.model_dump(exclude_unset=True)
    if data.get("team_id"):
        await _check_team(teams, tenancy, data["team_id"], Action.ROLE_UPDATE)
    role = await roles.update(role, data)
    return ok(dump(role), message="Role updated")


@router.patch("/roles/{role_id}/active")
async def set_role_active(
    role_id: str,
    body: RoleActiveUpdate,
    tenancy: TenancyContext = Depends(require_tenancy),
    roles: RoleService = Depends(get_role_service),
) -> dict[str, Any]:
    role = await _load_role(roles, role_id)
    enforce(tenancy, ResourceTenancy(role.company_id), Action.ROLE_UPDATE)
    role = await roles.update(role, {"active": body.active})
    return ok(dump(role), message="Role activated" if body.active else "Role deactivated")


@router.delete("/roles/{role_id}")
async def delete_role(
    role_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    roles: RoleService = Depends(get_role_service),
) -> dict[str, Any]:
    role = await _load_role(roles, role_id)
    enforce(tenancy, ResourceTenancy(role.company_id), Action.ROLE_DELETE)
    await roles.delete(role)
    return ok(message="Role deleted")


@router.post("/roles/{role_id}/employees", status_code=201)
async def assign_role(
    role_id: str,
    body: RoleAssign,
    tenancy: TenancyContext = Depends(require_tenancy),
    roles: RoleService = Depends(get_role_service),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    role = await _load_role(roles, role_id)
    enforce(tenancy, ResourceTenancy(role.company_id), Action.ROLE_ASSIGN)
    employee = await load_employee(employees, body.employee_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.ROLE_ASSIGN)
    assignment = await roles.assign(role, employee.id, body.start_date)
    return ok(dump(assignment), message="Role assigned")


@router.patch("/roles/assignments/{assignment_id}/end")
async def end_role_assignment(
    assignment_id: str,
    body: RoleAssignmentEnd | None = None,
    tenancy: TenancyContext = Depends(require_tenancy),
    roles: RoleService = Depends(get_role_service),
) -> dict[str, Any]:
    found = await roles.get_assignment(assignment_id)
    if found is None:
        raise NotFoundError("Role assignment not found")
    assignment, employee = found
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.ROLE_ASSIGN)
    assignment = await roles.end_assignment(assignment, body.end_date if body else None)
    return ok(dump(assignment), message="Role assignment ended")


@router.get("/employees/{employee_id}/roles")
async def employee_role_history(
    employee_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    roles: RoleService = Depends(get_role_service),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    employee = await load_employee(employees, employee_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.EMPLOYEE_VIEW)
    history = await roles.history(employee.id)
    return ok([{**dump(assignment), "role": dump(role)} for assignment, role in history])
