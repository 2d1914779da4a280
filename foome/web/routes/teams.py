"""Team and subteam CRUD plus membership management."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query

from foome.access.context import ResourceTenancy, TenancyContext
from foome.access.policy import Action, enforce
from foome.exceptions import NotFoundError
from foome.models.api import MemberAdd, SubteamCreate, SubteamUpdate, TeamCreate, TeamUpdate
from foome.models.database import Subteam, Team
from foome.services.employees import EmployeeService
from foome.services.teams import TeamService
from foome.web.dependencies import (
    get_employee_service,
    get_team_service,
    load_employee,
    require_tenancy,
)
from foome.web.responses import dump, ok

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/teams", tags=["teams"])


async def _load_team(teams: TeamService, team_id: str) -> Team:
    team = await teams.get(team_id)
    if team is None:
        raise NotFoundError("Team not found")
    return team


async def _load_subteam(teams: TeamService, team: Team, subteam_id: str) -> Subteam:
    subteam = await teams.get_subteam(team, subteam_id)
    if subteam is None:
        raise NotFoundError("Subteam not found")
    return subteam


async def _check_employee(
    employees: EmployeeService,
    tenancy: TenancyContext,
    employee_id: str,
    action: Action,
) -> None:
    """The referenced employee must exist and belong to the caller's company."""
    employee = await load_employee(employees, employee_id)
    enforce(tenancy, ResourceTenancy(employee.company_id), action)


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------


@router.get("")
async def list_teams(
    search: str | None = Query(default=None, max_length=100),
    tenancy: TenancyContext = Depends(require_tenancy),
    teams: TeamService = Depends(get_team_service),
) -> dict[str, Any]:
    enforce(tenancy, ResourceTenancy(tenancy.company_id), Action.TEAM_VIEW)
    rows = await teams.list_all(tenancy.company_id, search=search)
    counts = await teams.member_counts([t.id for t in rows])
    return ok([{**dump(t), "member_count": counts.get(t.id, 0)} for t in rows])


@router.post("", status_code=201)
async def create_team(
    body: TeamCreate,
    tenancy: TenancyContext = Depends(require_tenancy),
    teams: TeamService = Depends(get_team_service),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    enforce(tenancy, ResourceTenancy(tenancy.company_id), Action.TEAM_CREATE)
    if body.manager_id:
        await _check_employee(employees, tenancy, body.manager_id, Action.TEAM_CREATE)
    team = await teams.create(tenancy.company_id, body.model_dump(), tenancy.employee_id)
    return ok(dump(team), message="Team created")


@router.get("/{team_id}")
async def get_team(
    team_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    teams: TeamService = Depends(get_team_service),
) -> dict[str, Any]:
    team = await _load_team(teams, team_id)
    enforce(tenancy, ResourceTenancy(team.company_id), Action.TEAM_VIEW)
    members = await teams.members(team.id)
    subteams = await teams.list_subteams(team.id)
    return ok(
        {
            **dump(team),
            "members": [dump(m) for m in members],
            "subteams": [dump(s) for s in subteams],
        }
    )


@router.put("/{team_id}")
async def update_team(
    team_id: str,
    body: TeamUpdate,
    tenancy: TenancyContext = Depends(require_tenancy),
    teams: TeamService = Depends(get_team_service),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    team = await _load_team(teams, team_id)
    enforce(tenancy, ResourceTenancy(team.company_id), Action.TEAM_UPDATE)
    data = body.model_dump(exclude_unset=True)
    if data.get("manager_id"):
        await _check_employee(employees, tenancy, data["manager_id"], Action.TEAM_UPDATE)
    team = await teams.update(team, data)
    return ok(dump(team), message="Team updated")


@router.delete("/{team_id}")
async def delete_team(
    team_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    teams: TeamService = Depends(get_team_service),
) -> dict[str, Any]:
    team = await _load_team(teams, team_id)
    enforce(tenancy, ResourceTenancy(team.company_id), Action.TEAM_DELETE)
    await teams.delete(team)
    return ok(message="Team deleted")


# ---------------------------------------------------------------------------
# Team members
# ---------------------------------------------------------------------------


@router.get("/{team_id}/members")
async def list_team_members(
    team_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    teams: TeamService = Depends(get_team_service),
) -> dict[str, Any]:
    team = await _load_team(teams, team_id)
    enforce(tenancy, ResourceTenancy(team.company_id), Action.TEAM_VIEW)
    return ok([dump(m) for m in await teams.members(team.id)])


@router.post("/{team_id}/members")
async def add_team_member(
    team_id: str,
    body: MemberAdd,
    tenancy: TenancyContext = Depends(require_tenancy),
    teams: TeamService = Depends(get_team_service),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    team = await _load_team(teams, team_id)
    enforce(tenancy, ResourceTenancy(team.company_id), Action.TEAM_MEMBER_ADD)
    await _check_employee(employees, tenancy, body.employee_id, Action.TEAM_MEMBER_ADD)
    member = await teams.add_member(team, body.employee_id)
    return ok(dump(member), message="Member added to team")


@router.delete("/{team_id}/members/{employee_id}")
async def remove_team_member(
    team_id: str,
    employee_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    teams: TeamService = Depends(get_team_service),
) -> dict[str, Any]:
    team = await _load_team(teams, team_id)
    enforce(tenancy, ResourceTenancy(team.company_id), Action.TEAM_MEMBER_REMOVE)
    await teams.remove_member(team, employee_id)
    return ok(message="Member removed from team")


# ---------------------------------------------------------------------------
# Subteams
# ---------------------------------------------------------------------------


@router.get("/{team_id}/subteams")
async def list_subteams(
    team_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    teams: TeamService = Depends(get_team_service),
) -> dict[str, Any]:
    team = await _load_team(teams, team_id)
    enforce(tenancy, ResourceTenancy(team.company_id), Action.TEAM_VIEW)
    return ok([dump(s) for s in await teams.list_subteams(team.id)])


@router.post("/{team_id}/subteams", status_code=201)
async def create_subteam(
    team_id: str,
    body: SubteamCreate,
    tenancy: TenancyContext = Depends(require_tenancy),
    teams: TeamService = Depends(get_team_service),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    team = await _load_team(teams, team_id)
    enforce(tenancy, ResourceTenancy(team.company_id), Action.SUBTEAM_CREATE)
    if body.manager_id:
        await _check_employee(employees, tenancy, body.manager_id, Action.SUBTEAM_CREATE)
    subteam = await teams.create_subteam(team, body.model_dump(), tenancy.employee_id)
    return ok(dump(subteam), message="Subteam created")


@router.get("/{team_id}/subteams/{subteam_id}")
async def get_subteam(
    team_id: str,
    subteam_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    teams: TeamService = Depends(get_team_service),
) -> dict[str, Any]:
    team = await _load_team(teams, team_id)
    subteam = await _load_subteam(teams, team, subteam_id)
    enforce(tenancy, ResourceTenancy(team.company_id), Action.TEAM_VIEW)
    members = await teams.subteam_members(subteam.id)
    return ok({**dump(subteam), "members": [dump(m) for m in members]})


@router.put("/{team_id}/subteams/{subteam_id}")
async def update_subteam(
    team_id: str,
    subteam_id: str,
    body: SubteamUpdate,
    tenancy: TenancyContext = Depends(require_tenancy),
    teams: TeamService = Depends(get_team_service),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    team = await _load_team(teams, team_id)
    subteam = await _load_subteam(teams, team, subteam_id)
    enforce(tenancy, ResourceTenancy(team.company_id), Action.SUBTEAM_UPDATE)
    data = body.model_dump(exclude_unset=True)
    if data.get("manager_id"):
        await _check_employee(employees, tenancy, data["manager_id"], Action.SUBTEAM_UPDATE)
    subteam = await teams.update_subteam(subteam, data)
    return ok(dump(subteam), message="Subteam updated")


@router.delete("/{team_id}/subteams/{subteam_id}")
async def delete_subteam(
    team_id: str,
    subteam_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    teams: TeamService = Depends(get_team_service),
) -> dict[str, Any]:
    team = await _load_team(teams, team_id)
    subteam = await _load_subteam(teams, team, subteam_id)
    enforce(tenancy, ResourceTenancy(team.company_id), Action.SUBTEAM_DELETE)
    await teams.delete_subteam(subteam)
    return ok(message="Subteam deleted")


@router.post("/{team_id}/subteams/{subteam_id}/members")
async def add_subteam_member(
    team_id: str,
    subteam_id: str,
    body: MemberAdd,
    tenancy: TenancyContext = Depends(require_tenancy),
    teams: TeamService = Depends(get_team_service),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    team = await _load_team(teams, team_id)
    subteam = await _load_subteam(teams, team, subteam_id)
    enforce(tenancy, ResourceTenancy(team.company_id), Action.SUBTEAM_MEMBER_ADD)
    await _check_employee(employees, tenancy, body.employee_id, Action.SUBTEAM_MEMBER_ADD)
    member = await teams.add_subteam_member(subteam, body.employee_id, tenancy.employee_id)
    return ok(dump(member), message="Member added to subteam")


@router.delete("/{team_id}/subteams/{subteam_id}/members/{employee_id}")
async def remove_subteam_member(
    team_id: str,
    subteam_id: str,
    employee_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    teams: TeamService = Depends(get_team_service),
) -> dict[str, Any]:
    team = await _load_team(teams, team_id)
    subteam = await _load_subteam(teams, team, subteam_id)
    enforce(tenancy, ResourceTenancy(team.company_id), Action.SUBTEAM_MEMBER_REMOVE)
    await teams.remove_subteam_member(subteam, employee_id)
    return ok(message="Member removed from subteam")
