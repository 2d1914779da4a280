"""Teams, subteams and their memberships."""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, delete, select
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: TC002 - runtime DI type

from foome.exceptions import ConflictError, NotFoundError
from foome.models.database import (
    Employee,
    Role,
    Subteam,
    SubteamMember,
    Team,
    TeamMember,
    _utc_now,
)

logger = structlog.get_logger(__name__)


class TeamService:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    # -- teams --------------------------------------------------------------

    async def get(self, team_id: str) -> Team | None:
        return await self._db.get(Team, team_id)

    async def list_all(self, company_id: str, search: str | None = None) -> list[Team]:
        stmt = select(Team).where(col(Team.company_id) == company_id)
        if search:
            stmt = stmt.where(col(Team.name).ilike(f"%{search}%"))
        stmt = stmt.order_by(col(Team.name))
        return list((await self._db.execute(stmt)).scalars().all())

    async def member_counts(self, team_ids: list[str]) -> dict[str, int]:
        if not team_ids:
            return {}
        stmt = select(TeamMember.team_id).where(col(TeamMember.team_id).in_(team_ids))
        counts: dict[str, int] = dict.fromkeys(team_ids, 0)
        for (team_id,) in (await self._db.execute(stmt)).all():
            counts[team_id] += 1
        return counts

    async def create(self, company_id: str, data: dict[str, Any], created_by: str) -> Team:
        team = Team(company_id=company_id, created_by=created_by, **data)
        self._db.add(team)
        await self._db.commit()
        await self._db.refresh(team)
        logger.info("team_created", team_id=team.id, company_id=company_id)
        return team

    async def update(self, team: Team, data: dict[str, Any]) -> Team:
        for key, value in data.items():
            setattr(team, key, value)
        team.updated_at = _utc_now()
        self._db.add(team)
        await self._db.commit()
        await self._db.refresh(team)
        logger.info("team_updated", team_id=team.id, fields=sorted(data))
        return team

    async def delete(self, team: Team) -> None:
        """Delete the team with its subteams and memberships."""
        tid = team.id
        subteam_ids = select(Subteam.id).where(col(Subteam.team_id) == tid)
        await self._db.execute(
            delete(SubteamMember).where(col(SubteamMember.subteam_id).in_(subteam_ids))
        )
        await self._db.execute(delete(Subteam).where(col(Subteam.team_id) == tid))
        await self._db.execute(delete(TeamMember).where(col(TeamMember.team_id) == tid))
        await self._db.execute(update(Role).where(col(Role.team_id) == tid).values(team_id=None))
        await self._db.delete(team)
        await self._db.commit()
        logger.info("team_deleted", team_id=tid)

    # -- team members -------------------------------------------------------

    async def members(self, team_id: str) -> list[Employee]:
        stmt = (
            select(Employee)
            .join(TeamMember, col(TeamMember.employee_id) == col(Employee.id))
            .where(col(TeamMember.team_id) == team_id)
            .order_by(col(Employee.full_name))
        )
        return list((await self._db.execute(stmt)).scalars().all())

    async def get_membership(self, team_id: str, employee_id: str) -> TeamMember | None:
        stmt = select(TeamMember).where(
            col(TeamMember.team_id) == team_id, col(TeamMember.employee_id) == employee_id
        )
        return (await self._db.execute(stmt)).scalars().first()

    async def add_member(self, team: Team, employee_id: str) -> TeamMember:
        if await self.get_membership(team.id, employee_id):
            raise ConflictError("Employee is already a member of this team")
        member = TeamMember(team_id=team.id, employee_id=employee_id)
        self._db.add(member)
        await self._commit("Employee is already a member of this team")
        await self._db.refresh(member)
        logger.info("team_member_added", team_id=team.id, employee_id=employee_id)
        return member

    async def remove_member(self, team: Team, employee_id: str) -> None:
        """Remove the employee from the team and from every subteam of it."""
        member = await self.get_membership(team.id, employee_id)
        if member is None:
            raise NotFoundError("Employee is not a member of this team")
        subteam_ids = select(Subteam.id).where(col(Subteam.team_id) == team.id)
        await self._db.execute(
            delete(SubteamMember).where(
                col(SubteamMember.subteam_id).in_(subteam_ids),
                col(SubteamMember.employee_id) == employee_id,
            )
        )
        await self._db.delete(member)
        await self._db.commit()
        logger.info("team_member_removed", team_id=team.id, employee_id=employee_id)

    # -- subteams -----------------------------------------------------------

    async def get_subteam(self, team: Team, subteam_id: str) -> Subteam | None:
        """Return the subteam only when it belongs to ``team``."""
        subteam = await self._db.get(Subteam, subteam_id)
        if subteam is None or subteam.team_id != team.id:
            return None
        return subteam

    async def list_subteams(self, team_id: str) -> list[Subteam]:
        stmt = select(Subteam).where(col(Subteam.team_id) == team_id).order_by(col(Subteam.name))
        return list((await self._db.execute(stmt)).scalars().all())

    async def create_subteam(self, team: Team, data: dict[str, Any], created_by: str) -> Subteam:
        subteam = Subteam(team_id=team.id, created_by=created_by, **data)
        self._db.add(subteam)
        await self._db.commit()
        await self._db.refresh(subteam)
        logger.info("subteam_created", team_id=team.id, subteam_id=subteam.id)
        return subteam

    async def update_subteam(self, subteam: Subteam, data: dict[str, Any]) -> Subteam:
        for key, value in data.items():
            setattr(subteam, key, value)
        subteam.updated_at = _utc_now()
        self._db.add(subteam)
        await self._db.commit()
        await self._db.refresh(subteam)
        logger.info("subteam_updated", subteam_id=subteam.id, fields=sorted(data))
        return subteam

    async def delete_subteam(self, subteam: Subteam) -> None:
        sid = subteam.id
        await self._db.execute(delete(SubteamMember).where(col(SubteamMember.subteam_id) == sid))
        await self._db.delete(subteam)
        await self._db.commit()
        logger.info("subteam_deleted", subteam_id=sid)

    # -- subteam members ----------------------------------------------------

    async def subteam_members(self, subteam_id: str) -> list[Employee]:
        stmt = (
            select(Employee)
            .join(SubteamMember, col(SubteamMember.employee_id) == col(Employee.id))
            .where(col(SubteamMember.subteam_id) == subteam_id)
            .order_by(col(Employee.full_name))
        )
        return list((await self._db.execute(stmt)).scalars().all())

    async def get_subteam_membership(
        self, subteam_id: str, employee_id: str
    ) -> SubteamMember | None:
        stmt = select(SubteamMember).where(
            col(SubteamMember.subteam_id) == subteam_id,
            col(SubteamMember.employee_id) == employee_id,
        )
        return (await self._db.execute(stmt)).scalars().first()

    async def add_subteam_member(
        self, subteam: Subteam, employee_id: str, added_by: str
    ) -> SubteamMember:
        """Add a member; they must already belong to the parent team."""
        if await self.get_membership(subteam.team_id, employee_id) is None:
            raise ConflictError(
                "Employee must be a member of the parent team first",
                details={"team_id": subteam.team_id, "employee_id": employee_id},
            )
        if await self.get_subteam_membership(subteam.id, employee_id):
            raise ConflictError("Employee is already a member of this subteam")

        member = SubteamMember(subteam_id=subteam.id, employee_id=employee_id, added_by=added_by)
        self._db.add(member)
        await self._commit("Employee is already a member of this subteam")
        await self._db.refresh(member)
        logger.info("subteam_member_added", subteam_id=subteam.id, employee_id=employee_id)
        return member

    async def remove_subteam_member(self, subteam: Subteam, employee_id: str) -> None:
        member = await self.get_subteam_membership(subteam.id, employee_id)
        if member is None:
            raise NotFoundError("Employee is not a member of this subteam")
        await self._db.delete(member)
        await self._db.commit()
        logger.info("subteam_member_removed", subteam_id=subteam.id, employee_id=employee_id)

    async def _commit(self, conflict_message: str) -> None:
        try:
            await self._db.commit()
        except IntegrityError as exc:
            await self._db.rollback()
            raise ConflictError(conflict_message) from exc
