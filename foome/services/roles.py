"""Job roles and their assignment history."""

from __future__ import annotations

from datetime import date
from typing import Any

import structlog
from sqlalchemy import update
from sqlmodel import col, delete, select
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: TC002 - runtime DI type

from foome.exceptions import ConflictError, ValidationError
from foome.models.database import Employee, Role, RoleEmployee, _utc_now

logger = structlog.get_logger(__name__)


class RoleService:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get(self, role_id: str) -> Role | None:
        return await self._db.get(Role, role_id)

    async def list_all(
        self,
        company_id: str,
        include_inactive: bool = False,
        search: str | None = None,
        team_id: str | None = None,
    ) -> list[Role]:
        stmt = select(Role).where(col(Role.company_id) == company_id)
        if not include_inactive:
            stmt = stmt.where(col(Role.active).is_(True))
        if search:
            stmt = stmt.where(col(Role.title).ilike(f"%{search}%"))
        if team_id:
            stmt = stmt.where(col(Role.team_id) == team_id)
        stmt = stmt.order_by(col(Role.title))
        return list((await self._db.execute(stmt)).scalars().all())

    async def create(self, company_id: str, data: dict[str, Any]) -> Role:
        role = Role(company_id=company_id, **data)
        self._db.add(role)
        await self._db.commit()
        await self._db.refresh(role)
        logger.info("role_created", role_id=role.id, company_id=company_id)
        return role

    async def update(self, role: Role, data: dict[str, Any]) -> Role:
        for key, value in data.items():
            setattr(role, key, value)
        role.updated_at = _utc_now()
        self._db.add(role)
        await self._db.commit()
        await self._db.refresh(role)
        logger.info("role_updated", role_id=role.id, fields=sorted(data))
        return role

    async def delete(self, role: Role) -> None:
        rid = role.id
        await self._db.execute(delete(RoleEmployee).where(col(RoleEmployee.role_id) == rid))
        await self._db.delete(role)
        await self._db.commit()
        logger.info("role_deleted", role_id=rid)

    async def current_employees(self, role_id: str) -> list[Employee]:
        stmt = (
            select(Employee)
            .join(RoleEmployee, col(RoleEmployee.employee_id) == col(Employee.id))
            .where(col(RoleEmployee.role_id) == role_id, col(RoleEmployee.is_current).is_(True))
            .order_by(col(Employee.full_name))
        )
        return list((await self._db.execute(stmt)).scalars().all())

    async def assign(
        self, role: Role, employee_id: str, start_date: date | None = None
    ) -> RoleEmployee:
        """Make ``role`` the employee's current role, closing the previous assignment."""
        start = start_date or date.today()
        await self._db.execute(
            update(RoleEmployee)
            .where(
                col(RoleEmployee.employee_id) == employee_id,
                col(RoleEmployee.is_current).is_(True),
            )
            .values(is_current=False, end_date=start)
        )
        assignment = RoleEmployee(role_id=role.id, employee_id=employee_id, start_date=start)
        self._db.add(assignment)
        await self._db.commit()
        await self._db.refresh(assignment)
        logger.info("role_assigned", role_id=role.id, employee_id=employee_id)
        return assignment

    async def get_assignment(self, assignment_id: str) -> tuple[RoleEmployee, Employee] | None:
        stmt = (
            select(RoleEmployee, Employee)
            .join(Employee, col(Employee.id) == col(RoleEmployee.employee_id))
            .where(col(RoleEmployee.id) == assignment_id)
        )
        row = (await self._db.execute(stmt)).first()
        if row is None:
            return None
        assignment, employee = row
        return assignment, employee

    async def end_assignment(
        self, assignment: RoleEmployee, end_date: date | None = None
    ) -> RoleEmployee:
        if not assignment.is_current:
            raise ConflictError("Role assignment has already ended")
        end = end_date or date.today()
        if end < assignment.start_date:
            raise ValidationError(
                "end_date cannot be before the assignment start date",
                details={"start_date": assignment.start_date.isoformat()},
            )
        assignment.is_current = False
        assignment.end_date = end
        self._db.add(assignment)
        await self._db.commit()
        await self._db.refresh(assignment)
        logger.info(
            "role_assignment_ended",
            assignment_id=assignment.id,
            role_id=assignment.role_id,
            employee_id=assignment.employee_id,
        )
        return assignment

    async def history(self, employee_id: str) -> list[tuple[RoleEmployee, Role]]:
        stmt = (
            select(RoleEmployee, Role)
            .join(Role, col(Role.id) == col(RoleEmployee.role_id))
            .where(col(RoleEmployee.employee_id) == employee_id)
            .order_by(col(RoleEmployee.start_date).desc(), col(RoleEmployee.created_at).desc())
        )
        return [(assignment, role) for assignment, role in (await self._db.execute(stmt)).all()]
