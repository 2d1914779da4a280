"""Employee records (admission, profile updates, status changes, removal)."""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, delete, select
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: TC002 - runtime DI type

from foome.exceptions import ConflictError
from foome.models.database import (
    Employee,
    EmployeeAddress,
    EmployeeDependent,
    EmployeeDocument,
    EmployeeOnboarding,
    EmployeePhoto,
    RoleEmployee,
    Subteam,
    SubteamMember,
    Team,
    TeamMember,
    TimeOff,
    User,
    _utc_now,
)

logger = structlog.get_logger(__name__)


class EmployeeService:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get(self, employee_id: str) -> Employee | None:
        return await self._db.get(Employee, employee_id)

    async def get_many(self, employee_ids: list[str]) -> list[Employee]:
        if not employee_ids:
            return []
        stmt = select(Employee).where(col(Employee.id).in_(employee_ids))
        return list((await self._db.execute(stmt)).scalars().all())

    async def list_all(
        self,
        company_id: str,
        status: str | None = None,
        department: str | None = None,
        search: str | None = None,
    ) -> list[Employee]:
        stmt = select(Employee).where(col(Employee.company_id) == company_id)
        if status:
            stmt = stmt.where(col(Employee.status) == status)
        if department:
            stmt = stmt.where(col(Employee.department) == department)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    col(Employee.full_name).ilike(pattern),
                    col(Employee.email).ilike(pattern),
                    col(Employee.position).ilike(pattern),
                )
            )
        stmt = stmt.order_by(col(Employee.full_name))
        return list((await self._db.execute(stmt)).scalars().all())

    async def departments(self, company_id: str) -> list[str]:
        stmt = (
            select(Employee.department)
            .where(col(Employee.company_id) == company_id, col(Employee.department).is_not(None))
            .distinct()
            .order_by(col(Employee.department))
        )
        return [d for (d,) in (await self._db.execute(stmt)).all() if d]

    async def create(self, company_id: str, data: dict[str, Any], created_by: str) -> Employee:
        employee = Employee(
            company_id=company_id,
            created_by=created_by,
            **{**data, "email": str(data["email"]).lower()},
        )
        self._db.add(employee)
        await self._commit("Employee conflicts with an existing record")
        await self._db.refresh(employee)
        logger.info("employee_admitted", employee_id=employee.id, company_id=company_id)
        return employee

    async def update(self, employee: Employee, data: dict[str, Any]) -> Employee:
        if "email" in data and data["email"] is not None:
            data["email"] = str(data["email"]).lower()
        for key, value in data.items():
            setattr(employee, key, value)
        employee.updated_at = _utc_now()
        self._db.add(employee)
        await self._commit("Employee conflicts with an existing record")
        await self._db.refresh(employee)
        logger.info("employee_updated", employee_id=employee.id, fields=sorted(data))
        return employee

    async def set_status(self, employee: Employee, status: str) -> Employee:
        previous = employee.status
        employee.status = status
        employee.updated_at = _utc_now()
        self._db.add(employee)
        await self._db.commit()
        await self._db.refresh(employee)
        logger.info(
            "employee_status_changed", employee_id=employee.id, previous=previous, status=status
        )
        return employee

    async def delete(self, employee: Employee) -> list[str]:
        """Hard-delete the employee and every row that references it.

        Returns the object-store keys of the employee's files so the caller can
        remove the blobs once the rows are gone.
        """
        eid = employee.id
        doc_paths = await self._db.execute(
            select(EmployeeDocument.file_path).where(col(EmployeeDocument.employee_id) == eid)
        )
        blob_keys = [p for (p,) in doc_paths.all()]
        photo_paths = await self._db.execute(
            select(EmployeePhoto.admission_photo).where(col(EmployeePhoto.employee_id) == eid)
        )
        blob_keys.extend(p for (p,) in photo_paths.all())

        # No DB cascade: clear references first
        await self._db.execute(
            update(Team).where(col(Team.manager_id) == eid).values(manager_id=None)
        )
        await self._db.execute(
            update(Subteam).where(col(Subteam.manager_id) == eid).values(manager_id=None)
        )
        await self._db.execute(
            update(EmployeeOnboarding)
            .where(col(EmployeeOnboarding.completed_by) == eid)
            .values(completed_by=None)
        )
        await self._db.execute(
            update(TimeOff).where(col(TimeOff.approved_by) == eid).values(approved_by=None)
        )
        for model in (
            SubteamMember,
            TeamMember,
            RoleEmployee,
            EmployeeOnboarding,
            EmployeeDocument,
            EmployeePhoto,
            EmployeeDependent,
            EmployeeAddress,
            TimeOff,
        ):
            await self._db.execute(delete(model).where(col(model.employee_id) == eid))
        await self._db.delete(employee)
        await self._db.commit()
        logger.info("employee_deleted", employee_id=eid, blobs=len(blob_keys))
        return blob_keys

    async def link_user(self, user: User) -> Employee | None:
        """Attach a confirmed user to the single unlinked employee record with their email."""
        stmt = select(Employee).where(
            col(Employee.email) == user.email.lower(), col(Employee.user_id).is_(None)
        )
        candidates = list((await self._db.execute(stmt)).scalars().all())
        if len(candidates) != 1:
            return None
        already = await self._db.execute(select(Employee).where(col(Employee.user_id) == user.id))
        if already.scalars().first() is not None:
            return None

        employee = candidates[0]
        employee.user_id = user.id
        employee.updated_at = _utc_now()
        self._db.add(employee)
        await self._commit("User already linked to an employee")
        logger.info("employee_linked_to_user", employee_id=employee.id, user_id=user.id)
        return employee

    async def _commit(self, conflict_message: str) -> None:
        try:
            await self._db.commit()
        except IntegrityError as exc:
            await self._db.rollback()
            raise ConflictError(conflict_message) from exc
