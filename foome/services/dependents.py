"""Employee dependents."""

from __future__ import annotations

from typing import Any

import structlog
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: TC002 - runtime DI type

from foome.models.database import Employee, EmployeeDependent, _utc_now

logger = structlog.get_logger(__name__)


class DependentService:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get(self, dependent_id: str) -> tuple[EmployeeDependent, Employee] | None:
        stmt = (
            select(EmployeeDependent, Employee)
            .join(Employee, col(Employee.id) == col(EmployeeDependent.employee_id))
            .where(col(EmployeeDependent.id) == dependent_id)
        )
        row = (await self._db.execute(stmt)).first()
        if row is None:
            return None
        dependent, employee = row
        return dependent, employee

    async def list_for_employee(self, employee_id: str) -> list[EmployeeDependent]:
        stmt = (
            select(EmployeeDependent)
            .where(col(EmployeeDependent.employee_id) == employee_id)
            .order_by(col(EmployeeDependent.birth_date))
        )
        return list((await self._db.execute(stmt)).scalars().all())

    async def create(self, employee: Employee, data: dict[str, Any]) -> EmployeeDependent:
        dependent = EmployeeDependent(employee_id=employee.id, **data)
        self._db.add(dependent)
        await self._db.commit()
        await self._db.refresh(dependent)
        logger.info("dependent_created", dependent_id=dependent.id, employee_id=employee.id)
        return dependent

    async def update(self, dependent: EmployeeDependent, data: dict[str, Any]) -> EmployeeDependent:
        for key, value in data.items():
            setattr(dependent, key, value)
        dependent.updated_at = _utc_now()
        self._db.add(dependent)
        await self._db.commit()
        await self._db.refresh(dependent)
        logger.info("dependent_updated", dependent_id=dependent.id, fields=sorted(data))
        return dependent

    async def delete(self, dependent: EmployeeDependent) -> None:
        dep_id = dependent.id
        await self._db.delete(dependent)
        await self._db.commit()
        logger.info("dependent_deleted", dependent_id=dep_id)
