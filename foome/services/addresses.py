"""Employee postal addresses."""

from __future__ import annotations

from typing import Any

import structlog
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: TC002 - runtime DI type

from foome.models.database import Employee, EmployeeAddress, _utc_now

logger = structlog.get_logger(__name__)


class AddressService:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get(self, address_id: str) -> tuple[EmployeeAddress, Employee] | None:
        stmt = (
            select(EmployeeAddress, Employee)
            .join(Employee, col(Employee.id) == col(EmployeeAddress.employee_id))
            .where(col(EmployeeAddress.id) == address_id)
        )
        row = (await self._db.execute(stmt)).first()
        if row is None:
            return None
        address, employee = row
        return address, employee

    async def list_for_employee(self, employee_id: str) -> list[EmployeeAddress]:
        stmt = (
            select(EmployeeAddress)
            .where(col(EmployeeAddress.employee_id) == employee_id)
            .order_by(col(EmployeeAddress.created_at))
        )
        return list((await self._db.execute(stmt)).scalars().all())

    async def create(self, employee: Employee, data: dict[str, Any]) -> EmployeeAddress:
        address = EmployeeAddress(employee_id=employee.id, **data)
        self._db.add(address)
        await self._db.commit()
        await self._db.refresh(address)
        logger.info("address_created", address_id=address.id, employee_id=employee.id)
        return address

    async def update(self, address: EmployeeAddress, data: dict[str, Any]) -> EmployeeAddress:
        for key, value in data.items():
            setattr(address, key, value)
        address.updated_at = _utc_now()
        self._db.add(address)
        await self._db.commit()
        await self._db.refresh(address)
        logger.info("address_updated", address_id=address.id, fields=sorted(data))
        return address

    async def delete(self, address: EmployeeAddress) -> None:
        aid = address.id
        await self._db.delete(address)
        await self._db.commit()
        logger.info("address_deleted", address_id=aid)
