"""Company registration: a principal without tenancy creates a company and becomes its admin."""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: TC002 - runtime DI type

from foome.exceptions import ConflictError
from foome.models.database import Company, Employee

logger = structlog.get_logger(__name__)


def normalize_cnpj(cnpj: str) -> str:
    return "".join(ch for ch in cnpj if ch.isdigit())


class CompanyService:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get(self, company_id: str) -> Company | None:
        return await self._db.get(Company, company_id)

    async def get_by_cnpj(self, cnpj: str) -> Company | None:
        stmt = select(Company).where(col(Company.cnpj) == normalize_cnpj(cnpj))
        return (await self._db.execute(stmt)).scalars().first()

    async def create_with_admin(
        self,
        user_id: str,
        name: str,
        cnpj: str,
        size_range: str | None,
        admin: dict[str, Any],
    ) -> tuple[Company, Employee]:
        """Create the company and the caller's admin employee record in one transaction."""
        existing = await self._db.execute(select(Employee).where(col(Employee.user_id) == user_id))
        if existing.scalars().first() is not None:
            raise ConflictError("User already belongs to a company")
        if await self.get_by_cnpj(cnpj):
            raise ConflictError("CNPJ already registered")

        company = Company(
            name=name,
            cnpj=normalize_cnpj(cnpj),
            size_range=size_range,
            created_by=user_id,
        )
        employee = Employee(
            company_id=company.id,
            user_id=user_id,
            full_name=admin["full_name"],
            email=str(admin["email"]).lower(),
            phone=admin.get("phone"),
            position=admin.get("position"),
            department=admin.get("department"),
            is_admin=True,
            created_by=user_id,
        )
        try:
            self._db.add(company)
            await self._db.flush()
            self._db.add(employee)
            await self._db.commit()
        except IntegrityError as exc:
            await self._db.rollback()
            raise ConflictError("Company or admin already registered") from exc
        await self._db.refresh(company)
        await self._db.refresh(employee)
        logger.info("company_created", company_id=company.id, admin_employee_id=employee.id)
        return company, employee
