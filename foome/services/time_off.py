"""Time-off requests (vacation, leave) and their approval."""

from __future__ import annotations

from datetime import date
from typing import Any

import structlog
from sqlalchemy import or_
from sqlalchemy.orm import aliased
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: TC002 - runtime DI type

from foome.models.database import Employee, TimeOff, _utc_now
from foome.types import TimeOffStatus

logger = structlog.get_logger(__name__)


def _to_dict(
    record: TimeOff, employee: Employee, approver_name: str | None = None
) -> dict[str, Any]:
    return {
        **record.model_dump(mode="json"),
        "employee": {
            "id": employee.id,
            "full_name": employee.full_name,
            "email": employee.email,
        },
        "approver": {"full_name": approver_name} if approver_name is not None else None,
    }


class TimeOffService:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get(self, time_off_id: str) -> tuple[TimeOff, Employee] | None:
        stmt = (
            select(TimeOff, Employee)
            .join(Employee, col(Employee.id) == col(TimeOff.employee_id))
            .where(col(TimeOff.id) == time_off_id)
        )
        row = (await self._db.execute(stmt)).first()
        if row is None:
            return None
        record, employee = row
        return record, employee

    async def detail(self, record: TimeOff) -> dict[str, Any]:
        rows = await self._query(col(TimeOff.id) == record.id)
        return rows[0]

    async def list_all(
        self,
        company_id: str,
        employee_id: str | None = None,
        status: str | None = None,
        type_: str | None = None,
        search: str | None = None,
    ) -> list[dict[str, Any]]:
        """List the company's requests, latest start date first.

        ``search`` matches the reason or the employee's name, case-insensitively.
        """
        clauses: list[Any] = [col(Employee.company_id) == company_id]
        if employee_id:
            clauses.append(col(TimeOff.employee_id) == employee_id)
        if status:
            clauses.append(col(TimeOff.status) == status)
        if type_:
            clauses.append(col(TimeOff.type) == type_)
        if search:
            pattern = f"%{search}%"
            clauses.append(
                or_(col(TimeOff.reason).ilike(pattern), col(Employee.full_name).ilike(pattern))
            )
        return await self._query(*clauses)

    async def _query(self, *clauses: Any) -> list[dict[str, Any]]:
        approver = aliased(Employee)
        stmt = (
            select(TimeOff, Employee, approver.full_name)
            .join(Employee, col(Employee.id) == col(TimeOff.employee_id))
            .outerjoin(approver, approver.id == col(TimeOff.approved_by))
            .where(*clauses)
            .order_by(col(TimeOff.start_date).desc(), col(TimeOff.created_at).desc())
        )
        rows = (await self._db.execute(stmt)).all()
        return [_to_dict(record, employee, name) for record, employee, name in rows]

    async def create(self, employee: Employee, data: dict[str, Any]) -> TimeOff:
        """File a pending request; ``total_days`` counts both ends of the range."""
        start: date = data["start_date"]
        end: date = data["end_date"]
        record = TimeOff(
            employee_id=employee.id,
            type=data["type"],
            start_date=start,
            end_date=end,
            total_days=(end - start).days + 1,
            reason=data["reason"],
            status=TimeOffStatus.PENDING.value,
        )
        self._db.add(record)
        await self._db.commit()
        await self._db.refresh(record)
        logger.info(
            "time_off_requested",
            time_off_id=record.id,
            employee_id=employee.id,
            total_days=record.total_days,
        )
        return record

    async def set_status(self, record: TimeOff, status: str, reviewer_id: str) -> TimeOff:
        previous = record.status
        record.status = status
        if status == TimeOffStatus.APPROVED:
            record.approved_by = reviewer_id
            record.approved_at = _utc_now()
        else:
            record.approved_by = None
            record.approved_at = None
        record.updated_at = _utc_now()
        self._db.add(record)
        await self._db.commit()
        await self._db.refresh(record)
        logger.info(
            "time_off_status_changed",
            time_off_id=record.id,
            previous=previous,
            status=status,
            reviewer_id=reviewer_id,
        )
        return record

    async def delete(self, record: TimeOff) -> None:
        rid = record.id
        await self._db.delete(record)
        await self._db.commit()
        logger.info("time_off_deleted", time_off_id=rid)

    async def is_on_time_off(self, employee_id: str, on: date | None = None) -> bool:
        """True when an approved request covers ``on`` (today by default)."""
        day = on or date.today()
        stmt = (
            select(TimeOff.id)
            .where(
                col(TimeOff.employee_id) == employee_id,
                col(TimeOff.status) == TimeOffStatus.APPROVED.value,
                col(TimeOff.start_date) <= day,
                col(TimeOff.end_date) >= day,
            )
            .limit(1)
        )
        return (await self._db.execute(stmt)).first() is not None
