"""Onboarding task catalog and per-employee onboarding assignments."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

import structlog
from sqlalchemy import func, or_
from sqlalchemy.orm import aliased
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: TC002 - runtime DI type

from foome.exceptions import ConflictError
from foome.models.database import (
    Employee,
    EmployeeOnboarding,
    OnboardingTask,
    _utc_now,
)
from foome.types import OnboardingStatus

logger = structlog.get_logger(__name__)


def _to_dict(
    onboarding: EmployeeOnboarding,
    employee: Employee,
    task: OnboardingTask,
    completed_by_name: str | None = None,
) -> dict[str, Any]:
    return {
        "id": onboarding.id,
        "employee_id": onboarding.employee_id,
        "task_id": onboarding.task_id,
        "status": onboarding.status,
        "due_date": onboarding.due_date.isoformat() if onboarding.due_date else None,
        "notes": onboarding.notes,
        "completed_at": onboarding.completed_at.isoformat() if onboarding.completed_at else None,
        "completed_by": onboarding.completed_by,
        "created_at": onboarding.created_at.isoformat(),
        "updated_at": onboarding.updated_at.isoformat(),
        "employee": {"id": employee.id, "full_name": employee.full_name},
        "task": {
            "id": task.id,
            "name": task.name,
            "description": task.description,
            "category": task.category,
            "is_required": task.is_required,
        },
        "completed_by_employee": (
            {"full_name": completed_by_name} if completed_by_name is not None else None
        ),
    }


class OnboardingService:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    # -- task catalog -------------------------------------------------------

    async def get_task(self, task_id: str) -> OnboardingTask | None:
        return await self._db.get(OnboardingTask, task_id)

    async def get_tasks(self, task_ids: list[str]) -> list[OnboardingTask]:
        stmt = select(OnboardingTask).where(col(OnboardingTask.id).in_(task_ids))
        return list((await self._db.execute(stmt)).scalars().all())

    async def list_tasks(
        self,
        company_id: str,
        category: str | None = None,
        search: str | None = None,
    ) -> list[OnboardingTask]:
        stmt = select(OnboardingTask).where(col(OnboardingTask.company_id) == company_id)
        if category:
            stmt = stmt.where(col(OnboardingTask.category) == category)
        if search:
            stmt = stmt.where(col(OnboardingTask.name).ilike(f"%{search}%"))
        stmt = stmt.order_by(col(OnboardingTask.name))
        return list((await self._db.execute(stmt)).scalars().all())

    async def create_task(self, company_id: str, data: dict[str, Any]) -> OnboardingTask:
        task = OnboardingTask(company_id=company_id, **data)
        self._db.add(task)
        await self._db.commit()
        await self._db.refresh(task)
        logger.info("onboarding_task_created", task_id=task.id, company_id=company_id)
        return task

    async def update_task(self, task: OnboardingTask, data: dict[str, Any]) -> OnboardingTask:
        for key, value in data.items():
            setattr(task, key, value)
        task.updated_at = _utc_now()
        self._db.add(task)
        await self._db.commit()
        await self._db.refresh(task)
        logger.info("onboarding_task_updated", task_id=task.id, fields=sorted(data))
        return task

    async def delete_task(self, task: OnboardingTask) -> None:
        """Delete a task that has never been assigned."""
        stmt = select(func.count()).where(col(EmployeeOnboarding.task_id) == task.id)
        assigned = (await self._db.execute(stmt)).scalar_one()
        if assigned:
            raise ConflictError(
                "Task is assigned to employees and cannot be deleted",
                details={"assignments": assigned},
            )
        tid = task.id
        await self._db.delete(task)
        await self._db.commit()
        logger.info("onboarding_task_deleted", task_id=tid)

    # -- assignments --------------------------------------------------------

    async def get_for_company(
        self, onboarding_id: str, company_id: str
    ) -> tuple[EmployeeOnboarding, Employee] | None:
        """Fetch an assignment through its employee, scoped to ``company_id``.

        An assignment of another company is indistinguishable from a missing one.
        """
        stmt = (
            select(EmployeeOnboarding, Employee)
            .join(Employee, col(Employee.id) == col(EmployeeOnboarding.employee_id))
            .where(
                col(EmployeeOnboarding.id) == onboarding_id,
                col(Employee.company_id) == company_id,
            )
        )
        row = (await self._db.execute(stmt)).first()
        if row is None:
            return None
        onboarding, employee = row
        return onboarding, employee

    async def detail(self, onboarding: EmployeeOnboarding) -> dict[str, Any]:
        rows = await self._query(col(EmployeeOnboarding.id) == onboarding.id)
        return rows[0]

    async def list_all(
        self,
        company_id: str,
        employee_id: str | None = None,
        status: str | None = None,
        search: str | None = None,
    ) -> list[dict[str, Any]]:
        """List the company's assignments, newest first.

        ``employee_id`` narrows to one employee; ``search`` matches the task
        name or the employee's name, case-insensitively.
        """
        clauses: list[Any] = [col(Employee.company_id) == company_id]
        if employee_id:
            clauses.append(col(EmployeeOnboarding.employee_id) == employee_id)
        if status:
            clauses.append(col(EmployeeOnboarding.status) == status)
        if search:
            pattern = f"%{search}%"
            clauses.append(
                or_(col(OnboardingTask.name).ilike(pattern), col(Employee.full_name).ilike(pattern))
            )
        return await self._query(*clauses)

    async def _query(self, *clauses: Any) -> list[dict[str, Any]]:
        completer = aliased(Employee)
        stmt = (
            select(EmployeeOnboarding, Employee, OnboardingTask, completer.full_name)
            .join(Employee, col(Employee.id) == col(EmployeeOnboarding.employee_id))
            .join(OnboardingTask, col(OnboardingTask.id) == col(EmployeeOnboarding.task_id))
            .outerjoin(completer, completer.id == col(EmployeeOnboarding.completed_by))
            .where(*clauses)
            .order_by(col(EmployeeOnboarding.created_at).desc(), col(EmployeeOnboarding.id))
        )
        rows = (await self._db.execute(stmt)).all()
        return [_to_dict(o, e, t, name) for o, e, t, name in rows]

    async def assign(
        self,
        employee: Employee,
        tasks: list[OnboardingTask],
        notes: str | None = None,
        due_date: date | None = None,
    ) -> list[EmployeeOnboarding]:
        """Assign ``tasks`` to ``employee``.

        Without an explicit ``due_date`` each assignment is due
        ``task.default_due_days`` from today.
        """
        today = date.today()
        created = [
            EmployeeOnboarding(
                employee_id=employee.id,
                task_id=task.id,
                notes=notes,
                due_date=due_date or today + timedelta(days=task.default_due_days),
            )
            for task in tasks
        ]
        self._db.add_all(created)
        await self._db.commit()
        for onboarding in created:
            await self._db.refresh(onboarding)
        logger.info(
            "onboarding_assigned",
            employee_id=employee.id,
            task_ids=[t.id for t in tasks],
        )
        return created

    async def update_status(
        self,
        onboarding: EmployeeOnboarding,
        status: str,
        completed_by: str | None = None,
        notes: str | None = None,
    ) -> EmployeeOnboarding:
        onboarding.status = status
        if status == OnboardingStatus.COMPLETED:
            onboarding.completed_at = _utc_now()
            onboarding.completed_by = completed_by
        else:
            onboarding.completed_at = None
            onboarding.completed_by = None
        if notes is not None:
            onboarding.notes = notes
        onboarding.updated_at = _utc_now()
        self._db.add(onboarding)
        await self._db.commit()
        await self._db.refresh(onboarding)
        logger.info("onboarding_status_changed", onboarding_id=onboarding.id, status=status)
        return onboarding

    async def delete(self, onboarding: EmployeeOnboarding) -> None:
        oid = onboarding.id
        await self._db.delete(onboarding)
        await self._db.commit()
        logger.info("onboarding_deleted", onboarding_id=oid)
