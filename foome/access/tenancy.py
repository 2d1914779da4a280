"""Maps an authenticated principal to its company membership."""

from __future__ import annotations

import structlog
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: TC002 - runtime DI type

from foome.access.context import Principal, TenancyContext
from foome.models.database import Employee

logger = structlog.get_logger(__name__)


async def resolve_tenancy(db: AsyncSession, principal: Principal | None) -> TenancyContext | None:
    """Look up the employee record owned by ``principal``.

    Returns None when the principal is absent or has no employee record yet
    (the caller still needs to register a company).
    """
    if principal is None:
        return None

    stmt = select(Employee).where(col(Employee.user_id) == principal.user_id)
    employee = (await db.execute(stmt)).scalars().first()
    if employee is None:
        logger.debug("tenancy_not_found", user_id=principal.user_id)
        return None

    return TenancyContext(
        company_id=employee.company_id,
        employee_id=employee.id,
        user_id=principal.user_id,
        is_admin=bool(employee.is_admin),
    )
