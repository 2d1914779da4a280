"""Caller identity and tenancy values carried through each request."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """The authenticated caller. Never persisted by the access layer."""

    user_id: str


@dataclass(frozen=True, slots=True)
class TenancyContext:
    """A principal's company membership, resolved fresh for every request."""

    company_id: str
    employee_id: str
    user_id: str
    is_admin: bool = False


@dataclass(frozen=True, slots=True)
class ResourceTenancy:
    """Tenancy fields of a target resource, as needed by the policy evaluator.

    ``owner_employee_id`` is set for employee-scoped resources (documents,
    onboarding assignments, photos, dependents, the employee record itself).
    """

    company_id: str
    owner_employee_id: str | None = None
