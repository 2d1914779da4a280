"""Access policy evaluator.

A single decision table for every resource action. Handlers fetch the target
resource first (so a missing row is NotFound), then ask :func:`evaluate` with
the resource's tenancy fields, and only mutate on ``Allow``.

Rules, first match wins:

1. no tenancy                                  -> Deny(unauthenticated)
2. resource company != caller company          -> Deny(cross-tenant)
3. admin-only action and caller is not admin   -> Deny(admin-required)
4. self-or-admin action, caller is not admin
   and does not own the resource               -> Deny(forbidden)
5. otherwise                                   -> Allow
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

import structlog

from foome.access.context import ResourceTenancy, TenancyContext
from foome.exceptions import AuthenticationError, AuthorizationError

logger = structlog.get_logger(__name__)


class Scope(StrEnum):
    TENANT = "tenant"  # any employee of the owning company
    SELF_OR_ADMIN = "self_or_admin"
    ADMIN = "admin"


class DenyReason(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    CROSS_TENANT = "cross-tenant"
    ADMIN_REQUIRED = "admin-required"
    FORBIDDEN = "forbidden"


class Action(StrEnum):
    COMPANY_VIEW = "company.view"

    EMPLOYEE_LIST = "employee.list"
    EMPLOYEE_VIEW = "employee.view"
    EMPLOYEE_CREATE = "employee.create"
    EMPLOYEE_UPDATE = "employee.update"
    EMPLOYEE_DELETE = "employee.delete"

    TEAM_VIEW = "team.view"
    TEAM_CREATE = "team.create"
    TEAM_UPDATE = "team.update"
    TEAM_DELETE = "team.delete"
    TEAM_MEMBER_ADD = "team.member.add"
    TEAM_MEMBER_REMOVE = "team.member.remove"
    SUBTEAM_CREATE = "subteam.create"
    SUBTEAM_UPDATE = "subteam.update"
    SUBTEAM_DELETE = "subteam.delete"
    SUBTEAM_MEMBER_ADD = "subteam.member.add"
    SUBTEAM_MEMBER_REMOVE = "subteam.member.remove"

    ROLE_VIEW = "role.view"
    ROLE_CREATE = "role.create"
    ROLE_UPDATE = "role.update"
    ROLE_DELETE = "role.delete"
    ROLE_ASSIGN = "role.assign"

    ONBOARDING_TASK_VIEW = "onboarding_task.view"
    ONBOARDING_TASK_MANAGE = "onboarding_task.manage"
    ONBOARDING_VIEW = "onboarding.view"
    ONBOARDING_ASSIGN = "onboarding.assign"
    ONBOARDING_UPDATE_STATUS = "onboarding.update_status"
    ONBOARDING_DELETE = "onboarding.delete"

    DOCUMENT_VIEW = "document.view"
    DOCUMENT_CREATE = "document.create"
    DOCUMENT_EDIT = "document.edit"
    DOCUMENT_REVIEW = "document.review"
    DOCUMENT_REPLACE = "document.replace"
    DOCUMENT_DELETE = "document.delete"

    PHOTO_VIEW = "photo.view"
    PHOTO_UPLOAD = "photo.upload"
    PHOTO_DELETE = "photo.delete"

    DEPENDENT_VIEW = "dependent.view"
    DEPENDENT_CREATE = "dependent.create"
    DEPENDENT_UPDATE = "dependent.update"
    DEPENDENT_DELETE = "dependent.delete"

    TIME_OFF_LIST = "time_off.list"
    TIME_OFF_VIEW = "time_off.view"
    TIME_OFF_CREATE = "time_off.create"
    TIME_OFF_REVIEW = "time_off.review"
    TIME_OFF_CANCEL = "time_off.cancel"
    TIME_OFF_DELETE = "time_off.delete"

    ADDRESS_VIEW = "address.view"
    ADDRESS_CREATE = "address.create"
    ADDRESS_UPDATE = "address.update"
    ADDRESS_DELETE = "address.delete"


POLICY: dict[Action, Scope] = {
    Action.COMPANY_VIEW: Scope.TENANT,
    Action.EMPLOYEE_LIST: Scope.TENANT,
    Action.EMPLOYEE_VIEW: Scope.SELF_OR_ADMIN,
    Action.EMPLOYEE_CREATE: Scope.ADMIN,
    Action.EMPLOYEE_UPDATE: Scope.ADMIN,
    Action.EMPLOYEE_DELETE: Scope.ADMIN,
    Action.TEAM_VIEW: Scope.TENANT,
    Action.TEAM_CREATE: Scope.ADMIN,
    Action.TEAM_UPDATE: Scope.ADMIN,
    Action.TEAM_DELETE: Scope.ADMIN,
    Action.TEAM_MEMBER_ADD: Scope.ADMIN,
    Action.TEAM_MEMBER_REMOVE: Scope.ADMIN,
    Action.SUBTEAM_CREATE: Scope.ADMIN,
    Action.SUBTEAM_UPDATE: Scope.ADMIN,
    Action.SUBTEAM_DELETE: Scope.ADMIN,
    Action.SUBTEAM_MEMBER_ADD: Scope.ADMIN,
    Action.SUBTEAM_MEMBER_REMOVE: Scope.ADMIN,
    Action.ROLE_VIEW: Scope.TENANT,
    Action.ROLE_CREATE: Scope.ADMIN,
    Action.ROLE_UPDATE: Scope.ADMIN,
    Action.ROLE_DELETE: Scope.ADMIN,
    Action.ROLE_ASSIGN: Scope.ADMIN,
    Action.ONBOARDING_TASK_VIEW: Scope.TENANT,
    Action.ONBOARDING_TASK_MANAGE: Scope.ADMIN,
    Action.ONBOARDING_VIEW: Scope.SELF_OR_ADMIN,
    Action.ONBOARDING_ASSIGN: Scope.SELF_OR_ADMIN,
    Action.ONBOARDING_UPDATE_STATUS: Scope.SELF_OR_ADMIN,
    Action.ONBOARDING_DELETE: Scope.ADMIN,
    Action.DOCUMENT_VIEW: Scope.SELF_OR_ADMIN,
    Action.DOCUMENT_CREATE: Scope.SELF_OR_ADMIN,
    Action.DOCUMENT_EDIT: Scope.SELF_OR_ADMIN,
    Action.DOCUMENT_REVIEW: Scope.ADMIN,
    Action.DOCUMENT_REPLACE: Scope.ADMIN,
    Action.DOCUMENT_DELETE: Scope.SELF_OR_ADMIN,
    Action.PHOTO_VIEW: Scope.SELF_OR_ADMIN,
    Action.PHOTO_UPLOAD: Scope.SELF_OR_ADMIN,
    Action.PHOTO_DELETE: Scope.SELF_OR_ADMIN,
    Action.DEPENDENT_VIEW: Scope.SELF_OR_ADMIN,
    Action.DEPENDENT_CREATE: Scope.SELF_OR_ADMIN,
    Action.DEPENDENT_UPDATE: Scope.SELF_OR_ADMIN,
    Action.DEPENDENT_DELETE: Scope.SELF_OR_ADMIN,
    Action.TIME_OFF_LIST: Scope.ADMIN,
    Action.TIME_OFF_VIEW: Scope.SELF_OR_ADMIN,
    Action.TIME_OFF_CREATE: Scope.SELF_OR_ADMIN,
    Action.TIME_OFF_REVIEW: Scope.ADMIN,
    Action.TIME_OFF_CANCEL: Scope.SELF_OR_ADMIN,
    Action.TIME_OFF_DELETE: Scope.ADMIN,
    Action.ADDRESS_VIEW: Scope.SELF_OR_ADMIN,
    Action.ADDRESS_CREATE: Scope.SELF_OR_ADMIN,
    Action.ADDRESS_UPDATE: Scope.SELF_OR_ADMIN,
    Action.ADDRESS_DELETE: Scope.SELF_OR_ADMIN,
}


@dataclass(frozen=True, slots=True)
class Decision:
    """Allow, or Deny with a reason."""

    allowed: bool
    reason: DenyReason | None = None

    @classmethod
    def allow(cls) -> Decision:
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> Decision:
        return cls(allowed=False, reason=reason)


_DENY_MESSAGES = {
    DenyReason.UNAUTHENTICATED: "Authentication required",
    DenyReason.CROSS_TENANT: "Access denied to this resource",
    DenyReason.ADMIN_REQUIRED: "Only administrators can perform this operation",
    DenyReason.FORBIDDEN: "You do not have permission to access this resource",
}


def evaluate(
    tenancy: TenancyContext | None,
    resource: ResourceTenancy,
    action: Action,
) -> Decision:
    """Decide whether ``tenancy`` may perform ``action`` on ``resource``."""
    if tenancy is None:
        return Decision.deny(DenyReason.UNAUTHENTICATED)

    if resource.company_id != tenancy.company_id:
        return Decision.deny(DenyReason.CROSS_TENANT)

    scope = POLICY[action]
    if scope is Scope.ADMIN and not tenancy.is_admin:
        return Decision.deny(DenyReason.ADMIN_REQUIRED)

    if (
        scope is Scope.SELF_OR_ADMIN
        and not tenancy.is_admin
        and resource.owner_employee_id != tenancy.employee_id
    ):
        return Decision.deny(DenyReason.FORBIDDEN)

    return Decision.allow()


def enforce(
    tenancy: TenancyContext | None,
    resource: ResourceTenancy,
    action: Action,
) -> None:
    """Evaluate and raise the matching request error on Deny."""
    decision = evaluate(tenancy, resource, action)
    if decision.allowed:
        return

    logger.info(
        "policy_denied",
        action=action.value,
        reason=decision.reason.value if decision.reason else None,
        company_id=tenancy.company_id if tenancy else None,
        employee_id=tenancy.employee_id if tenancy else None,
    )
    reason = decision.reason or DenyReason.FORBIDDEN
    if reason is DenyReason.UNAUTHENTICATED:
        raise AuthenticationError(_DENY_MESSAGES[reason])
    raise AuthorizationError(_DENY_MESSAGES[reason], details={"reason": reason.value})
