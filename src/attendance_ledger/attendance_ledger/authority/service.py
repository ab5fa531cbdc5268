from __future__ import annotations

from typing import FrozenSet, Optional

from ..core.enums import Role
from ..core.exceptions import Unauthorized
from ..employees.model import Employee
from . import model as auth

# Lowest tier allowed to action requests at all; customization cannot lift an
# Employee above it.
MIN_APPROVER_LEVEL = Role.MANAGER.level


class RoleAuthorityModel:
    """Answers "may this actor do X" from authority sets, never from role names.

    The role only picks the default set (and the approver floor); a customized
    set on the employee always replaces the default.
    """

    def effective_authorities(self, employee: Employee) -> FrozenSet[str]:
        if employee.authorities is not None:
            return frozenset(employee.authorities)
        return auth.ROLE_DEFAULT_AUTHORITIES[employee.role]

    def has_authority(self, employee: Employee, authority: str) -> bool:
        return employee.is_active and authority in self.effective_authorities(employee)

    def can_submit(self, actor: Employee) -> bool:
        return self.has_authority(actor, auth.SUBMIT_REQUESTS) or self.has_authority(actor, auth.SUBMIT_OWN_REQUESTS)

    def can_approve_requests(self, actor: Employee) -> bool:
        if actor.role_level < MIN_APPROVER_LEVEL:
            return False
        return any(
            self.has_authority(actor, a)
            for a in (auth.ACTION_ALL_REQUESTS, auth.ACTION_MANAGER_REQUESTS, auth.ACTION_EMPLOYEE_REQUESTS)
        )

    def can_action_request(self, actor: Employee, author: Employee) -> bool:
        """Whether `actor` may approve or reject a request submitted by `author`."""

        if not self.can_approve_requests(actor):
            return False
        if self.has_authority(actor, auth.ACTION_ALL_REQUESTS):
            return True
        if actor.employee_id == author.employee_id:
            return False
        if author.role == Role.EMPLOYEE:
            return self.has_authority(actor, auth.ACTION_EMPLOYEE_REQUESTS) or self.has_authority(
                actor, auth.ACTION_MANAGER_REQUESTS
            )
        if author.role == Role.MANAGER:
            return self.has_authority(actor, auth.ACTION_MANAGER_REQUESTS)
        return False

    def can_revoke(self, actor: Employee, reviewer: Optional[Employee]) -> bool:
        """Revocation needs the revoke authority and a tier at least the original reviewer's."""

        if not self.has_authority(actor, auth.REVOKE_ACTIONS):
            return False
        if reviewer is None:
            return True
        return actor.role_level >= reviewer.role_level

    def can_view_employee(self, actor: Employee, target_id: str) -> bool:
        if actor.employee_id == target_id:
            return actor.is_active
        return any(
            self.has_authority(actor, a) for a in (auth.VIEW_ALL_ANALYTICS, auth.VIEW_ANALYTICS, auth.VIEW_EMPLOYEES_INFO)
        )

    def require(self, allowed: bool, message: str) -> None:
        if not allowed:
            raise Unauthorized(message)
