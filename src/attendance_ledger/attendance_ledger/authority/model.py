"""Authority strings and the default set each role starts with."""

from __future__ import annotations

from typing import Dict, FrozenSet

from ..core.enums import Role

ACCESS_MANAGER_PORTAL = "Access Manager Portal"
ACCESS_EMPLOYEE_PORTAL = "Access Employee Portal"
ADD_EMPLOYEES = "Add new employees"
EDIT_EMPLOYEES = "Edit Existing Employees"
DELETE_EMPLOYEES = "Delete Employees"
VIEW_EMPLOYEES_INFO = "View Employees Info"
ACTION_ALL_REQUESTS = "Accept and Reject All Requests"
ACTION_MANAGER_REQUESTS = "Accept and Reject Manager Requests"
ACTION_EMPLOYEE_REQUESTS = "Accept and Reject Employee Requests"
DOWNLOAD_REPORTS = "Download Reports"
VIEW_ALL_ANALYTICS = "View All Analytics"
VIEW_ANALYTICS = "View Analytics"
MANAGE_AUTHORITIES = "Manage User Authorities"
VIEW_AUDIT_TRAIL = "View Action Audit Trail"
REVOKE_ACTIONS = "Revoke Manager Actions"
PROMOTE_DEMOTE = "Promote/Demote Users"
SYSTEM_ADMINISTRATION = "System Administration"
SUBMIT_REQUESTS = "Submit Requests"
SUBMIT_OWN_REQUESTS = "Submit Own Requests"
VIEW_OWN_DATA = "View Own Data"
CHECK_IN_OUT = "Check In/Out"

ALL_AUTHORITIES: FrozenSet[str] = frozenset(
    {
        ACCESS_MANAGER_PORTAL,
        ACCESS_EMPLOYEE_PORTAL,
        ADD_EMPLOYEES,
        EDIT_EMPLOYEES,
        DELETE_EMPLOYEES,
        VIEW_EMPLOYEES_INFO,
        ACTION_ALL_REQUESTS,
        ACTION_MANAGER_REQUESTS,
        ACTION_EMPLOYEE_REQUESTS,
        DOWNLOAD_REPORTS,
        VIEW_ALL_ANALYTICS,
        VIEW_ANALYTICS,
        MANAGE_AUTHORITIES,
        VIEW_AUDIT_TRAIL,
        REVOKE_ACTIONS,
        PROMOTE_DEMOTE,
        SYSTEM_ADMINISTRATION,
        SUBMIT_REQUESTS,
        SUBMIT_OWN_REQUESTS,
        VIEW_OWN_DATA,
        CHECK_IN_OUT,
    }
)

ROLE_DEFAULT_AUTHORITIES: Dict[Role, FrozenSet[str]] = {
    Role.ADMIN: frozenset(
        {
            ACCESS_MANAGER_PORTAL,
            ACCESS_EMPLOYEE_PORTAL,
            ADD_EMPLOYEES,
            EDIT_EMPLOYEES,
            DELETE_EMPLOYEES,
            ACTION_ALL_REQUESTS,
            ACTION_MANAGER_REQUESTS,
            DOWNLOAD_REPORTS,
            VIEW_ALL_ANALYTICS,
            MANAGE_AUTHORITIES,
            VIEW_AUDIT_TRAIL,
            REVOKE_ACTIONS,
            PROMOTE_DEMOTE,
            SYSTEM_ADMINISTRATION,
            SUBMIT_OWN_REQUESTS,
            CHECK_IN_OUT,
        }
    ),
    Role.MANAGER: frozenset(
        {
            ACCESS_MANAGER_PORTAL,
            ACCESS_EMPLOYEE_PORTAL,
            VIEW_EMPLOYEES_INFO,
            ACTION_EMPLOYEE_REQUESTS,
            DOWNLOAD_REPORTS,
            VIEW_ANALYTICS,
            SUBMIT_OWN_REQUESTS,
            CHECK_IN_OUT,
        }
    ),
    Role.EMPLOYEE: frozenset(
        {
            ACCESS_EMPLOYEE_PORTAL,
            SUBMIT_REQUESTS,
            VIEW_OWN_DATA,
            CHECK_IN_OUT,
        }
    ),
}
