"""Closed vocabulary of modules and actions used by the capability matrix."""

from dataclasses import dataclass
from enum import Enum as PyEnum


class Module(str, PyEnum):
    """Every module a capability can name. Unknown names never resolve."""

    DASHBOARD = "dashboard"
    STUDENTS = "students"
    ATTENDANCE = "attendance"
    TEACHERS = "teachers"
    DEPARTMENTS = "departments"
    SUBJECTS = "subjects"
    TIMETABLE = "timetable"
    EXAMS = "exams"
    FEES = "fees"
    SALARY = "salary"
    TRANSPORT = "transport"
    LIBRARY = "library"
    HOSTEL = "hostel"
    LEAVES = "leaves"
    HOLIDAYS = "holidays"
    REPORTS = "reports"
    NOTIFICATIONS = "notifications"
    WORKLOAD = "workload"
    USER_MANAGEMENT = "user_management"
    ROLES = "roles"
    AUDIT_LOGS = "audit_logs"
    BACKUP = "backup"
    SETTINGS = "settings"
    PROFILE = "profile"


class Action(str, PyEnum):
    VIEW = "view"
    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"


@dataclass(frozen=True)
class Capability:
    """A (module, action) pair, written "<module>:<action>" in route code."""

    module: Module
    action: Action

    @classmethod
    def parse(cls, value: str) -> "Capability":
        """
        Parse "fees:add" into Capability(Module.FEES, Action.ADD).

        Raises:
            ValueError: If the string is malformed or names an unknown
                module or action. Route modules call this at import time,
                so a typo fails loudly instead of granting or denying
                silently.
        """
        module_name, sep, action_name = value.partition(":")
        if not sep:
            raise ValueError(f"Capability must look like '<module>:<action>', got {value!r}")
        try:
            return cls(Module(module_name), Action(action_name))
        except ValueError:
            raise ValueError(f"Unknown capability {value!r}") from None

    def __str__(self) -> str:
        return f"{self.module.value}:{self.action.value}"


@dataclass(frozen=True)
class PermissionSet:
    """Resolved grants of one principal on one module"""

    can_view: bool = False
    can_add: bool = False
    can_edit: bool = False
    can_delete: bool = False

    def allows(self, action: Action) -> bool:
        return {
            Action.VIEW: self.can_view,
            Action.ADD: self.can_add,
            Action.EDIT: self.can_edit,
            Action.DELETE: self.can_delete,
        }[action]


NO_ACCESS = PermissionSet()
FULL_ACCESS = PermissionSet(True, True, True, True)
VIEW_ONLY = PermissionSet(can_view=True)
VIEW_ADD_EDIT = PermissionSet(can_view=True, can_add=True, can_edit=True)
