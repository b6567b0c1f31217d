"""System role and lifecycle status enums."""

from enum import Enum as PyEnum


class SystemRole(str, PyEnum):
    """
    Built-in roles every school has.

    - ADMIN   - full access to every module, manages roles and users
    - TEACHER - view/add/edit on teaching modules, no delete
    - STUDENT - view-only on the student-facing modules
    - PARENT  - view-only on the parent-facing modules

    System roles cannot be deleted. A school widens or narrows what a
    particular user may do by assigning a custom role (see CustomRole).
    """

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"


class EntityStatus(str, PyEnum):
    """Lifecycle status shared by students, subjects and departments"""

    ACTIVE = "active"
    INACTIVE = "inactive"
