"""
Capability matrix: resolves (role | custom role, module) -> view/add/edit/delete.

Resolution order:
1. If the principal has a custom role and that role lists the module, the
   role's four booleans win outright (no merging with defaults).
2. Otherwise the built-in defaults of the principal's system role apply.
3. A module absent from both resolves to no access.

Unknown modules and disabled custom roles never grant anything.
"""
import logging

from schoolcore.models.capability import (
    FULL_ACCESS,
    NO_ACCESS,
    VIEW_ADD_EDIT,
    VIEW_ONLY,
    Module,
    PermissionSet,
)
from schoolcore.models.principal import Principal
from schoolcore.models.role import SystemRole
from schoolcore.repositories.custom_role_repository import CustomRoleRepository

logger = logging.getLogger(__name__)

VIEW_EDIT = PermissionSet(can_view=True, can_edit=True)

DEFAULT_MATRIX: dict[SystemRole, dict[Module, PermissionSet]] = {
    SystemRole.ADMIN: {module: FULL_ACCESS for module in Module},
    SystemRole.TEACHER: {
        Module.DASHBOARD: VIEW_ONLY,
        Module.STUDENTS: VIEW_ONLY,
        Module.ATTENDANCE: VIEW_ADD_EDIT,
        Module.TEACHERS: VIEW_ONLY,
        Module.DEPARTMENTS: VIEW_ONLY,
        Module.SUBJECTS: VIEW_ONLY,
        Module.TIMETABLE: VIEW_ADD_EDIT,
        Module.EXAMS: VIEW_ADD_EDIT,
        Module.FEES: VIEW_ADD_EDIT,
        Module.SALARY: VIEW_ONLY,
        Module.LIBRARY: VIEW_ADD_EDIT,
        Module.LEAVES: VIEW_ADD_EDIT,
        Module.HOLIDAYS: VIEW_ONLY,
        Module.REPORTS: VIEW_ONLY,
        Module.NOTIFICATIONS: VIEW_ONLY,
        Module.WORKLOAD: VIEW_ONLY,
        Module.PROFILE: VIEW_EDIT,
    },
    SystemRole.STUDENT: {
        Module.DASHBOARD: VIEW_ONLY,
        Module.ATTENDANCE: VIEW_ONLY,
        Module.DEPARTMENTS: VIEW_ONLY,
        Module.SUBJECTS: VIEW_ONLY,
        Module.TIMETABLE: VIEW_ONLY,
        Module.EXAMS: VIEW_ONLY,
        Module.FEES: VIEW_ONLY,
        Module.LIBRARY: VIEW_ONLY,
        Module.LEAVES: VIEW_ONLY,
        Module.HOLIDAYS: VIEW_ONLY,
        Module.NOTIFICATIONS: VIEW_ONLY,
        Module.PROFILE: VIEW_EDIT,
    },
    SystemRole.PARENT: {
        Module.DASHBOARD: VIEW_ONLY,
        Module.STUDENTS: VIEW_ONLY,
        Module.ATTENDANCE: VIEW_ONLY,
        Module.EXAMS: VIEW_ONLY,
        Module.FEES: VIEW_ONLY,
        Module.TRANSPORT: VIEW_ONLY,
        Module.LEAVES: VIEW_ONLY,
        Module.HOLIDAYS: VIEW_ONLY,
        Module.NOTIFICATIONS: VIEW_ONLY,
        Module.PROFILE: VIEW_EDIT,
    },
}


def default_permissions(role: SystemRole, module: Module) -> PermissionSet:
    """Built-in grants of a system role on a module (deny when unlisted)."""
    return DEFAULT_MATRIX.get(role, {}).get(module, NO_ACCESS)


class PermissionResolver:
    """
    Resolves permission sets for one request.

    Custom roles are loaded at most once per resolver and resolved sets are
    memoised, so guarding several capabilities in one request costs a
    single role lookup.
    """

    def __init__(self, role_repo: CustomRoleRepository):
        self.role_repo = role_repo
        self._role_cache: dict[tuple[int, int], dict[str, PermissionSet] | None] = {}
        self._resolved: dict[tuple, PermissionSet] = {}

    def _custom_role_grants(self, school_id: int, custom_role_id: int) -> dict[str, PermissionSet] | None:
        key = (school_id, custom_role_id)
        if key not in self._role_cache:
            role = self.role_repo.get_active(custom_role_id, school_id)
            if role is None:
                # Deleted, disabled or foreign roles fall back to defaults
                logger.info(
                    "Custom role %s not active in school %s; using role defaults",
                    custom_role_id,
                    school_id,
                )
                self._role_cache[key] = None
            else:
                self._role_cache[key] = {
                    p.module: PermissionSet(p.can_view, p.can_add, p.can_edit, p.can_delete)
                    for p in role.permissions
                }
        return self._role_cache[key]

    def resolve_permissions(
        self,
        school_id: int,
        role: SystemRole,
        custom_role_id: int | None,
        module: Module | str,
    ) -> PermissionSet:
        """
        Resolve the four grants for a module.

        Args:
            school_id: School the custom role must belong to
            role: Built-in role of the principal
            custom_role_id: Optional school-defined role
            module: Module enum or its string id; unknown ids deny

        Returns:
            PermissionSet (all False when nothing grants access)
        """
        try:
            module = Module(module)
        except ValueError:
            return NO_ACCESS

        key = (school_id, role, custom_role_id, module)
        if key in self._resolved:
            return self._resolved[key]

        permissions = None
        if custom_role_id is not None:
            grants = self._custom_role_grants(school_id, custom_role_id)
            if grants is not None:
                permissions = grants.get(module.value)
        if permissions is None:
            permissions = default_permissions(role, module)

        self._resolved[key] = permissions
        return permissions

    def resolve_for(self, principal: Principal, module: Module | str) -> PermissionSet:
        """
        Resolve grants for an authenticated principal.

        A non-admin principal with an explicit allowed-module list gets no
        access to modules outside that list, whatever its role grants.
        """
        module_id = module.value if isinstance(module, Module) else module
        if (
            principal.allowed_modules
            and not principal.is_admin()
            and module_id not in principal.allowed_modules
        ):
            return NO_ACCESS
        return self.resolve_permissions(
            principal.school_id, principal.role, principal.custom_role_id, module
        )

    def resolve_all(self, principal: Principal) -> dict[str, PermissionSet]:
        """Grants for every known module, keyed by module id"""
        return {module.value: self.resolve_for(principal, module) for module in Module}
