import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from schoolcore.core.exceptions import ConflictException, NotFoundException, ValidationException
from schoolcore.models.audit_log import AuditAction
from schoolcore.models.capability import Module
from schoolcore.models.custom_role import CustomRole, RolePermission
from schoolcore.models.principal import Principal
from schoolcore.models.user import User
from schoolcore.repositories.custom_role_repository import CustomRoleRepository
from schoolcore.repositories.user_repository import UserRepository
from schoolcore.schemas.role_schemas import RoleAssignment, RoleCreate, RolePermissionEntry, RoleUpdate
from schoolcore.services.audit_service import AuditRecorder

logger = logging.getLogger(__name__)

KNOWN_MODULES = {module.value for module in Module}


def _permission_rows(entries: list[RolePermissionEntry]) -> list[RolePermission]:
    """
    Turn request entries into permission rows.

    Entries naming unknown modules are dropped; for a module listed twice
    the last entry wins.
    """
    rows: dict[str, RolePermission] = {}
    for entry in entries:
        if entry.module not in KNOWN_MODULES:
            logger.info("Ignoring permission entry for unknown module %r", entry.module)
            continue
        rows[entry.module] = RolePermission(
            module=entry.module,
            can_view=entry.view,
            can_add=entry.add,
            can_edit=entry.edit,
            can_delete=entry.delete,
        )
    return list(rows.values())


def role_to_dict(role: CustomRole) -> dict:
    """Shape a role for RoleResponse"""
    return {
        "id": role.id,
        "school_id": role.school_id,
        "name": role.name,
        "description": role.description,
        "is_active": role.is_active,
        "is_system": role.is_system,
        "permissions": [
            {
                "module": p.module,
                "view": p.can_view,
                "add": p.can_add,
                "edit": p.can_edit,
                "delete": p.can_delete,
            }
            for p in role.permissions
        ],
        "created_at": role.created_at,
        "updated_at": role.updated_at,
    }


class RoleService:
    """Service layer for custom role management (ADMIN only at the route level)"""

    def __init__(self, db: Session, audit: AuditRecorder):
        self.db = db
        self.audit = audit
        self.role_repo = CustomRoleRepository(db)
        self.user_repo = UserRepository(db)

    def _name_taken(self) -> ConflictException:
        self.db.rollback()
        return ConflictException("A role with this name already exists")

    def _get_role(self, role_id: int, principal: Principal) -> CustomRole:
        role = self.role_repo.get_by_id_and_school(role_id, principal.school_id)
        if not role:
            raise NotFoundException("Role not found")
        return role

    def list_roles(self, principal: Principal) -> list[CustomRole]:
        """List roles of the principal's school, system roles first"""
        return self.role_repo.list_by_school(principal.school_id)

    def create_role(self, data: RoleCreate, principal: Principal) -> CustomRole:
        """
        Create a custom role.

        Raises:
            ValidationException: If the name is shorter than 2 characters
            ConflictException: If a role with the same name (any case) exists
        """
        name = data.name.strip()
        if len(name) < 2:
            raise ValidationException("Role name is required (minimum 2 characters)")

        if self.role_repo.find_by_name(principal.school_id, name):
            raise ConflictException("A role with this name already exists")

        role = CustomRole(
            school_id=principal.school_id,
            name=name,
            description=data.description,
            is_system=False,
            created_by=principal.id,
            permissions=_permission_rows(data.permissions),
        )
        try:
            role = self.role_repo.create(role)
        except IntegrityError:
            raise self._name_taken()

        self.audit.dispatch(
            AuditAction.CREATE,
            "role",
            role.id,
            principal.school_id,
            actor=principal,
            metadata={"role_name": role.name},
        )
        return role

    def update_role(self, role_id: int, data: RoleUpdate, principal: Principal) -> CustomRole:
        """
        Update a role.

        Raises:
            NotFoundException: If role not in this school
            ValidationException: If renaming a system role
            ConflictException: If the new name is taken
        """
        role = self._get_role(role_id, principal)
        changes = {}

        if data.name is not None and data.name.strip() != role.name:
            new_name = data.name.strip()
            if role.is_system:
                raise ValidationException("System role names cannot be changed")
            if len(new_name) < 2:
                raise ValidationException("Role name is required (minimum 2 characters)")
            if self.role_repo.find_by_name(principal.school_id, new_name, exclude_id=role.id):
                raise ConflictException("A role with this name already exists")
            changes["name"] = {"old": role.name, "new": new_name}
            role.name = new_name

        if data.description is not None and data.description != role.description:
            changes["description"] = {"old": role.description, "new": data.description}
            role.description = data.description

        if data.is_active is not None and data.is_active != role.is_active:
            changes["is_active"] = {"old": role.is_active, "new": data.is_active}
            role.is_active = data.is_active

        # Loading or replacing permissions autoflushes a pending rename
        try:
            if data.permissions is not None:
                # Old rows must be gone before new ones reuse (role_id, module)
                old_permissions = role_to_dict(role)["permissions"]
                role.permissions.clear()
                self.db.flush()
                role.permissions = _permission_rows(data.permissions)
                changes["permissions"] = {
                    "old": old_permissions,
                    "new": [p.model_dump() for p in data.permissions],
                }
            role = self.role_repo.update(role)
        except IntegrityError:
            raise self._name_taken()

        self.audit.dispatch(
            AuditAction.UPDATE,
            "role",
            role.id,
            principal.school_id,
            actor=principal,
            changes=changes or None,
            metadata={"role_name": role.name},
        )
        return role

    def delete_role(self, role_id: int, principal: Principal) -> int:
        """
        Delete a custom role after unassigning it from users.

        Returns:
            Number of users whose custom role was cleared

        Raises:
            NotFoundException: If role not in this school
            ValidationException: If the role is a system role
        """
        role = self._get_role(role_id, principal)
        if role.is_system:
            raise ValidationException("System roles cannot be deleted")

        unassigned = self.user_repo.unassign_custom_role(role.id, principal.school_id)
        name = role.name
        self.role_repo.delete(role)

        self.audit.dispatch(
            AuditAction.DELETE,
            "role",
            role_id,
            principal.school_id,
            actor=principal,
            metadata={"role_name": name, "unassigned_users": unassigned},
        )
        return unassigned

    def assign_role(self, user_id: int, assignment: RoleAssignment, principal: Principal) -> User:
        """
        Set or clear a user's custom role.

        Both the user and the role must belong to the principal's school;
        anything else is reported as not found.
        """
        user = self.user_repo.get_by_id_and_school(user_id, principal.school_id)
        if not user:
            raise NotFoundException("User not found")

        if assignment.custom_role_id is not None:
            self._get_role(assignment.custom_role_id, principal)

        old_role_id = user.custom_role_id
        if old_role_id == assignment.custom_role_id:
            return user

        user.custom_role_id = assignment.custom_role_id
        user = self.user_repo.update(user)

        self.audit.dispatch(
            AuditAction.UPDATE,
            "user",
            user.id,
            principal.school_id,
            actor=principal,
            changes={"custom_role_id": {"old": old_role_id, "new": assignment.custom_role_id}},
        )
        return user
