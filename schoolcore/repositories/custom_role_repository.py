"""Repository for CustomRole model operations."""

from sqlalchemy import func
from sqlalchemy.orm import Session
from schoolcore.models.custom_role import CustomRole


class CustomRoleRepository:
    """Repository for CustomRole model operations"""

    def __init__(self, db: Session):
        self.db = db

    def list_by_school(self, school_id: int) -> list[CustomRole]:
        """
        List all roles of a school.

        System roles come first, then the rest alphabetically.
        """
        return (
            self.db.query(CustomRole)
            .filter(CustomRole.school_id == school_id)
            .order_by(CustomRole.is_system.desc(), CustomRole.name)
            .all()
        )

    def get_by_id_and_school(self, role_id: int, school_id: int) -> CustomRole | None:
        """
        Get role ensuring it belongs to the school.

        Args:
            role_id: Role ID
            school_id: School ID

        Returns:
            CustomRole or None if not found or owned by another school
        """
        return (
            self.db.query(CustomRole)
            .filter(CustomRole.id == role_id, CustomRole.school_id == school_id)
            .first()
        )

    def get_active(self, role_id: int, school_id: int) -> CustomRole | None:
        """Get role only if it is active and belongs to the school"""
        return (
            self.db.query(CustomRole)
            .filter(
                CustomRole.id == role_id,
                CustomRole.school_id == school_id,
                CustomRole.is_active.is_(True),
            )
            .first()
        )

    def find_by_name(
        self, school_id: int, name: str, exclude_id: int | None = None
    ) -> CustomRole | None:
        """
        Case-insensitive name lookup within a school.

        Args:
            school_id: School ID
            name: Role name to look for
            exclude_id: Role to ignore (the one being renamed)
        """
        query = self.db.query(CustomRole).filter(
            CustomRole.school_id == school_id,
            func.lower(CustomRole.name) == name.lower(),
        )
        if exclude_id is not None:
            query = query.filter(CustomRole.id != exclude_id)
        return query.first()

    def create(self, role: CustomRole) -> CustomRole:
        """Create a new role with its permission rows"""
        self.db.add(role)
        self.db.commit()
        self.db.refresh(role)
        return role

    def update(self, role: CustomRole) -> CustomRole:
        """Update a role"""
        self.db.commit()
        self.db.refresh(role)
        return role

    def delete(self, role: CustomRole) -> None:
        """Delete a role (permission rows cascade)"""
        self.db.delete(role)
        self.db.commit()
