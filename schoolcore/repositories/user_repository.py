from sqlalchemy import func
from sqlalchemy.orm import Session
from schoolcore.models.role import SystemRole
from schoolcore.models.user import User


class UserRepository:
    """Repository for User model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_active_principal(self, user_id: int, school_id: int) -> User | None:
        """
        Get the active user a session token refers to.

        Both the id and the school must match; a user moved to another
        school or deactivated no longer resolves.
        """
        return (
            self.db.query(User)
            .filter(User.id == user_id, User.school_id == school_id, User.is_active.is_(True))
            .first()
        )

    def get_by_id_and_school(
        self, user_id: int, school_id: int, role: SystemRole | None = None
    ) -> User | None:
        """
        Get user ensuring it belongs to the school (multi-tenant safety).

        Returns None if the user doesn't exist, belongs to another school,
        or does not hold `role` when one is given.
        """
        query = self.db.query(User).filter(User.id == user_id, User.school_id == school_id)
        if role is not None:
            query = query.filter(User.role == role)
        return query.first()

    def get_by_email(self, school_id: int, email: str) -> User | None:
        """Case-insensitive email lookup within a school"""
        return (
            self.db.query(User)
            .filter(User.school_id == school_id, func.lower(User.email) == email.lower())
            .first()
        )

    def list_by_school(self, school_id: int, role: SystemRole | None = None) -> list[User]:
        """List users of a school, optionally narrowed to one role"""
        query = self.db.query(User).filter(User.school_id == school_id)
        if role is not None:
            query = query.filter(User.role == role)
        return query.order_by(User.name).all()

    def update(self, user: User) -> User:
        """Update existing user"""
        self.db.commit()
        self.db.refresh(user)
        return user

    def unassign_custom_role(self, role_id: int, school_id: int) -> int:
        """
        Clear custom_role_id on every user of the school holding the role.

        Returns:
            Number of users updated
        """
        count = (
            self.db.query(User)
            .filter(User.school_id == school_id, User.custom_role_id == role_id)
            .update({User.custom_role_id: None}, synchronize_session=False)
        )
        self.db.commit()
        return count
