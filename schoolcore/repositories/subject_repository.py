from sqlalchemy.orm import Session
from schoolcore.models.role import EntityStatus
from schoolcore.models.subject import Subject


class SubjectRepository:
    """Repository for Subject data access"""

    def __init__(self, db: Session):
        self.db = db

    def count_active_by_department(self, department_id: int, school_id: int) -> int:
        """Count active subjects still assigned to a department"""
        return (
            self.db.query(Subject)
            .filter(
                Subject.school_id == school_id,
                Subject.department_id == department_id,
                Subject.status == EntityStatus.ACTIVE,
            )
            .count()
        )

    def unassign_teacher(self, teacher_id: int, school_id: int) -> int:
        """
        Clear the teacher reference on the school's active subjects.

        Inactive subjects keep their historical teacher. Running this again
        matches nothing, so it is safe to repeat.

        Returns:
            Number of subjects updated
        """
        count = (
            self.db.query(Subject)
            .filter(
                Subject.school_id == school_id,
                Subject.teacher_id == teacher_id,
                Subject.status == EntityStatus.ACTIVE,
            )
            .update({Subject.teacher_id: None, Subject.teacher_name: ""}, synchronize_session="fetch")
        )
        self.db.commit()
        return count

    def clear_department(self, department_id: int, school_id: int) -> int:
        """
        Null out the department reference on all of the school's subjects.

        Returns:
            Number of subjects updated
        """
        count = (
            self.db.query(Subject)
            .filter(Subject.school_id == school_id, Subject.department_id == department_id)
            .update({Subject.department_id: None}, synchronize_session="fetch")
        )
        self.db.commit()
        return count
