from sqlalchemy.orm import Session
from schoolcore.models.faculty_workload import FacultyWorkload


class WorkloadRepository:
    """Repository for FacultyWorkload data access"""

    def __init__(self, db: Session):
        self.db = db

    def delete_by_teacher(self, teacher_id: int, school_id: int) -> int:
        """
        Delete every workload record of a teacher within the school.

        Returns:
            Number of records deleted
        """
        count = (
            self.db.query(FacultyWorkload)
            .filter(FacultyWorkload.school_id == school_id, FacultyWorkload.teacher_id == teacher_id)
            .delete(synchronize_session="fetch")
        )
        self.db.commit()
        return count

    def clear_department(self, department_id: int, school_id: int) -> int:
        """
        Null out the department reference on the school's workloads.

        Returns:
            Number of records updated
        """
        count = (
            self.db.query(FacultyWorkload)
            .filter(
                FacultyWorkload.school_id == school_id,
                FacultyWorkload.department_id == department_id,
            )
            .update({FacultyWorkload.department_id: None}, synchronize_session="fetch")
        )
        self.db.commit()
        return count
