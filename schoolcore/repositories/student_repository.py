from sqlalchemy.orm import Session
from schoolcore.models.role import EntityStatus
from schoolcore.models.student import Student


class StudentRepository:
    """Repository for Student model operations with multi-tenant support"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id_and_school(self, student_id: int, school_id: int) -> Student | None:
        """
        Get student ensuring it belongs to the school (multi-tenant safety).

        Returns None if student doesn't exist or belongs to another school.
        """
        return (
            self.db.query(Student)
            .filter(Student.id == student_id, Student.school_id == school_id)
            .first()
        )

    def list_by_school(
        self, school_id: int, class_name: str | None = None, status: EntityStatus | None = None
    ) -> list[Student]:
        """List students of a school with optional class and status filters"""
        query = self.db.query(Student).filter(Student.school_id == school_id)
        if class_name is not None:
            query = query.filter(Student.class_name == class_name)
        if status is not None:
            query = query.filter(Student.status == status)
        return query.order_by(Student.class_name, Student.roll_number).all()

    def create(self, student: Student) -> Student:
        """
        Create new student.

        Raises:
            IntegrityError: If an active student already holds the roll number
        """
        self.db.add(student)
        self.db.commit()
        self.db.refresh(student)
        return student

    def update(self, student: Student) -> Student:
        """
        Update existing student.

        Raises:
            IntegrityError: If reactivation collides with an active roll number
        """
        self.db.commit()
        self.db.refresh(student)
        return student
