from sqlalchemy.orm import Session
from schoolcore.models.department import Department


class DepartmentRepository:
    """Repository for Department model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id_and_school(self, department_id: int, school_id: int) -> Department | None:
        """Get department ensuring it belongs to the school"""
        return (
            self.db.query(Department)
            .filter(Department.id == department_id, Department.school_id == school_id)
            .first()
        )

    def get_by_code(self, school_id: int, code: str) -> Department | None:
        return (
            self.db.query(Department)
            .filter(Department.school_id == school_id, Department.code == code)
            .first()
        )

    def list_by_school(self, school_id: int) -> list[Department]:
        return (
            self.db.query(Department)
            .filter(Department.school_id == school_id)
            .order_by(Department.name)
            .all()
        )

    def create(self, department: Department) -> Department:
        """Create new department"""
        self.db.add(department)
        self.db.commit()
        self.db.refresh(department)
        return department

    def delete(self, department: Department) -> None:
        """Hard delete; references on subjects/workloads are cleared by the cascade"""
        self.db.delete(department)
        self.db.commit()
