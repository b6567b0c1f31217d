from sqlalchemy.orm import Session
from schoolcore.models.fee import FeeStructure


class FeeRepository:
    """Repository for FeeStructure model operations"""

    def __init__(self, db: Session):
        self.db = db

    def list_by_school(self, school_id: int, class_name: str | None = None) -> list[FeeStructure]:
        query = self.db.query(FeeStructure).filter(FeeStructure.school_id == school_id)
        if class_name is not None:
            query = query.filter(FeeStructure.class_name == class_name)
        return query.order_by(FeeStructure.class_name, FeeStructure.name).all()

    def create(self, fee: FeeStructure) -> FeeStructure:
        """Create new fee structure"""
        self.db.add(fee)
        self.db.commit()
        self.db.refresh(fee)
        return fee
