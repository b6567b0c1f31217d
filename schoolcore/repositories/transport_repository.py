from sqlalchemy.orm import Session
from schoolcore.models.transport import TransportAssignment


class TransportRepository:
    """Repository for transport rosters"""

    def __init__(self, db: Session):
        self.db = db

    def remove_student_from_rosters(self, student_id: int, school_id: int) -> int:
        """
        Drop a student from every vehicle roster of the school.

        A student appears at most once per vehicle, so the count equals the
        number of vehicles touched.

        Returns:
            Number of rosters the student was removed from
        """
        count = (
            self.db.query(TransportAssignment)
            .filter(
                TransportAssignment.school_id == school_id,
                TransportAssignment.student_id == student_id,
            )
            .delete(synchronize_session="fetch")
        )
        self.db.commit()
        return count
