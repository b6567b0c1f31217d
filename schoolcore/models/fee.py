from sqlalchemy import ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from schoolcore.models.base import Base, TimestampMixin


class FeeStructure(Base, TimestampMixin):
    """Fee charged to a class, e.g. "Term 1 tuition" for class 5"""

    __tablename__ = "fee_structures"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    school_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    class_name: Mapped[str] = mapped_column(String(50), nullable=False)
    amount: Mapped[float] = mapped_column(Numeric(precision=12, scale=2), nullable=False)
    frequency: Mapped[str] = mapped_column(String(20), nullable=False, default="term")
