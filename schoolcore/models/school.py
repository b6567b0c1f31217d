"""School model: the tenant isolation boundary."""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from schoolcore.models.base import Base, TimestampMixin


class School(Base, TimestampMixin):
    """
    Multi-tenant isolation boundary.

    Every other table carries a school_id. A request may only ever read or
    write rows whose school_id equals the school of its principal; rows of
    another school are treated as if they did not exist.
    """

    __tablename__ = "schools"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<School(id={self.id}, name='{self.name}')>"
