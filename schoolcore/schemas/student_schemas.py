from datetime import datetime
from pydantic import BaseModel, Field

from schoolcore.models.role import EntityStatus


class StudentCreate(BaseModel):
    """Schema for enrolling a student"""

    name: str = Field(..., min_length=1, max_length=255)
    class_name: str = Field(..., min_length=1, max_length=50)
    roll_number: str = Field(..., min_length=1, max_length=50)


class StudentResponse(BaseModel):
    """Schema for student response"""

    id: int
    school_id: int
    name: str
    class_name: str
    roll_number: str
    status: EntityStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
