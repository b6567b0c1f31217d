from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from schoolcore.models.role import EntityStatus


class DepartmentCreate(BaseModel):
    """Schema for creating a department"""

    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=20)
    description: str = ""

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()


class DepartmentResponse(BaseModel):
    id: int
    school_id: int
    name: str
    code: str
    description: str
    status: EntityStatus
    created_at: datetime

    model_config = {"from_attributes": True}
