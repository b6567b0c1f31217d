from datetime import datetime
from pydantic import BaseModel, Field

from schoolcore.models.role import SystemRole


class TeacherUpdate(BaseModel):
    """Update teacher profile fields"""

    name: str | None = Field(None, min_length=1, max_length=255)
    email: str | None = Field(None, min_length=3, max_length=255)


class TeacherResponse(BaseModel):
    """Teacher details"""

    id: int
    school_id: int
    name: str
    email: str
    role: SystemRole
    custom_role_id: int | None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
