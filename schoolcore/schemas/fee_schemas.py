from datetime import datetime
from pydantic import BaseModel, Field


class FeeStructureCreate(BaseModel):
    """Schema for creating a fee structure"""

    name: str = Field(..., min_length=1, max_length=255)
    class_name: str = Field(..., min_length=1, max_length=50)
    amount: float = Field(..., gt=0)
    frequency: str = Field(default="term", pattern="^(monthly|term|annual|one_time)$")


class FeeStructureResponse(BaseModel):
    id: int
    school_id: int
    name: str
    class_name: str
    amount: float
    frequency: str
    created_at: datetime

    model_config = {"from_attributes": True}
