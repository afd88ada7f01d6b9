from typing import Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator


class StudentBase(BaseModel):
    full_name: str
    class_name: str
    roll_no: int = Field(..., ge=0)

    @field_validator('full_name', 'class_name')
    @classmethod
    def validate_required_text(cls, v):
        if not v or not v.strip():
            raise ValueError('Full name, class, and roll number are required')
        return v.strip()


class StudentCreate(StudentBase):
    pass


class StudentUpdate(StudentBase):
    pass


class StudentResponse(StudentBase):
    id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class StudentDirectoryResponse(BaseModel):
    students: List[StudentResponse]
    class_counts: Dict[str, int]
    by_class: Dict[str, List[StudentResponse]]


class StudentDeleteResponse(BaseModel):
    success: bool
    message: str
    deleted_fee_records: int
