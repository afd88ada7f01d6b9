import math
from typing import List, Literal, Optional, Union
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from campusconnect.storage.schemas import Attachment

Amount = Union[float, str, None]


class FeeItem(BaseModel):
    """One student's row of the fee form. Blank or unparsable amounts count as 0."""
    student_id: int
    total: Amount = None
    paid: Amount = None
    receipt: Optional[Attachment] = None


class FeeBatchRequest(BaseModel):
    class_name: str
    year: str
    items: List[FeeItem] = Field(..., min_length=1)

    @field_validator('class_name')
    @classmethod
    def validate_class_name(cls, v):
        if not v or not v.strip():
            raise ValueError('Please select a class')
        return v

    @field_validator('year')
    @classmethod
    def validate_year(cls, v):
        v = (v or "").strip()
        try:
            year = float(v)
            valid = math.isfinite(year) and year > 0
        except ValueError:
            valid = False
        if not valid:
            raise ValueError('Year must be a positive number')
        return v


class FeeItemOutcome(BaseModel):
    student_id: int
    status: Literal["saved", "upload_failed", "failed", "skipped"]
    due: Optional[float] = None
    file_url: Optional[str] = None
    message: Optional[str] = None


class FeeBatchResponse(BaseModel):
    success: bool
    message: str
    outcomes: List[FeeItemOutcome]


class FeeRecordResponse(BaseModel):
    id: int
    student_id: int
    class_name: str
    year: str
    total: float
    paid: float
    due: float
    file_url: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class FeeViewRow(FeeRecordResponse):
    full_name: Optional[str] = None
    status: str


class FeeViewResponse(BaseModel):
    class_name: str
    records: List[FeeViewRow]


class StudentFeeResponse(BaseModel):
    student_id: int
    fee: Optional[FeeViewRow] = None


class FeeDeleteResponse(BaseModel):
    success: bool
    message: str
