from typing import Dict, List, Literal, Optional
from datetime import date
from pydantic import BaseModel, ConfigDict, field_validator

AttendanceStatus = Literal["present", "absent"]


class AttendanceSheetRequest(BaseModel):
    class_name: str
    date: date
    subjects: List[str]
    # student id -> subject -> status; anything left out stays unmarked
    statuses: Dict[int, Dict[str, Optional[AttendanceStatus]]] = {}

    @field_validator('class_name')
    @classmethod
    def validate_class_name(cls, v):
        if not v or not v.strip():
            raise ValueError('Please select a class')
        return v


class AttendanceEntryResponse(BaseModel):
    id: int
    student: str
    roll_no: Optional[int] = None
    class_name: str
    date: date
    subject: str
    status: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class AttendanceSaveResponse(BaseModel):
    success: bool
    message: str
    saved: int


class AttendanceRow(BaseModel):
    student: str
    roll_no: Optional[int] = None
    statuses: Dict[str, str]


class AttendanceDateGroup(BaseModel):
    date: date
    subjects: List[str]
    rows: List[AttendanceRow]


class AttendanceViewResponse(BaseModel):
    class_name: str
    groups: List[AttendanceDateGroup]


class AttendanceDeleteResponse(BaseModel):
    success: bool
    message: str
    deleted: int
