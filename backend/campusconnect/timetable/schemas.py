from typing import List, Literal, Optional
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, Field

Day = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


class TimetableCell(BaseModel):
    id: Optional[int] = None
    day: Day
    period: int = Field(..., ge=1)
    subject: str = ""
    time: Optional[str] = None


class TimetableSaveRequest(BaseModel):
    class_name: str = Field(..., min_length=1)
    date: date
    entries: List[TimetableCell] = Field(..., min_length=1)


class TimetableEntryResponse(BaseModel):
    id: int
    class_name: str
    day: str
    period: int
    subject: Optional[str] = None
    time: Optional[str] = None
    date: date
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TimetableSlot(BaseModel):
    id: int
    subject: Optional[str] = None
    time: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class TimetableDayRow(BaseModel):
    day: str
    cells: List[Optional[TimetableSlot]]


class TimetableGrid(BaseModel):
    periods: int
    days: List[TimetableDayRow]


class TimetableEditorResponse(BaseModel):
    class_name: str
    entries: List[TimetableEntryResponse]
    grid: TimetableGrid


class TimetableSaveResponse(BaseModel):
    success: bool
    message: str
    updated: int
    inserted: int


class TimetableGroup(BaseModel):
    date: date
    grid: TimetableGrid
    entries: List[TimetableEntryResponse]


class TimetableViewResponse(BaseModel):
    class_name: str
    groups: List[TimetableGroup]


class StudentTimetableResponse(BaseModel):
    class_name: str
    timetable_date: Optional[date] = None
    grid: TimetableGrid


class TimetableDeleteResponse(BaseModel):
    success: bool
    message: str
    deleted: int
