from typing import Dict, List, Optional
from datetime import date
from pydantic import BaseModel, ConfigDict, Field, field_validator

from campusconnect.storage.schemas import Attachment


class SubjectMarks(BaseModel):
    subject: str
    marks: float = Field(..., ge=0)

    @field_validator('subject')
    @classmethod
    def validate_subject(cls, v):
        if not v or not v.strip():
            raise ValueError('Subject cannot be empty')
        return v.strip()


class ResultEntryRequest(BaseModel):
    date: date
    class_name: str
    full_name: str
    exam_type: str = ""
    subjects: List[SubjectMarks] = Field(..., min_length=1)
    attachment: Optional[Attachment] = None

    @field_validator('class_name', 'full_name')
    @classmethod
    def validate_required(cls, v):
        if not v or not v.strip():
            raise ValueError('Please fill in all required fields.')
        return v.strip()


class ResultUpdateRequest(BaseModel):
    marks: float = Field(..., ge=0)


class ResultEntryResponse(BaseModel):
    id: int
    full_name: str
    class_name: str
    subject: str
    marks: Optional[str] = None
    date: date
    exam_type: Optional[str] = None
    file_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ResultSaveResponse(BaseModel):
    success: bool
    message: str
    total_marks: float
    file_url: Optional[str] = None
    results: List[ResultEntryResponse]


class ResultGroup(BaseModel):
    date: date
    exam_type: str
    students: List[str]
    subjects: List[str]
    marks: Dict[str, Dict[str, str]]
    student_count: int
    subject_count: int
    file_url: Optional[str] = None
    records: List[ResultEntryResponse]


class ResultsViewResponse(BaseModel):
    class_name: str
    groups: List[ResultGroup]


class ResultDeleteResponse(BaseModel):
    success: bool
    message: str
    deleted: int


class GradedResult(ResultEntryResponse):
    grade: str


class StudentResultsResponse(BaseModel):
    class_name: str
    full_name: str
    results: List[GradedResult]
    total_marks: float
    average_marks: str
    max_marks: float
