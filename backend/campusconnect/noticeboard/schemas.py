from typing import List, Optional
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, field_validator

from campusconnect.storage.schemas import Attachment


class NoticeCreate(BaseModel):
    class_name: str
    date: date
    notice: str = ""
    attachment: Optional[Attachment] = None

    @field_validator('class_name')
    @classmethod
    def validate_class_name(cls, v):
        if not v or not v.strip():
            raise ValueError('Please select class and date')
        return v


class NoticeResponse(BaseModel):
    id: int
    class_name: str
    date: date
    notice: str
    file_url: Optional[str] = None
    file_type: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class NoticeListResponse(BaseModel):
    class_name: str
    notices: List[NoticeResponse]


class NoticeDeleteResponse(BaseModel):
    success: bool
    message: str
    file_removed: bool
