from typing import Optional
from pydantic import BaseModel, Base64Bytes, field_validator


class Attachment(BaseModel):
    """A file sent inline with a form, base64 encoded."""
    file_name: str
    content_type: Optional[str] = None
    content: Base64Bytes

    @field_validator('file_name')
    @classmethod
    def validate_file_name(cls, v):
        if not v or not v.strip():
            raise ValueError('File name cannot be empty')
        return v.strip()

    @property
    def extension(self) -> str:
        return self.file_name.rsplit('.', 1)[-1].lower() if '.' in self.file_name else ''
