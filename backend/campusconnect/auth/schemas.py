from pydantic import BaseModel, field_validator
from typing import List, Optional


class AccessRequest(BaseModel):
    access_code: str

    @field_validator('access_code')
    @classmethod
    def validate_access_code(cls, v):
        if not v or not v.strip():
            raise ValueError('Access code cannot be empty')
        return v


class SessionResponse(BaseModel):
    access_code: str
    user_role: str
    is_authenticated: bool
    session_timestamp: int


class AccessResponse(BaseModel):
    success: bool
    message: str
    role: Optional[str] = None
    token: Optional[str] = None
    redirect: Optional[str] = None
    session: Optional[SessionResponse] = None


class AccessGateResponse(BaseModel):
    page: str = "access"
    message: str
    roles: List[str]
