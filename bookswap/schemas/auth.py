from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Any, Optional
from enum import Enum

class ErrorCode(str, Enum):
    # Auth related
    UNAUTHORIZED = "AUTH_001"
    FORBIDDEN = "AUTH_002"
    TOKEN_EXPIRED = "AUTH_003"
    INVALID_CREDENTIALS = "AUTH_004"

    # Request related
    VALIDATION_FAILED = "VALIDATION_001"
    NOT_FOUND = "NOT_FOUND_001"
    CONFLICT = "CONFLICT_001"

    # User related
    USER_ALREADY_EXISTS = "USER_001"
    USER_NOT_FOUND = "USER_002"
    USER_BLOCKED = "USER_003"

class Error(BaseModel):
    code: str
    message: str
    details: Optional[dict] = None

class BaseResponse(BaseModel):
    success: bool = True
    data: Optional[Any] = None
    error: Optional[Error] = None
    meta: Optional[dict] = None

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class TokenData(BaseModel):
    email: Optional[EmailStr] = None
    user_id: Optional[int] = None


class RegisterRequest(BaseModel):
    email: EmailStr
    username: str = Field(..., min_length=2, max_length=50)
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("username")
    @classmethod
    def username_must_not_be_blank(cls, v: str) -> str:
        if v.strip() == "":
            raise ValueError("Username cannot be empty")
        return v.strip()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    user_id: int
    username: str
    is_admin: bool
    access_token: str
    token_type: str = "bearer"
