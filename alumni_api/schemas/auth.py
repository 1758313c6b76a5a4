from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional

from alumni_api.schemas.user import UserResponse


class UserRegister(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: Optional[str] = Field(None, max_length=40)
    graduation_year: Optional[int] = Field(None, ge=1900, le=2100)
    degree: Optional[str] = None
    major: Optional[str] = None
    profession: Optional[str] = None
    company: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        return v


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthResponse(Token):
    user: UserResponse
