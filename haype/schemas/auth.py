from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from haype.models.user import UserRole


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=4)


class LoginResponse(BaseModel):
    success: bool = True
    access_token: str
    token_type: str = "bearer"
    user: dict  # User information


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=4)
    role: UserRole = UserRole.operator


class RegisterResponse(BaseModel):
    success: bool = True
    message: str
    user_id: int


class VerifyResponse(BaseModel):
    success: bool = True
    user: dict


class Logout(BaseModel):
    message: Optional[str] = None
