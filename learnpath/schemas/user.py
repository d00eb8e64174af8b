"""
learnpath/schemas/user.py
Account and authentication schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from learnpath.orm.user import UserRole


# ================= AUTH =================

class UserRegister(BaseModel):
    """
    Public registration. Role is not accepted; every new account is STUDENT.
    """
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=2, max_length=200)


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


# ================= SELF-SERVICE =================

class UpdateMeRequest(BaseModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, min_length=2, max_length=200)

    @field_validator("email", "name")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("cannot be null")
        return v


class UpdatePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


# ================= ADMIN =================

class UserCreate(UserRegister):
    role: UserRole = UserRole.STUDENT


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[UserRole] = None

    @field_validator("email", "name", "password", "role")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("cannot be null")
        return v


class RoleUpdate(BaseModel):
    role: UserRole


# ================= RESPONSES =================

class UserResponse(BaseModel):
    """Never exposes password_hash"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    role: UserRole
    created_at: datetime
    updated_at: datetime


class AuthResponse(BaseModel):
    user: UserResponse
    token: str
