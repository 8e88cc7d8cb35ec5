"""
Authentication schemas for the EcoWatch sync client
"""

from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional


class UserRegister(BaseModel):
    """Schema for a registration request"""
    name: str
    email: EmailStr
    password: str

    @validator('name')
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Name is required')
        return v

    @validator('email', pre=True)
    def strip_email(cls, v):
        return v.strip() if isinstance(v, str) else v

    @validator('password')
    def validate_password(cls, v):
        if len(v) < 6:
            raise ValueError('Password must be at least 6 characters')
        return v


class UserLogin(BaseModel):
    """Schema for a login request"""
    email: EmailStr
    password: str

    @validator('email', pre=True)
    def strip_email(cls, v):
        return v.strip() if isinstance(v, str) else v

    @validator('password')
    def validate_password(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Password is required')
        return v


class UserProfile(BaseModel):
    """Cached profile of the signed-in user"""
    id: Optional[str] = Field(None, alias="_id")
    name: Optional[str] = None
    email: str

    class Config:
        populate_by_name = True
