"""
Authentication schemas
"""
from typing import List
from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Login request schema"""
    employee_id: str = Field(..., min_length=1, description="Employee id")
    password: str = Field(..., description="Password")


class TokenResponse(BaseModel):
    """Token response schema"""
    access_token: str
    token_type: str = "bearer"
    employee_id: str
    name: str
    role: str
    permissions: List[str] = []


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., description="Current password")
    new_password: str = Field(..., min_length=6, max_length=72, description="New password")
