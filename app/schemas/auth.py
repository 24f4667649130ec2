"""
Authentication-related schemas.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Login request schema."""
    email: str = Field(..., min_length=3, max_length=255, pattern=r'^[^@]+@[^@]+\.[^@]+$')
    password: str = Field(..., min_length=1, max_length=100, description="User password")


class Token(BaseModel):
    """Token response schema."""
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Token expiration time in seconds")


class UserResponse(BaseModel):
    """User response schema."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    display_name: str
    role: str
    is_active: bool
    created_at: datetime
