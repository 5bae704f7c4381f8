"""Identity and user related Pydantic models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class Role(str, Enum):
    """Per-user role gating what a caller may do."""

    CANDIDATE = "candidate"
    INTERVIEWER = "interviewer"


class Identity(BaseModel):
    """Caller identity resolved from an identity-provider token."""

    subject: str = Field(..., min_length=1)
    role: Optional[Role] = None
    email: Optional[str] = None
    name: Optional[str] = None


class UserSyncRequest(BaseModel):
    """Request model for creating or refreshing the caller's user record."""

    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    image: Optional[str] = None


class RoleUpdateRequest(BaseModel):
    """Request model for switching the caller's role."""

    role: Role


class UserResponse(BaseModel):
    """Response model for user data."""

    id: str
    subject: str
    name: str
    email: str
    image: Optional[str] = None
    role: Role

    class Config:
        """Pydantic config."""

        from_attributes = True
