"""Pydantic models for the admin API."""
from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AdminStatusResponse(BaseModel):
    """Whether the current user is an admin."""

    is_admin: bool


class AdminCreate(BaseModel):
    """Request to add an admin."""

    email: EmailStr
    display_name: str = Field(..., min_length=1, max_length=100)


class AdminUpdate(BaseModel):
    """Request to rename an admin."""

    display_name: str = Field(..., min_length=1, max_length=100)


class AdminResponse(BaseModel):
    """Admin directory entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    display_name: str | None = None
