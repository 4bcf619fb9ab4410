from datetime import datetime
from pydantic import BaseModel, Field


class ProfileCreate(BaseModel):
    """Schema for signing up (no password - dev mode)."""
    username: str = Field(..., min_length=1, max_length=50, pattern=r'^[a-zA-Z0-9_]+$')
    email: str = Field(..., min_length=3, max_length=255, pattern=r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
    role: str = Field('fighter', pattern=r'^(fighter|trump)$')


class ProfileUpdate(BaseModel):
    """Schema for updating a profile."""
    username: str | None = Field(None, min_length=1, max_length=50, pattern=r'^[a-zA-Z0-9_]+$')
    role: str | None = Field(None, pattern=r'^(fighter|trump)$')


class ProfileBrief(BaseModel):
    """Display info embedded in fight and activity responses."""
    id: str
    username: str
    email: str

    class Config:
        from_attributes = True


class ProfileResponse(ProfileBrief):
    """Full profile response."""
    role: str
    created_at: datetime

    class Config:
        from_attributes = True


class ProfileStats(BaseModel):
    total_fights: int = 0
    resolved_fights: int = 0
    mediated_fights: int = 0
    pending_requests: int = 0
