from datetime import datetime
from pydantic import BaseModel, Field

from ceasefire.schemas.profile import ProfileBrief


class CommentCreate(BaseModel):
    message: str = Field(..., max_length=2000)


class ModerationCreate(BaseModel):
    """Mediator action on a fight."""
    action: str = Field(..., pattern=r'^(penalty|warning|motivation|trade|mediate|timeout)$')
    message: str = Field(..., max_length=2000)


class ActivityResponse(BaseModel):
    id: str
    fight_id: str
    user_id: str
    activity_type: str
    message: str
    created_at: datetime
    actor: ProfileBrief | None = None

    class Config:
        from_attributes = True
