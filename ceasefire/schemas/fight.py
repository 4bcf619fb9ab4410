from datetime import datetime
from pydantic import BaseModel, Field

from ceasefire.schemas.profile import ProfileBrief


class FightCreate(BaseModel):
    """Schema for opening a fight."""
    title: str = Field(..., max_length=200)
    description: str
    opponent_email: str | None = Field(None, max_length=255, description='Email or username')
    creator_animal: str


class FightAccept(BaseModel):
    animal: str


class FightResolve(BaseModel):
    resolution: str


class FightResponse(BaseModel):
    """Fight with joined display profiles."""
    id: str
    title: str
    description: str
    creator_id: str
    opponent_email: str | None
    opponent_user_id: str | None
    mediator_id: str | None
    creator_animal: str
    opponent_animal: str | None
    status: str
    resolution: str | None
    opponent_accepted: bool
    opponent_accepted_at: datetime | None
    created_at: datetime
    updated_at: datetime
    creator: ProfileBrief | None = None
    opponent: ProfileBrief | None = None
    mediator: ProfileBrief | None = None

    class Config:
        from_attributes = True


class PersonaResponse(BaseModel):
    id: str
    name: str
    emoji: str
    traits: str
