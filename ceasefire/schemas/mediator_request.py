from datetime import datetime
from pydantic import BaseModel, Field

from ceasefire.schemas.profile import ProfileBrief


class MediatorRequestCreate(BaseModel):
    """Schema for proposing to mediate a fight."""
    fight_id: str
    proposal_message: str


class MediatorApprove(BaseModel):
    is_creator: bool
    response: str | None = None


class MediatorRespond(BaseModel):
    decision: str = Field(..., pattern=r'^(approved|rejected)$')
    message: str | None = None


class FightBrief(BaseModel):
    id: str
    title: str
    creator_id: str
    opponent_user_id: str | None
    opponent_email: str | None
    status: str

    class Config:
        from_attributes = True


class MediatorRequestResponse(BaseModel):
    """Mediation request with its fight and mediator."""
    id: str
    fight_id: str
    mediator_id: str
    proposal_message: str
    status: str
    accepted_by_creator: bool
    accepted_by_opponent: bool
    creator_response: str | None
    opponent_response: str | None
    accepted_at: datetime | None
    created_at: datetime
    updated_at: datetime
    is_authoritative: bool
    fight: FightBrief | None = None
    mediator: ProfileBrief | None = None

    class Config:
        from_attributes = True
