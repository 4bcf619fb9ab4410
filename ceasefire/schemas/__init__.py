from ceasefire.schemas.profile import (
    ProfileCreate, ProfileUpdate, ProfileBrief, ProfileResponse, ProfileStats,
)
from ceasefire.schemas.fight import (
    FightCreate, FightAccept, FightResolve, FightResponse, PersonaResponse,
)
from ceasefire.schemas.mediator_request import (
    MediatorRequestCreate,
    MediatorApprove,
    MediatorRespond,
    MediatorRequestResponse,
)
from ceasefire.schemas.activity import CommentCreate, ModerationCreate, ActivityResponse

__all__ = [
    'ProfileCreate',
    'ProfileUpdate',
    'ProfileBrief',
    'ProfileResponse',
    'ProfileStats',
    'FightCreate',
    'FightAccept',
    'FightResolve',
    'FightResponse',
    'PersonaResponse',
    'MediatorRequestCreate',
    'MediatorApprove',
    'MediatorRespond',
    'MediatorRequestResponse',
    'CommentCreate',
    'ModerationCreate',
    'ActivityResponse',
]
