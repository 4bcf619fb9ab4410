from ceasefire.models.profile import Profile, ProfileRole
from ceasefire.models.persona import Animal, PERSONAS
from ceasefire.models.fight import Fight, FightStatus
from ceasefire.models.mediator_request import MediatorRequest, MediatorRequestStatus
from ceasefire.models.activity import Activity, ActivityType

__all__ = [
    'Profile',
    'ProfileRole',
    'Animal',
    'PERSONAS',
    'Fight',
    'FightStatus',
    'MediatorRequest',
    'MediatorRequestStatus',
    'Activity',
    'ActivityType',
]
