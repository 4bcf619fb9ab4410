import uuid
from datetime import datetime
from enum import Enum
from sqlalchemy import String, ForeignKey, DateTime, Text, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ceasefire.db.database import Base


class ActivityType(str, Enum):
    """Category tag of a fight activity."""
    COMMENT = 'comment'
    FIGHT_ACCEPTED = 'fight_accepted'
    MEDIATION_REQUEST = 'mediation_request'
    MEDIATOR_ACCEPTED_BY_CREATOR = 'mediator_accepted_by_creator'
    MEDIATOR_ACCEPTED_BY_OPPONENT = 'mediator_accepted_by_opponent'
    MEDIATOR_REJECTED = 'mediator_rejected'
    MEDIATOR_TOOK_FIGHT = 'mediator_took_fight'
    MODERATION_ACTION = 'moderation_action'
    FIGHT_RESOLVED = 'fight_resolved'


class Activity(Base):
    """Append-only event on a fight's timeline."""

    __tablename__ = 'fight_activities'

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    fight_id: Mapped[str] = mapped_column(ForeignKey('fights.id', ondelete='CASCADE'))
    user_id: Mapped[str] = mapped_column(ForeignKey('profiles.id'))
    activity_type: Mapped[str] = mapped_column(String(40))
    message: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    actor: Mapped['Profile'] = relationship('Profile')

    __table_args__ = (
        Index('ix_activity_fight_created', 'fight_id', 'created_at'),
    )
