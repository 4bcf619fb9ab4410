import uuid
from datetime import datetime
from enum import Enum
from sqlalchemy import String, Boolean, ForeignKey, DateTime, Text, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ceasefire.db.database import Base


class FightStatus(str, Enum):
    """Lifecycle of a fight. RESOLVED is terminal."""
    PENDING = 'pending'
    ACCEPTED = 'accepted'
    IN_PROGRESS = 'in-progress'
    RESOLVED = 'resolved'


class Fight(Base):
    """A dispute between a creator and an invited opponent."""

    __tablename__ = 'fights'

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text)

    # Who's involved
    creator_id: Mapped[str] = mapped_column(ForeignKey('profiles.id'))
    opponent_email: Mapped[str | None] = mapped_column(String(255), default=None)
    opponent_user_id: Mapped[str | None] = mapped_column(
        ForeignKey('profiles.id'), default=None,
    )
    mediator_id: Mapped[str | None] = mapped_column(
        ForeignKey('profiles.id'), default=None,
    )

    # Personas
    creator_animal: Mapped[str] = mapped_column(String(20))
    opponent_animal: Mapped[str | None] = mapped_column(String(20), default=None)

    status: Mapped[str] = mapped_column(String(20), default=FightStatus.PENDING.value)
    resolution: Mapped[str | None] = mapped_column(Text, default=None)

    opponent_accepted: Mapped[bool] = mapped_column(Boolean, default=False)
    opponent_accepted_at: Mapped[datetime | None] = mapped_column(DateTime, default=None)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    creator: Mapped['Profile'] = relationship('Profile', foreign_keys=[creator_id])
    opponent: Mapped['Profile'] = relationship(
        'Profile', foreign_keys=[opponent_user_id],
    )
    mediator: Mapped['Profile'] = relationship(
        'Profile', foreign_keys=[mediator_id],
    )

    __table_args__ = (
        Index('ix_fight_creator', 'creator_id'),
        Index('ix_fight_opponent_email', 'opponent_email'),
        Index('ix_fight_mediator', 'mediator_id'),
        Index('ix_fight_status', 'status'),
        Index('ix_fight_created', 'created_at'),
    )

    @property
    def is_resolved(self) -> bool:
        return self.status == FightStatus.RESOLVED.value

    def party_role(self, user_id: str) -> str | None:
        """'creator' or 'opponent' for the two parties, else None."""
        if user_id == self.creator_id:
            return 'creator'
        if self.opponent_accepted and user_id == self.opponent_user_id:
            return 'opponent'
        return None
