import uuid
from datetime import datetime
from enum import Enum
from sqlalchemy import String, Boolean, ForeignKey, DateTime, Text, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ceasefire.db.database import Base


class MediatorRequestStatus(str, Enum):
    """Status of a mediation proposal."""
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'


class MediatorRequest(Base):
    """A candidate mediator's proposal to handle a fight.

    Both parties approve independently; the request is authoritative only
    once both flags are set.
    """

    __tablename__ = 'mediator_requests'

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    fight_id: Mapped[str] = mapped_column(ForeignKey('fights.id', ondelete='CASCADE'))
    mediator_id: Mapped[str] = mapped_column(ForeignKey('profiles.id'))
    proposal_message: Mapped[str] = mapped_column(Text)

    status: Mapped[str] = mapped_column(
        String(20), default=MediatorRequestStatus.PENDING.value,
    )

    # Two-party consent
    accepted_by_creator: Mapped[bool] = mapped_column(Boolean, default=False)
    accepted_by_opponent: Mapped[bool] = mapped_column(Boolean, default=False)
    creator_response: Mapped[str | None] = mapped_column(Text, default=None)
    opponent_response: Mapped[str | None] = mapped_column(Text, default=None)
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime, default=None)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    fight: Mapped['Fight'] = relationship('Fight')
    mediator: Mapped['Profile'] = relationship('Profile', foreign_keys=[mediator_id])

    __table_args__ = (
        Index('ix_mediator_request_fight', 'fight_id'),
        Index('ix_mediator_request_mediator', 'mediator_id'),
        Index('ix_mediator_request_status', 'status'),
    )

    @property
    def is_authoritative(self) -> bool:
        return bool(self.accepted_by_creator and self.accepted_by_opponent)

    @property
    def is_closed(self) -> bool:
        return self.status == MediatorRequestStatus.REJECTED.value
