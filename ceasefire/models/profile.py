import uuid
from datetime import datetime
from enum import Enum
from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from ceasefire.db.database import Base


class ProfileRole(str, Enum):
    """Advisory role; only changes which affordances the client shows."""
    FIGHTER = 'fighter'
    TRUMP = 'trump'


class Profile(Base):
    """Identity metadata for a Ceasefire user."""

    __tablename__ = 'profiles'

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    role: Mapped[str] = mapped_column(String(20), default=ProfileRole.FIGHTER.value)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
