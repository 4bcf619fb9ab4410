"""Profiles: signup, identity resolution and per-user fight statistics."""
from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ceasefire.models.fight import Fight, FightStatus
from ceasefire.models.mediator_request import MediatorRequest, MediatorRequestStatus
from ceasefire.models.profile import Profile
from ceasefire.services.errors import NotFoundError, ValidationError, store_errors
from ceasefire.services.identity import Identity, normalize_email


class ProfileService:
    """Looks up profiles and turns them into caller identities."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_profile(self, username: str, email: str, role: str) -> Profile:
        """Sign up. Username and email must both be unused."""
        email = normalize_email(email)
        if await self._is_taken(username=username, email=email):
            raise ValidationError('Username or email already taken')

        profile = Profile(username=username, email=email, role=role)
        with store_errors('create profile', username=username):
            try:
                async with self.db.begin_nested():
                    self.db.add(profile)
                    await self.db.flush()
            except IntegrityError:
                # Lost a race against a concurrent signup
                raise ValidationError('Username or email already taken')
            await self.db.refresh(profile)
        return profile

    async def update_profile(
        self, user_id: str, username: str | None = None, role: str | None = None,
    ) -> Profile:
        """Change username and/or role."""
        profile = await self.get_profile(user_id)
        if username and username != profile.username:
            if await self._is_taken(username=username):
                raise ValidationError('Username already taken')

        with store_errors('update profile', user_id=user_id):
            try:
                async with self.db.begin_nested():
                    if username:
                        profile.username = username
                    if role:
                        profile.role = role
                    await self.db.flush()
            except IntegrityError:
                raise ValidationError('Username already taken')
            await self.db.refresh(profile)
        return profile

    async def get_profile(self, user_id: str) -> Profile:
        with store_errors('get profile', user_id=user_id):
            profile = await self.db.get(Profile, user_id)
        if not profile:
            raise NotFoundError('User not found')
        return profile

    async def get_profile_by_username(self, username: str) -> Profile:
        with store_errors('get profile', username=username):
            result = await self.db.execute(select(Profile).where(Profile.username == username))
            profile = result.scalar_one_or_none()
        if not profile:
            raise NotFoundError('User not found')
        return profile

    async def get_identity(self, user_id: str) -> Identity:
        """Resolve a user id into the identity passed to the services."""
        profile = await self.get_profile(user_id)
        return Identity(id=profile.id, email=profile.email, username=profile.username)

    async def get_stats(self, user_id: str) -> dict:
        """Counters shown on the profile page."""
        await self.get_profile(user_id)
        with store_errors('profile stats', user_id=user_id):
            total_fights = await self.db.scalar(
                select(func.count(Fight.id)).where(Fight.creator_id == user_id)
            )
            resolved_fights = await self.db.scalar(
                select(func.count(Fight.id))
                .where(Fight.creator_id == user_id)
                .where(Fight.status == FightStatus.RESOLVED.value)
            )
            mediated_fights = await self.db.scalar(
                select(func.count(Fight.id)).where(Fight.mediator_id == user_id)
            )
            pending_requests = await self.db.scalar(
                select(func.count(MediatorRequest.id))
                .join(Fight, MediatorRequest.fight_id == Fight.id)
                .where(Fight.creator_id == user_id)
                .where(MediatorRequest.status == MediatorRequestStatus.PENDING.value)
            )
        return {
            'total_fights': total_fights or 0,
            'resolved_fights': resolved_fights or 0,
            'mediated_fights': mediated_fights or 0,
            'pending_requests': pending_requests or 0,
        }

    async def _is_taken(self, username: str | None = None, email: str | None = None) -> bool:
        clauses = []
        if username:
            clauses.append(Profile.username == username)
        if email:
            clauses.append(Profile.email == email)
        with store_errors('check profile uniqueness', username=username):
            result = await self.db.execute(select(Profile.id).where(or_(*clauses)).limit(1))
            return result.scalar_one_or_none() is not None
