"""Fight activity log: append-only timeline of what happened on a fight.

Transitions record their activity best-effort: a failed insert is logged and
dropped inside its own SAVEPOINT, so it never rolls back the transition that
triggered it.
"""
import logging

from sqlalchemy import select, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ceasefire.models.activity import Activity, ActivityType
from ceasefire.models.fight import Fight
from ceasefire.services.errors import (
    AlreadyResolvedError, CeasefireError, NotFoundError, UnauthorizedError,
    ValidationError, store_errors,
)
from ceasefire.services.identity import Identity

logger = logging.getLogger(__name__)

# Mediator toolbox: id -> (emoji, label, description)
MODERATION_ACTIONS = {
    'penalty': ('🔨', 'Penalty', 'Issue a penalty to a fighter'),
    'warning': ('⚠️', 'Warning', 'Give a warning to maintain order'),
    'motivation': ('💪', 'Motivation', 'Motivate the fighters'),
    'trade': ('💰', 'Trade Deal', 'Propose a trade resolution'),
    'mediate': ('🤝', 'Mediate', 'Facilitate negotiation'),
    'timeout': ('⏰', 'Timeout', 'Call for a break'),
}


class ActivityService:
    """Reads and appends fight activities."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(
        self,
        fight_id: str,
        actor: Identity,
        activity_type: ActivityType | str,
        message: str,
    ) -> Activity:
        """Append an activity. Raises ValidationError / StoreError."""
        message = (message or '').strip()
        if not message:
            raise ValidationError('Activity message is required')
        try:
            activity_type = ActivityType(activity_type)
        except ValueError:
            raise ValidationError(f'Unknown activity type: {activity_type}')

        with store_errors('append activity', fight_id=fight_id, actor=actor.id):
            entry = Activity(
                fight_id=fight_id,
                user_id=actor.id,
                activity_type=activity_type.value,
                message=message,
            )
            self.db.add(entry)
            await self.db.flush()
            await self.db.refresh(entry, attribute_names=['actor'])
        return entry

    async def record(
        self,
        fight_id: str,
        actor: Identity,
        activity_type: ActivityType,
        message: str,
    ) -> Activity | None:
        """Best-effort append used by state transitions. Never raises."""
        try:
            async with self.db.begin_nested():
                return await self.append(fight_id, actor, activity_type, message)
        except (CeasefireError, SQLAlchemyError) as e:
            logger.error(
                f'Dropped {activity_type} activity on fight {fight_id}: {e}',
                exc_info=True,
            )
            return None

    async def list_for_fight(self, fight_id: str) -> list[Activity]:
        """Activities of a fight, newest first."""
        with store_errors('list activities', fight_id=fight_id):
            result = await self.db.execute(
                select(Activity)
                .options(selectinload(Activity.actor))
                .where(Activity.fight_id == fight_id)
                .order_by(desc(Activity.created_at))
            )
            return list(result.scalars().all())

    async def post_comment(self, fight_id: str, actor: Identity, text: str) -> Activity:
        """Anyone may comment on a fight."""
        text = (text or '').strip()
        if not text:
            raise ValidationError('Comment cannot be empty')
        await self._load_fight(fight_id)
        return await self.append(fight_id, actor, ActivityType.COMMENT, f'💬 {text}')

    async def moderate(
        self, fight_id: str, actor: Identity, action: str, text: str,
    ) -> Activity:
        """Post a moderation action. Only the fight's mediator may do this."""
        if action not in MODERATION_ACTIONS:
            raise ValidationError(f'Unknown moderation action: {action}')
        text = (text or '').strip()
        if not text:
            raise ValidationError('Moderation message is required')

        fight = await self._load_fight(fight_id)
        if fight.is_resolved:
            raise AlreadyResolvedError('Fight is already resolved')
        if fight.mediator_id != actor.id:
            raise UnauthorizedError('Only the mediator can take moderation actions')

        emoji, label, _ = MODERATION_ACTIONS[action]
        return await self.append(
            fight_id, actor, ActivityType.MODERATION_ACTION,
            f'{emoji} {label}: {text}',
        )

    async def _load_fight(self, fight_id: str) -> Fight:
        with store_errors('load fight', fight_id=fight_id):
            fight = await self.db.get(Fight, fight_id, populate_existing=True)
        if not fight:
            raise NotFoundError('Fight not found')
        return fight
