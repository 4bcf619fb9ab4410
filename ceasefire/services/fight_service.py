"""Fight lifecycle: create, accept, take mediation, resolve.

pending -> accepted -> in-progress -> resolved, with pending -> in-progress
allowed through a mediator takeover. Every transition is a single guarded
UPDATE so concurrent callers cannot both win.
"""
import logging
from datetime import datetime

from sqlalchemy import select, desc, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ceasefire.config import settings
from ceasefire.models.activity import ActivityType
from ceasefire.models.fight import Fight, FightStatus
from ceasefire.models.mediator_request import MediatorRequest, MediatorRequestStatus
from ceasefire.models.persona import parse_animal, persona_label
from ceasefire.models.profile import Profile
from ceasefire.services.activity_service import ActivityService
from ceasefire.services.errors import (
    AlreadyAcceptedError, AlreadyResolvedError, NotFoundError, NotInvitedError,
    UnauthorizedError, ValidationError, ensure_single_row, store_errors,
)
from ceasefire.services.identity import Identity, normalize_email

logger = logging.getLogger(__name__)

FIGHT_VIEWS = ('mine', 'invites', 'mediating', 'pending', 'resolved', 'involved')


def filter_fights(
    fights: list[Fight], viewer: Identity, view: str | None = None,
) -> list[Fight]:
    """Derived views over the full fight list. Order is preserved."""
    if view is None:
        return list(fights)
    if view not in FIGHT_VIEWS:
        raise ValidationError(f'Unknown view: {view}')

    email = normalize_email(viewer.email)
    if view == 'mine':
        return [f for f in fights if f.creator_id == viewer.id]
    if view == 'invites':
        return [
            f for f in fights
            if f.opponent_email == email
            and not f.opponent_accepted
            and f.creator_id != viewer.id
        ]
    if view == 'mediating':
        return [f for f in fights if f.mediator_id == viewer.id]
    if view == 'pending':
        return [f for f in fights if f.status == FightStatus.PENDING.value]
    if view == 'resolved':
        return [f for f in fights if f.status == FightStatus.RESOLVED.value]
    # involved
    return [
        f for f in fights
        if viewer.id in (f.creator_id, f.mediator_id)
        or (f.opponent_accepted and f.opponent_user_id == viewer.id)
    ]


def is_fighter(fight: Fight, identity: Identity) -> bool:
    """Creator, accepted opponent, or the still-invited opponent."""
    if fight.party_role(identity.id):
        return True
    return bool(fight.opponent_email) and normalize_email(identity.email) == fight.opponent_email


class FightService:
    """Owns the fight state machine."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.activity = ActivityService(db)

    # ── Transitions ───────────────────────────────────────────────────────────

    async def create_fight(
        self,
        creator: Identity,
        title: str,
        description: str,
        opponent_identifier: str | None,
        creator_animal: str,
    ) -> Fight:
        """Open a new fight in `pending`."""
        title = (title or '').strip()
        description = (description or '').strip()
        if not title:
            raise ValidationError('Title is required')
        if not description:
            raise ValidationError('Description is required')
        if not (creator_animal or '').strip():
            raise ValidationError('Choose your animal')
        animal = parse_animal(creator_animal)
        if animal is None:
            raise ValidationError(f'Unknown animal: {creator_animal}')

        opponent_email = await self._resolve_opponent(creator, opponent_identifier)

        with store_errors('create fight', creator=creator.id):
            fight = Fight(
                title=title,
                description=description,
                creator_id=creator.id,
                opponent_email=opponent_email,
                creator_animal=animal.value,
                status=FightStatus.PENDING.value,
                opponent_accepted=False,
            )
            self.db.add(fight)
            await self.db.flush()

        logger.info(f'Fight {fight.id} created by {creator.id}, invited {opponent_email}')
        return await self.get_fight(fight.id)

    async def accept_invitation(
        self, responder: Identity, fight_id: str, chosen_animal: str,
    ) -> Fight:
        """Invited opponent joins the fight with their persona."""
        animal = parse_animal(chosen_animal)
        if animal is None:
            raise ValidationError('Choose a valid animal before accepting')

        fight = await self.get_fight(fight_id)
        if fight.opponent_accepted:
            raise AlreadyAcceptedError('Fight invitation was already accepted')
        if fight.is_resolved:
            raise AlreadyResolvedError('Fight is already resolved')
        if not fight.opponent_email or normalize_email(responder.email) != fight.opponent_email:
            raise NotInvitedError('You were not invited to this fight')

        now = datetime.utcnow()
        with store_errors('accept invitation', fight_id=fight_id, responder=responder.id):
            result = await self.db.execute(
                update(Fight)
                .where(Fight.id == fight_id)
                .where(Fight.opponent_accepted.is_(False))
                .values(
                    opponent_animal=animal.value,
                    opponent_user_id=responder.id,
                    opponent_accepted=True,
                    opponent_accepted_at=now,
                    status=FightStatus.ACCEPTED.value,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
        ensure_single_row(result.rowcount, 'fights', fight_id)

        logger.info(f'Fight {fight_id} accepted by {responder.id} as {animal.value}')
        await self.activity.record(
            fight_id, responder, ActivityType.FIGHT_ACCEPTED,
            f'🥊 {responder.display_name} accepted the fight as {persona_label(animal)}',
        )
        return await self.get_fight(fight_id)

    async def take_mediation(self, candidate: Identity, fight_id: str) -> Fight:
        """Candidate becomes the fight's mediator; fight moves to in-progress."""
        fight = await self.get_fight(fight_id)
        if fight.is_resolved:
            raise AlreadyResolvedError('Fight is already resolved')
        if is_fighter(fight, candidate):
            raise UnauthorizedError('Fighters cannot mediate their own fight')
        if fight.mediator_id == candidate.id:
            return fight
        if fight.mediator_id:
            raise UnauthorizedError('Fight already has a mediator')
        if settings.require_approved_mediator:
            approved = await self.find_approved_request(fight_id, candidate.id)
            if approved is None:
                raise UnauthorizedError('Both fighters must approve you as mediator first')

        now = datetime.utcnow()
        with store_errors('take mediation', fight_id=fight_id, candidate=candidate.id):
            result = await self.db.execute(
                update(Fight)
                .where(Fight.id == fight_id)
                .where(Fight.mediator_id.is_(None))
                .where(Fight.status != FightStatus.RESOLVED.value)
                .values(
                    mediator_id=candidate.id,
                    status=FightStatus.IN_PROGRESS.value,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
        ensure_single_row(result.rowcount, 'fights', fight_id)

        logger.info(f'Fight {fight_id} taken by mediator {candidate.id}')
        await self.activity.record(
            fight_id, candidate, ActivityType.MEDIATOR_TOOK_FIGHT,
            f'⚖️ {candidate.display_name} is now mediating this fight',
        )
        return await self.get_fight(fight_id)

    async def resolve(
        self, actor: Identity, fight_id: str, resolution_text: str,
    ) -> Fight:
        """Close the fight with a resolution. Terminal."""
        resolution_text = (resolution_text or '').strip()
        if not resolution_text:
            raise ValidationError('Resolution is required')

        fight = await self.get_fight(fight_id)
        if fight.is_resolved:
            raise AlreadyResolvedError('Fight is already resolved')
        if actor.id not in (fight.creator_id, fight.mediator_id):
            raise UnauthorizedError('Only the creator or the mediator can resolve a fight')

        now = datetime.utcnow()
        with store_errors('resolve fight', fight_id=fight_id, actor=actor.id):
            result = await self.db.execute(
                update(Fight)
                .where(Fight.id == fight_id)
                .where(Fight.status != FightStatus.RESOLVED.value)
                .values(
                    resolution=resolution_text,
                    status=FightStatus.RESOLVED.value,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
        ensure_single_row(result.rowcount, 'fights', fight_id)

        logger.info(f'Fight {fight_id} resolved by {actor.id}')
        await self.activity.record(
            fight_id, actor, ActivityType.FIGHT_RESOLVED,
            f'🕊️ Resolved: {resolution_text}',
        )
        return await self.get_fight(fight_id)

    # ── Reads ─────────────────────────────────────────────────────────────────

    async def get_fight(self, fight_id: str) -> Fight:
        """Load a fight with its display profiles. Raises NotFoundError."""
        with store_errors('get fight', fight_id=fight_id):
            result = await self.db.execute(
                self._fight_query()
                .where(Fight.id == fight_id)
                .execution_options(populate_existing=True)
            )
            fight = result.scalar_one_or_none()
        if not fight:
            raise NotFoundError('Fight not found')
        return fight

    async def list_fights(
        self, viewer: Identity, view: str | None = None,
    ) -> list[Fight]:
        """All fights newest first, optionally narrowed to a derived view."""
        if view is not None and view not in FIGHT_VIEWS:
            raise ValidationError(f'Unknown view: {view}')
        with store_errors('list fights', viewer=viewer.id):
            result = await self.db.execute(
                self._fight_query()
                .order_by(desc(Fight.created_at))
                .execution_options(populate_existing=True)
            )
            fights = list(result.scalars().all())
        return filter_fights(fights, viewer, view)

    async def find_approved_request(
        self, fight_id: str, mediator_id: str,
    ) -> MediatorRequest | None:
        """The candidate's dual-approved request on this fight, if any."""
        with store_errors('find approved request', fight_id=fight_id):
            result = await self.db.execute(
                select(MediatorRequest)
                .where(MediatorRequest.fight_id == fight_id)
                .where(MediatorRequest.mediator_id == mediator_id)
                .where(MediatorRequest.accepted_by_creator.is_(True))
                .where(MediatorRequest.accepted_by_opponent.is_(True))
                .where(MediatorRequest.status != MediatorRequestStatus.REJECTED.value)
                .limit(1)
            )
            return result.scalar_one_or_none()

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _fight_query(self):
        return select(Fight).options(
            selectinload(Fight.creator),
            selectinload(Fight.opponent),
            selectinload(Fight.mediator),
        )

    async def _resolve_opponent(
        self, creator: Identity, identifier: str | None,
    ) -> str | None:
        """Normalize the invited opponent to an email address."""
        identifier = (identifier or '').strip()
        if not identifier:
            if settings.require_opponent:
                raise ValidationError('Opponent email or username is required')
            return None

        if '@' in identifier.lstrip('@'):
            email = normalize_email(identifier)
            local, _, domain = email.partition('@')
            if not local or '.' not in domain:
                raise ValidationError(f'Invalid opponent email: {identifier}')
        else:
            username = identifier.lstrip('@')
            with store_errors('resolve opponent', username=username):
                result = await self.db.execute(
                    select(Profile).where(Profile.username == username)
                )
                profile = result.scalar_one_or_none()
            if not profile:
                raise ValidationError(f'Unknown opponent: {identifier}')
            email = normalize_email(profile.email)

        if email == normalize_email(creator.email):
            raise ValidationError('You cannot invite yourself')
        return email
