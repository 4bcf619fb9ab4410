"""Mediator assignment: proposals gated behind two-party consent.

A candidate proposes, the creator and the accepted opponent each approve their
own side, and the request becomes authoritative once both have. The fight is
not moved here; the mediator still has to take it through FightService.
"""
import logging
from datetime import datetime

from sqlalchemy import select, desc, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ceasefire.models.activity import ActivityType
from ceasefire.models.fight import Fight
from ceasefire.models.mediator_request import MediatorRequest, MediatorRequestStatus
from ceasefire.services.activity_service import ActivityService
from ceasefire.services.errors import (
    AlreadyResolvedError, NotFoundError, RequestClosedError, UnauthorizedError,
    ValidationError, ensure_single_row, store_errors,
)
from ceasefire.services.fight_service import FightService, is_fighter
from ceasefire.services.identity import Identity

logger = logging.getLogger(__name__)

REQUEST_VIEWS = ('mine', 'awaiting_me')
CREATOR_DECISIONS = (
    MediatorRequestStatus.APPROVED.value,
    MediatorRequestStatus.REJECTED.value,
)


def awaits_approval_from(request: MediatorRequest, user_id: str) -> bool:
    """True if `user_id` is a party whose approval is still missing."""
    if request.is_closed:
        return False
    fight = request.fight
    if fight.creator_id == user_id and not request.accepted_by_creator:
        return True
    return (
        fight.opponent_accepted
        and fight.opponent_user_id == user_id
        and not request.accepted_by_opponent
    )


class MediatorService:
    """Handles mediation proposals and party approvals."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.fights = FightService(db)
        self.activity = ActivityService(db)

    async def propose(
        self, candidate: Identity, fight_id: str, proposal_message: str,
    ) -> MediatorRequest:
        """Offer to mediate a fight."""
        proposal_message = (proposal_message or '').strip()
        if not proposal_message:
            raise ValidationError('Proposal message is required')

        fight = await self.fights.get_fight(fight_id)
        if fight.is_resolved:
            raise AlreadyResolvedError('Fight is already resolved')
        if is_fighter(fight, candidate):
            raise UnauthorizedError('Fighters cannot mediate their own fight')

        with store_errors('propose mediation', fight_id=fight_id, candidate=candidate.id):
            result = await self.db.execute(
                select(MediatorRequest.id)
                .where(MediatorRequest.fight_id == fight_id)
                .where(MediatorRequest.mediator_id == candidate.id)
                .where(MediatorRequest.status == MediatorRequestStatus.PENDING.value)
                .limit(1)
            )
            if result.scalar_one_or_none():
                raise ValidationError('You already proposed to mediate this fight')

            request = MediatorRequest(
                fight_id=fight_id,
                mediator_id=candidate.id,
                proposal_message=proposal_message,
                status=MediatorRequestStatus.PENDING.value,
                accepted_by_creator=False,
                accepted_by_opponent=False,
            )
            self.db.add(request)
            await self.db.flush()

        logger.info(f'Mediation proposed on fight {fight_id} by {candidate.id}')
        await self.activity.record(
            fight_id, candidate, ActivityType.MEDIATION_REQUEST,
            f'🦅 Proposed mediation: {proposal_message}',
        )
        return await self.get_request(request.id)

    async def approve_as_party(
        self,
        approver: Identity,
        request_id: str,
        is_creator: bool,
        response: str | None = None,
    ) -> MediatorRequest:
        """Set the approver's own consent flag. Never both from one call."""
        request = await self.get_request(request_id)
        fight = await self.fights.get_fight(request.fight_id)
        if request.is_closed or fight.is_resolved:
            raise RequestClosedError('This mediation request is closed')

        role = fight.party_role(approver.id)
        if role is None:
            raise UnauthorizedError('Only the fighters can approve a mediator')
        if (role == 'creator') != bool(is_creator):
            raise UnauthorizedError('You can only approve for your own side')

        flag = 'accepted_by_creator' if role == 'creator' else 'accepted_by_opponent'
        if getattr(request, flag):
            return request

        now = datetime.utcnow()
        values = {flag: True, 'updated_at': now}
        response = (response or '').strip()
        if response:
            values[f'{role}_response'] = response

        with store_errors('approve mediator', request_id=request_id, approver=approver.id):
            result = await self.db.execute(
                update(MediatorRequest)
                .where(MediatorRequest.id == request_id)
                .where(MediatorRequest.status != MediatorRequestStatus.REJECTED.value)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
        ensure_single_row(result.rowcount, 'mediator_requests', request_id)

        if role == 'creator':
            activity_type = ActivityType.MEDIATOR_ACCEPTED_BY_CREATOR
        else:
            activity_type = ActivityType.MEDIATOR_ACCEPTED_BY_OPPONENT
        await self.activity.record(
            fight.id, approver, activity_type,
            f'✅ {role.capitalize()} accepted mediator proposal',
        )

        await self._promote_if_authoritative(request, now)
        return await self.get_request(request_id)

    async def respond_as_creator(
        self,
        creator: Identity,
        request_id: str,
        decision: str,
        message: str | None = None,
    ) -> MediatorRequest:
        """Creator's verdict. Approval is the creator's consent; rejection is final."""
        if decision not in CREATOR_DECISIONS:
            raise ValidationError(f'Decision must be one of {", ".join(CREATOR_DECISIONS)}')

        request = await self.get_request(request_id)
        fight = await self.fights.get_fight(request.fight_id)
        if creator.id != fight.creator_id:
            raise UnauthorizedError('Only the fight creator can respond to this request')
        if request.is_closed or fight.is_resolved:
            raise RequestClosedError('This mediation request is closed')

        now = datetime.utcnow()
        values = {
            'creator_response': (message or '').strip() or decision,
            'updated_at': now,
        }
        if decision == MediatorRequestStatus.REJECTED.value:
            values['status'] = decision
        else:
            values['accepted_by_creator'] = True

        with store_errors('respond to mediator', request_id=request_id):
            result = await self.db.execute(
                update(MediatorRequest)
                .where(MediatorRequest.id == request_id)
                .where(MediatorRequest.status != MediatorRequestStatus.REJECTED.value)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
        ensure_single_row(result.rowcount, 'mediator_requests', request_id)

        logger.info(f'Creator {creator.id} {decision} mediator request {request_id}')
        if decision == MediatorRequestStatus.REJECTED.value:
            await self.activity.record(
                fight.id, creator, ActivityType.MEDIATOR_REJECTED,
                '❌ Creator rejected mediator proposal',
            )
        else:
            if not request.accepted_by_creator:
                await self.activity.record(
                    fight.id, creator, ActivityType.MEDIATOR_ACCEPTED_BY_CREATOR,
                    '✅ Creator accepted mediator proposal',
                )
            await self._promote_if_authoritative(request, now)
        return await self.get_request(request_id)

    async def _promote_if_authoritative(self, request: MediatorRequest, now: datetime):
        """Whichever consent lands second moves the request to approved."""
        with store_errors('promote mediator request', request_id=request.id):
            result = await self.db.execute(
                update(MediatorRequest)
                .where(MediatorRequest.id == request.id)
                .where(MediatorRequest.accepted_by_creator.is_(True))
                .where(MediatorRequest.accepted_by_opponent.is_(True))
                .where(MediatorRequest.accepted_at.is_(None))
                .where(MediatorRequest.status != MediatorRequestStatus.REJECTED.value)
                .values(accepted_at=now, status=MediatorRequestStatus.APPROVED.value)
                .execution_options(synchronize_session=False)
            )
        if result.rowcount:
            logger.info(
                f'Mediator {request.mediator_id} approved by both fighters on fight {request.fight_id}'
            )

    # ── Reads ─────────────────────────────────────────────────────────────────

    async def get_request(self, request_id: str) -> MediatorRequest:
        """Load a request with its fight and mediator. Raises NotFoundError."""
        with store_errors('get mediator request', request_id=request_id):
            result = await self.db.execute(
                self._request_query()
                .where(MediatorRequest.id == request_id)
                .execution_options(populate_existing=True)
            )
            request = result.scalar_one_or_none()
        if not request:
            raise NotFoundError('Mediator request not found')
        return request

    async def list_requests(
        self,
        viewer: Identity,
        view: str | None = None,
        fight_id: str | None = None,
    ) -> list[MediatorRequest]:
        """Requests newest first, optionally for one fight or one view."""
        if view is not None and view not in REQUEST_VIEWS:
            raise ValidationError(f'Unknown view: {view}')

        query = self._request_query().order_by(desc(MediatorRequest.created_at))
        if fight_id:
            query = query.where(MediatorRequest.fight_id == fight_id)
        with store_errors('list mediator requests', viewer=viewer.id):
            result = await self.db.execute(
                query.execution_options(populate_existing=True)
            )
            requests = list(result.scalars().all())

        if view == 'mine':
            return [r for r in requests if r.mediator_id == viewer.id]
        if view == 'awaiting_me':
            return [r for r in requests if awaits_approval_from(r, viewer.id)]
        return requests

    def _request_query(self):
        return select(MediatorRequest).options(
            selectinload(MediatorRequest.fight).selectinload(Fight.creator),
            selectinload(MediatorRequest.mediator),
        )
