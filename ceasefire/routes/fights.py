"""Fight endpoints: lifecycle, timeline and the live channel."""
from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession

from ceasefire.db.database import get_db
from ceasefire.routes.deps import commit, get_identity
from ceasefire.schemas.activity import ActivityResponse, CommentCreate, ModerationCreate
from ceasefire.schemas.fight import FightAccept, FightCreate, FightResolve, FightResponse
from ceasefire.services.activity_service import ActivityService
from ceasefire.services.channel_manager import channels
from ceasefire.services.errors import CeasefireError
from ceasefire.services.fight_service import FightService
from ceasefire.services.identity import Identity

router = APIRouter()


@router.post('', response_model=FightResponse, status_code=status.HTTP_201_CREATED)
async def create_fight(
    data: FightCreate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Open a fight and invite an opponent by email or username."""
    svc = FightService(db)
    try:
        fight = await svc.create_fight(
            creator=identity,
            title=data.title,
            description=data.description,
            opponent_identifier=data.opponent_email,
            creator_animal=data.creator_animal,
        )
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    await commit(db, 'create fight')
    return fight


@router.get('', response_model=list[FightResponse])
async def list_fights(
    view: str | None = Query(
        None, pattern=r'^(mine|invites|mediating|pending|resolved|involved)$',
    ),
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """All fights, newest first, optionally narrowed to a view."""
    try:
        return await FightService(db).list_fights(identity, view)
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get('/{fight_id}', response_model=FightResponse)
async def get_fight(fight_id: str, db: AsyncSession = Depends(get_db)):
    """Get a single fight by ID."""
    try:
        return await FightService(db).get_fight(fight_id)
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post('/{fight_id}/accept', response_model=FightResponse)
async def accept_fight(
    fight_id: str,
    data: FightAccept,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Invited opponent accepts with their animal."""
    try:
        fight = await FightService(db).accept_invitation(identity, fight_id, data.animal)
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    await commit(db, 'accept invitation')
    await channels.publish_update(fight_id, 'accepted')
    return fight


@router.post('/{fight_id}/take', response_model=FightResponse)
async def take_fight(
    fight_id: str,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Approved mediator takes the case."""
    try:
        fight = await FightService(db).take_mediation(identity, fight_id)
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    await commit(db, 'take mediation')
    await channels.publish_update(fight_id, 'mediator_took_fight')
    return fight


@router.post('/{fight_id}/resolve', response_model=FightResponse)
async def resolve_fight(
    fight_id: str,
    data: FightResolve,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Close the fight with a resolution."""
    try:
        fight = await FightService(db).resolve(identity, fight_id, data.resolution)
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    await commit(db, 'resolve fight')
    await channels.publish_update(fight_id, 'resolved')
    return fight


# ── Timeline ──────────────────────────────────────────────────────────────────

@router.get('/{fight_id}/activities', response_model=list[ActivityResponse])
async def list_activities(fight_id: str, db: AsyncSession = Depends(get_db)):
    """Fight timeline, newest first."""
    try:
        return await ActivityService(db).list_for_fight(fight_id)
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post(
    '/{fight_id}/activities',
    response_model=ActivityResponse,
    status_code=status.HTTP_201_CREATED,
)
async def post_comment(
    fight_id: str,
    data: CommentCreate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Comment on a fight."""
    try:
        activity = await ActivityService(db).post_comment(fight_id, identity, data.message)
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    await commit(db, 'post comment')
    await channels.publish_update(fight_id, 'comment')
    return activity


@router.post(
    '/{fight_id}/moderation',
    response_model=ActivityResponse,
    status_code=status.HTTP_201_CREATED,
)
async def moderate_fight(
    fight_id: str,
    data: ModerationCreate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Mediator takes a moderation action (penalty, warning, trade deal, ...)."""
    try:
        activity = await ActivityService(db).moderate(
            fight_id, identity, data.action, data.message,
        )
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    await commit(db, 'moderation action')
    await channels.publish_update(fight_id, 'moderation_action')
    return activity


@router.websocket('/{fight_id}/live')
async def fight_live(websocket: WebSocket, fight_id: str):
    """Spectator channel: spectator counts and update notices."""
    await channels.connect(websocket, fight_id)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await channels.leave(websocket, fight_id)
