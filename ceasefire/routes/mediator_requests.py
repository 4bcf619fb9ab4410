"""Mediator request endpoints: propose, approve, respond."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ceasefire.db.database import get_db
from ceasefire.routes.deps import commit, get_identity
from ceasefire.schemas.mediator_request import (
    MediatorApprove, MediatorRequestCreate, MediatorRequestResponse, MediatorRespond,
)
from ceasefire.services.channel_manager import channels
from ceasefire.services.errors import CeasefireError
from ceasefire.services.identity import Identity
from ceasefire.services.mediator_service import MediatorService

router = APIRouter()


@router.post('', response_model=MediatorRequestResponse, status_code=status.HTTP_201_CREATED)
async def propose_mediation(
    data: MediatorRequestCreate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Offer to mediate a fight."""
    try:
        request = await MediatorService(db).propose(
            identity, data.fight_id, data.proposal_message,
        )
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    await commit(db, 'propose mediation')
    await channels.publish_update(data.fight_id, 'mediation_request')
    return request


@router.get('', response_model=list[MediatorRequestResponse])
async def list_requests(
    view: str | None = Query(None, pattern=r'^(mine|awaiting_me)$'),
    fight_id: str | None = Query(None),
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Mediator requests, newest first."""
    try:
        return await MediatorService(db).list_requests(identity, view, fight_id)
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get('/{request_id}', response_model=MediatorRequestResponse)
async def get_request(request_id: str, db: AsyncSession = Depends(get_db)):
    """Get a single mediator request by ID."""
    try:
        return await MediatorService(db).get_request(request_id)
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post('/{request_id}/approve', response_model=MediatorRequestResponse)
async def approve_request(
    request_id: str,
    data: MediatorApprove,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """A fighter approves the mediator for their side."""
    try:
        request = await MediatorService(db).approve_as_party(
            identity, request_id, data.is_creator, data.response,
        )
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    await commit(db, 'approve mediator')
    await channels.publish_update(request.fight_id, 'mediator_approved')
    return request


@router.post('/{request_id}/respond', response_model=MediatorRequestResponse)
async def respond_to_request(
    request_id: str,
    data: MediatorRespond,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Creator approves or rejects a mediator request."""
    try:
        request = await MediatorService(db).respond_as_creator(
            identity, request_id, data.decision, data.message,
        )
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    await commit(db, 'respond to mediator')
    await channels.publish_update(request.fight_id, f'mediator_{data.decision}')
    return request
