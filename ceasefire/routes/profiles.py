from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ceasefire.db.database import get_db
from ceasefire.routes.deps import commit
from ceasefire.schemas.profile import ProfileCreate, ProfileUpdate, ProfileResponse, ProfileStats
from ceasefire.services.errors import CeasefireError
from ceasefire.services.profile_service import ProfileService

router = APIRouter()


@router.post('', response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_profile(data: ProfileCreate, db: AsyncSession = Depends(get_db)):
    """Sign up (dev mode, no password)."""
    try:
        profile = await ProfileService(db).create_profile(data.username, data.email, data.role)
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    await commit(db, 'create profile')
    return profile


@router.get('/username/{username}', response_model=ProfileResponse)
async def get_profile_by_username(username: str, db: AsyncSession = Depends(get_db)):
    """Get profile by username."""
    try:
        return await ProfileService(db).get_profile_by_username(username)
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get('/{user_id}', response_model=ProfileResponse)
async def get_profile(user_id: str, db: AsyncSession = Depends(get_db)):
    """Get profile by ID."""
    try:
        return await ProfileService(db).get_profile(user_id)
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.patch('/{user_id}', response_model=ProfileResponse)
async def update_profile(
    user_id: str, data: ProfileUpdate, db: AsyncSession = Depends(get_db)
):
    """Update username or role."""
    try:
        profile = await ProfileService(db).update_profile(
            user_id, username=data.username, role=data.role,
        )
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    await commit(db, 'update profile')
    return profile


@router.get('/{user_id}/stats', response_model=ProfileStats)
async def get_profile_stats(user_id: str, db: AsyncSession = Depends(get_db)):
    """Fights created, resolved, mediated and pending mediator requests."""
    try:
        return await ProfileService(db).get_stats(user_id)
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
