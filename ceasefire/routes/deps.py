"""Shared route dependencies."""
from fastapi import Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ceasefire.db.database import get_db
from ceasefire.services.errors import CeasefireError, NotFoundError, store_errors
from ceasefire.services.identity import Identity
from ceasefire.services.profile_service import ProfileService


async def get_identity(
    user_id: str = Query(..., description='Acting user'),
    db: AsyncSession = Depends(get_db),
) -> Identity:
    """Resolve the calling user into an explicit identity."""
    try:
        return await ProfileService(db).get_identity(user_id)
    except NotFoundError:
        raise HTTPException(status_code=401, detail='Unknown user')
    except CeasefireError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


async def commit(db: AsyncSession, operation: str):
    """Commit the request's writes before anything is published."""
    try:
        with store_errors(f'commit {operation}'):
            await db.commit()
    except CeasefireError as e:
        await db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
