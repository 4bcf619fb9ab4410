"""Seed script: wipe all data and create fresh test accounts and a sample fight.

Usage (from inside the api container):
    python seed.py

Usage (from host, via docker):
    docker compose exec api python seed.py
"""
import asyncio

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from ceasefire.db.database import Base, engine, async_session
from ceasefire.models import Activity, Fight, MediatorRequest, Profile
from ceasefire.services.fight_service import FightService
from ceasefire.services.identity import Identity


# Test accounts to create
TEST_PROFILES = [
    {'username': 'alice', 'email': 'alice@example.com', 'role': 'fighter'},
    {'username': 'bob', 'email': 'bob@example.com', 'role': 'fighter'},
    {'username': 'carol', 'email': 'carol@example.com', 'role': 'trump'},
]


async def wipe_all(db: AsyncSession):
    """Delete all rows in dependency-safe order."""
    for model in (Activity, MediatorRequest, Fight, Profile):
        await db.execute(delete(model))
    await db.commit()
    print('✓ All tables wiped')


async def create_profiles(db: AsyncSession) -> dict[str, Profile]:
    """Create test profiles."""
    created = {}
    for p in TEST_PROFILES:
        profile = Profile(username=p['username'], email=p['email'], role=p['role'])
        db.add(profile)
        await db.flush()
        await db.refresh(profile)
        created[p['username']] = profile
        print(f'  ✓ @{p["username"]} ({p["role"]}), id={profile.id}')
    await db.commit()
    return created


async def create_sample_fight(db: AsyncSession, profiles: dict[str, Profile]):
    """Alice opens a fight against Bob."""
    alice = profiles['alice']
    fight = await FightService(db).create_fight(
        creator=Identity(id=alice.id, email=alice.email, username=alice.username),
        title='Deadline dispute',
        description='Who missed the handoff for the quarterly report?',
        opponent_identifier='bob@example.com',
        creator_animal='lion',
    )
    await db.commit()
    print(f'  ✓ "{fight.title}" ({fight.status}), id={fight.id}')


async def main():
    print()
    print('=' * 50)
    print('  Ceasefire Seed Script')
    print('=' * 50)
    print()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        print('[1/3] Wiping all data...')
        await wipe_all(db)

        print('[2/3] Creating test profiles...')
        profiles = await create_profiles(db)

        print('[3/3] Creating sample fight...')
        await create_sample_fight(db, profiles)

    await engine.dispose()

    print()
    print('Done! Ready for testing.')
    print()
    print('  Profiles:')
    for p in TEST_PROFILES:
        print(f'    @{p["username"]}  {p["email"]}  ({p["role"]})')
    print()


if __name__ == '__main__':
    asyncio.run(main())
