import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession


async def signup(client, username, role='fighter'):
    resp = await client.post('/api/profiles', json={
        'username': username,
        'email': f'{username.capitalize()}@Example.com',
        'role': role,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
async def users(client):
    return {
        'alice': await signup(client, 'alice'),
        'bob': await signup(client, 'bob'),
        'carol': await signup(client, 'carol', role='trump'),
        'dave': await signup(client, 'dave'),
    }


async def open_fight(client, users, opponent='bob@example.com'):
    resp = await client.post(
        '/api/fights',
        params={'user_id': users['alice']['id']},
        json={
            'title': 'Dishes',
            'description': 'Whose turn is it',
            'opponent_email': opponent,
            'creator_animal': 'Lion',
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_health(client):
    resp = await client.get('/health')
    assert resp.status_code == 200
    assert resp.json() == {'status': 'ok', 'service': 'ceasefire-api'}


async def test_personas(client):
    resp = await client.get('/api/personas')
    assert resp.status_code == 200
    personas = resp.json()
    assert len(personas) == 20
    assert personas[0]['id'] == 'lion'
    assert {'id', 'name', 'emoji', 'traits'} <= set(personas[0])


async def test_signup_normalizes_email(client):
    profile = await signup(client, 'erin')
    assert profile['email'] == 'erin@example.com'
    assert profile['role'] == 'fighter'


async def test_signup_rejects_duplicates(client, users):
    resp = await client.post('/api/profiles', json={
        'username': 'alice', 'email': 'other@example.com',
    })
    assert resp.status_code == 400
    resp = await client.post('/api/profiles', json={
        'username': 'alice2', 'email': 'ALICE@example.com',
    })
    assert resp.status_code == 400


async def test_signup_validates_payload(client):
    resp = await client.post('/api/profiles', json={'username': 'x y', 'email': 'nope'})
    assert resp.status_code == 422


async def test_profile_lookup_and_update(client, users):
    alice = users['alice']
    resp = await client.get(f'/api/profiles/{alice["id"]}')
    assert resp.json()['username'] == 'alice'

    resp = await client.get('/api/profiles/username/bob')
    assert resp.json()['id'] == users['bob']['id']

    resp = await client.patch(f'/api/profiles/{alice["id"]}', json={'role': 'trump'})
    assert resp.status_code == 200
    assert resp.json()['role'] == 'trump'

    resp = await client.patch(f'/api/profiles/{alice["id"]}', json={'username': 'bob'})
    assert resp.status_code == 400

    resp = await client.get('/api/profiles/missing')
    assert resp.status_code == 404


async def test_unknown_user_is_unauthenticated(client, users):
    resp = await client.get('/api/fights', params={'user_id': 'ghost'})
    assert resp.status_code == 401
    resp = await client.get('/api/fights')
    assert resp.status_code == 422


async def test_create_fight_over_http(client, users):
    fight = await open_fight(client, users)
    assert fight['status'] == 'pending'
    assert fight['creator_animal'] == 'lion'
    assert fight['opponent_email'] == 'bob@example.com'
    assert fight['creator']['username'] == 'alice'
    assert fight['opponent'] is None
    assert fight['mediator'] is None


async def test_create_fight_by_username(client, users):
    fight = await open_fight(client, users, opponent='@bob')
    assert fight['opponent_email'] == 'bob@example.com'


async def test_create_fight_validation_is_400(client, users):
    resp = await client.post(
        '/api/fights',
        params={'user_id': users['alice']['id']},
        json={'title': ' ', 'description': 'x', 'opponent_email': 'bob@example.com',
              'creator_animal': 'lion'},
    )
    assert resp.status_code == 400


async def test_full_mediation_flow(client, users):
    alice, bob, carol = users['alice'], users['bob'], users['carol']
    fight = await open_fight(client, users)
    fight_id = fight['id']

    # Wrong person accepting
    resp = await client.post(
        f'/api/fights/{fight_id}/accept',
        params={'user_id': users['dave']['id']}, json={'animal': 'owl'},
    )
    assert resp.status_code == 403

    resp = await client.post(
        f'/api/fights/{fight_id}/accept',
        params={'user_id': bob['id']}, json={'animal': 'owl'},
    )
    assert resp.status_code == 200
    assert resp.json()['status'] == 'accepted'
    assert resp.json()['opponent']['username'] == 'bob'

    resp = await client.post(
        f'/api/fights/{fight_id}/accept',
        params={'user_id': bob['id']}, json={'animal': 'owl'},
    )
    assert resp.status_code == 409

    resp = await client.post(
        '/api/mediator-requests',
        params={'user_id': carol['id']},
        json={'fight_id': fight_id, 'proposal_message': 'Alternate nights'},
    )
    assert resp.status_code == 201
    request_id = resp.json()['id']

    # Not approved yet
    resp = await client.post(f'/api/fights/{fight_id}/take', params={'user_id': carol['id']})
    assert resp.status_code == 403

    resp = await client.get(
        '/api/mediator-requests', params={'user_id': bob['id'], 'view': 'awaiting_me'},
    )
    assert [r['id'] for r in resp.json()] == [request_id]

    resp = await client.post(
        f'/api/mediator-requests/{request_id}/approve',
        params={'user_id': bob['id']}, json={'is_creator': False},
    )
    assert resp.status_code == 200
    assert resp.json()['is_authoritative'] is False

    resp = await client.post(
        f'/api/mediator-requests/{request_id}/approve',
        params={'user_id': alice['id']}, json={'is_creator': True, 'response': 'OK'},
    )
    body = resp.json()
    assert body['is_authoritative'] is True
    assert body['status'] == 'approved'
    assert body['accepted_at'] is not None

    resp = await client.post(f'/api/fights/{fight_id}/take', params={'user_id': carol['id']})
    assert resp.status_code == 200
    assert resp.json()['status'] == 'in-progress'
    assert resp.json()['mediator']['username'] == 'carol'

    resp = await client.post(
        f'/api/fights/{fight_id}/moderation',
        params={'user_id': carol['id']},
        json={'action': 'trade', 'message': 'Alice dishes, Bob laundry'},
    )
    assert resp.status_code == 201
    assert resp.json()['message'] == '💰 Trade Deal: Alice dishes, Bob laundry'

    resp = await client.post(
        f'/api/fights/{fight_id}/resolve',
        params={'user_id': carol['id']}, json={'resolution': 'Chore wheel'},
    )
    assert resp.status_code == 200
    assert resp.json()['status'] == 'resolved'
    assert resp.json()['resolution'] == 'Chore wheel'

    resp = await client.post(
        f'/api/fights/{fight_id}/resolve',
        params={'user_id': alice['id']}, json={'resolution': 'Again'},
    )
    assert resp.status_code == 409

    resp = await client.get(f'/api/fights/{fight_id}/activities')
    types = [a['activity_type'] for a in resp.json()]
    assert types == [
        'fight_resolved',
        'moderation_action',
        'mediator_took_fight',
        'mediator_accepted_by_creator',
        'mediator_accepted_by_opponent',
        'mediation_request',
        'fight_accepted',
    ]

    resp = await client.get(f'/api/profiles/{carol["id"]}/stats')
    assert resp.json()['mediated_fights'] == 1
    resp = await client.get(f'/api/profiles/{alice["id"]}/stats')
    assert resp.json() == {
        'total_fights': 1,
        'resolved_fights': 1,
        'mediated_fights': 0,
        'pending_requests': 0,
    }


async def test_rejected_request_is_closed(client, users):
    fight = await open_fight(client, users)
    await client.post(
        f'/api/fights/{fight["id"]}/accept',
        params={'user_id': users['bob']['id']}, json={'animal': 'bear'},
    )
    resp = await client.post(
        '/api/mediator-requests',
        params={'user_id': users['carol']['id']},
        json={'fight_id': fight['id'], 'proposal_message': 'Coin flip'},
    )
    request_id = resp.json()['id']

    resp = await client.post(
        f'/api/mediator-requests/{request_id}/respond',
        params={'user_id': users['alice']['id']}, json={'decision': 'rejected'},
    )
    assert resp.status_code == 200
    assert resp.json()['status'] == 'rejected'

    resp = await client.post(
        f'/api/mediator-requests/{request_id}/approve',
        params={'user_id': users['bob']['id']}, json={'is_creator': False},
    )
    assert resp.status_code == 409


async def test_list_fights_views(client, users):
    fight = await open_fight(client, users)
    bob_id = users['bob']['id']

    resp = await client.get('/api/fights', params={'user_id': bob_id, 'view': 'invites'})
    assert [f['id'] for f in resp.json()] == [fight['id']]

    resp = await client.get('/api/fights', params={'user_id': bob_id, 'view': 'mine'})
    assert resp.json() == []

    resp = await client.get('/api/fights', params={'user_id': bob_id, 'view': 'bogus'})
    assert resp.status_code == 422


async def test_comment_and_missing_fight(client, users):
    fight = await open_fight(client, users)
    resp = await client.post(
        f'/api/fights/{fight["id"]}/activities',
        params={'user_id': users['dave']['id']}, json={'message': 'Popcorn'},
    )
    assert resp.status_code == 201
    assert resp.json()['actor']['username'] == 'dave'

    resp = await client.get('/api/fights/missing')
    assert resp.status_code == 404


async def test_commit_failure_answers_503(client, users, monkeypatch):
    fight = await open_fight(client, users)

    async def broken_commit(self):
        raise OperationalError('COMMIT', {}, Exception('connection lost'))

    monkeypatch.setattr(AsyncSession, 'commit', broken_commit)
    resp = await client.post(
        f'/api/fights/{fight["id"]}/accept',
        params={'user_id': users['bob']['id']}, json={'animal': 'owl'},
    )
    assert resp.status_code == 503
    assert resp.json()['detail'] == 'commit accept invitation failed'

    resp = await client.post(
        '/api/fights',
        params={'user_id': users['alice']['id']},
        json={'title': 'Parking', 'description': 'My spot',
              'opponent_email': 'dave@example.com', 'creator_animal': 'wolf'},
    )
    assert resp.status_code == 503

    monkeypatch.undo()
    resp = await client.get(f'/api/fights/{fight["id"]}')
    assert resp.json()['status'] == 'pending'
    assert resp.json()['opponent_accepted'] is False
    resp = await client.get('/api/fights', params={'user_id': users['alice']['id']})
    assert [f['id'] for f in resp.json()] == [fight['id']]


async def test_signup_commit_failure_answers_503(client, monkeypatch):
    async def broken_commit(self):
        raise OperationalError('COMMIT', {}, Exception('connection lost'))

    monkeypatch.setattr(AsyncSession, 'commit', broken_commit)
    resp = await client.post('/api/profiles', json={
        'username': 'frank', 'email': 'frank@example.com',
    })
    assert resp.status_code == 503

    monkeypatch.undo()
    resp = await client.get('/api/profiles/username/frank')
    assert resp.status_code == 404


async def test_creator_approval_keeps_request_pending(client, users):
    fight = await open_fight(client, users)
    await client.post(
        f'/api/fights/{fight["id"]}/accept',
        params={'user_id': users['bob']['id']}, json={'animal': 'bear'},
    )
    resp = await client.post(
        '/api/mediator-requests',
        params={'user_id': users['carol']['id']},
        json={'fight_id': fight['id'], 'proposal_message': 'Coin flip'},
    )
    request_id = resp.json()['id']

    resp = await client.post(
        f'/api/mediator-requests/{request_id}/respond',
        params={'user_id': users['alice']['id']}, json={'decision': 'approved'},
    )
    body = resp.json()
    assert body['status'] == 'pending'
    assert body['accepted_by_creator'] is True
    assert body['is_authoritative'] is False

    resp = await client.get(
        '/api/mediator-requests', params={'user_id': users['bob']['id'], 'view': 'awaiting_me'},
    )
    assert [r['id'] for r in resp.json()] == [request_id]

    resp = await client.get(f'/api/profiles/{users["alice"]["id"]}/stats')
    assert resp.json()['pending_requests'] == 1
