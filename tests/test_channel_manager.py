import pytest
from fastapi import WebSocketDisconnect

from ceasefire.routes.fights import fight_live
from ceasefire.services.channel_manager import FightChannelManager, channels


class FakeWebSocket:
    def __init__(self, fail=False, receive_error=None):
        self.fail = fail
        self.receive_error = receive_error
        self.accepted = False
        self.sent = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError('connection closed')
        self.sent.append(message)

    async def receive_text(self):
        raise self.receive_error


async def test_connect_announces_spectator_count():
    manager = FightChannelManager()
    first, second = FakeWebSocket(), FakeWebSocket()

    await manager.connect(first, 'f1')
    await manager.connect(second, 'f1')

    assert first.accepted and second.accepted
    assert manager.spectator_count('f1') == 2
    assert first.sent[-1] == {'type': 'spectators', 'fight_id': 'f1', 'count': 2}
    assert second.sent == [{'type': 'spectators', 'fight_id': 'f1', 'count': 2}]


async def test_channels_are_per_fight():
    manager = FightChannelManager()
    watcher, other = FakeWebSocket(), FakeWebSocket()
    await manager.connect(watcher, 'f1')
    await manager.connect(other, 'f2')

    await manager.publish_update('f1', 'resolved')

    assert watcher.sent[-1] == {'type': 'fight_updated', 'fight_id': 'f1', 'event': 'resolved'}
    assert all(m['fight_id'] == 'f2' for m in other.sent)


async def test_leave_updates_remaining_spectators():
    manager = FightChannelManager()
    staying, leaving = FakeWebSocket(), FakeWebSocket()
    await manager.connect(staying, 'f1')
    await manager.connect(leaving, 'f1')

    await manager.leave(leaving, 'f1')

    assert manager.spectator_count('f1') == 1
    assert staying.sent[-1]['count'] == 1


async def test_dead_connection_is_dropped():
    manager = FightChannelManager()
    alive = FakeWebSocket()
    await manager.connect(alive, 'f1')
    dead = FakeWebSocket(fail=True)
    await manager.connect(dead, 'f1')

    assert manager.spectator_count('f1') == 1
    await manager.publish_update('f1', 'comment')
    assert alive.sent[-1]['event'] == 'comment'


async def test_last_spectator_removes_channel():
    manager = FightChannelManager()
    ws = FakeWebSocket()
    await manager.connect(ws, 'f1')
    manager.disconnect(ws, 'f1')

    assert manager.spectator_count('f1') == 0
    assert 'f1' not in manager.active_connections
    await manager.publish_update('f1', 'noop')


async def test_live_endpoint_unregisters_on_disconnect():
    ws = FakeWebSocket(receive_error=WebSocketDisconnect())
    await fight_live(ws, 'live-disconnect')

    assert ws.accepted
    assert channels.spectator_count('live-disconnect') == 0


async def test_live_endpoint_unregisters_on_receive_error():
    ws = FakeWebSocket(receive_error=RuntimeError('socket reset'))
    with pytest.raises(RuntimeError):
        await fight_live(ws, 'live-error')

    assert channels.spectator_count('live-error') == 0
    assert 'live-error' not in channels.active_connections
