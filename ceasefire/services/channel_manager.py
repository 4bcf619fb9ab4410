"""WebSocket channels keyed by fight id.

Spectators subscribe to a fight and receive spectator counts and
"fight_updated" notices. The fight services never call into this module;
routes publish after their transaction commits.
"""
import logging
from collections import defaultdict

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class FightChannelManager:
    """Manages WebSocket connections per fight."""

    def __init__(self):
        # fight_id -> connections watching that fight
        self.active_connections: dict[str, list[WebSocket]] = defaultdict(list)

    def spectator_count(self, fight_id: str) -> int:
        return len(self.active_connections.get(fight_id, []))

    async def connect(self, websocket: WebSocket, fight_id: str):
        """Accept and register a new spectator, then announce the count."""
        await websocket.accept()
        self.active_connections[fight_id].append(websocket)
        logger.debug(f'Spectator joined fight {fight_id} ({self.spectator_count(fight_id)} watching)')
        await self.broadcast_spectators(fight_id)

    def disconnect(self, websocket: WebSocket, fight_id: str):
        """Remove a connection."""
        if websocket in self.active_connections[fight_id]:
            self.active_connections[fight_id].remove(websocket)
        if not self.active_connections[fight_id]:
            del self.active_connections[fight_id]
        logger.debug(f'Spectator left fight {fight_id} ({self.spectator_count(fight_id)} watching)')

    async def leave(self, websocket: WebSocket, fight_id: str):
        self.disconnect(websocket, fight_id)
        await self.broadcast_spectators(fight_id)

    async def broadcast(self, fight_id: str, message: dict):
        """Send a message to everyone watching a fight."""
        dead_connections = []
        for connection in list(self.active_connections.get(fight_id, [])):
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.warning(f'Dropping spectator on fight {fight_id}: {e}')
                dead_connections.append(connection)
        for conn in dead_connections:
            self.disconnect(conn, fight_id)

    async def broadcast_spectators(self, fight_id: str):
        await self.broadcast(fight_id, {
            'type': 'spectators',
            'fight_id': fight_id,
            'count': self.spectator_count(fight_id),
        })

    async def publish_update(self, fight_id: str, event: str):
        """Tell spectators the fight changed so they re-read it."""
        await self.broadcast(fight_id, {
            'type': 'fight_updated',
            'fight_id': fight_id,
            'event': event,
        })


# Singleton instance
channels = FightChannelManager()
