import logging
from collections import defaultdict
from typing import Dict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


def room_for(user_id) -> str:
    return f"user_{user_id}"


class ConnectionManager:
    """Tracks open WebSocket connections per user room."""

    def __init__(self):
        self.rooms: Dict[str, Set[WebSocket]] = defaultdict(set)

    async def connect(self, user_id, websocket: WebSocket):
        await websocket.accept()
        self.rooms[room_for(user_id)].add(websocket)
        logger.info("Realtime client joined %s", room_for(user_id))

    def disconnect(self, user_id, websocket: WebSocket):
        room = room_for(user_id)
        self.rooms[room].discard(websocket)
        if not self.rooms[room]:
            self.rooms.pop(room, None)

    async def emit(self, user_id, event: str, data: dict) -> int:
        """Send an event to every socket in the user's room; returns deliveries."""
        room = room_for(user_id)
        delivered = 0

        for websocket in list(self.rooms.get(room, ())):
            try:
                await websocket.send_json({"event": event, "data": data})
                delivered += 1
            except Exception:
                logger.warning("Dropping dead realtime socket in %s", room, exc_info=True)
                self.disconnect(user_id, websocket)

        return delivered


manager = ConnectionManager()
