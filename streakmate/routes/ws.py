"""
WebSocket fan-out of habit events.
Clients connect to /ws/habits?api_key=...&user_id=... and receive JSON events
for that user (or all users when user_id is omitted).
"""
import asyncio
import logging
from typing import Dict, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from streakmate.constants import API_KEY

logger = logging.getLogger("streakmate.ws")

router = APIRouter(tags=["ws"])


class ConnectionManager:
    """Tracks open sockets and relays event bus messages to them"""

    def __init__(self):
        self.connections: Dict[WebSocket, Optional[int]] = {}
        self.loop: Optional[asyncio.AbstractEventLoop] = None

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        self.loop = loop

    async def connect(self, websocket: WebSocket, user_id: Optional[int]) -> None:
        await websocket.accept()
        self.connections[websocket] = user_id
        logger.info(f"WebSocket connected (user {user_id}), {len(self.connections)} open")

    def disconnect(self, websocket: WebSocket) -> None:
        self.connections.pop(websocket, None)

    async def broadcast(self, message: dict) -> None:
        """Send a message to every socket subscribed to its user"""
        for websocket, user_id in list(self.connections.items()):
            if user_id is not None and user_id != message.get("user_id"):
                continue
            try:
                await websocket.send_json(message)
            except Exception as e:
                logger.warning(f"Dropping WebSocket after send failure: {e}")
                self.disconnect(websocket)

    def publish(self, event_type: str, payload: dict) -> None:
        """Event bus listener; safe to call from scheduler threads"""
        if self.loop is None or not self.connections:
            return
        message = {"type": event_type, **payload}
        asyncio.run_coroutine_threadsafe(self.broadcast(message), self.loop)


manager = ConnectionManager()


@router.websocket("/ws/habits")
async def habit_events(websocket: WebSocket, api_key: str = "", user_id: Optional[int] = None):
    if api_key != API_KEY:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await manager.connect(websocket, user_id)
    try:
        while True:
            # Incoming messages are ignored; this only keeps the socket open
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(websocket)
        logger.info(f"WebSocket disconnected (user {user_id})")
