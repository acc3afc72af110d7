"""
Real-time alert fan-out

Keeps WebSocket connections grouped in one room per workspace and pushes newly
created alerts to them. Best effort: clients that are not connected catch up
by listing alerts.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field

from fastapi import WebSocket

logger = logging.getLogger(__name__)

NEW_ALERT_EVENT = "new-alert"


@dataclass
class Connection:
    """A WebSocket client joined to one workspace room"""

    id: str
    workspace_id: int
    websocket: WebSocket
    connected_at: float = field(default_factory=time.time)

    async def send(self, message: dict) -> bool:
        try:
            await self.websocket.send_json(message)
            return True
        except Exception as e:
            logger.debug(f"Failed to send to {self.id}: {e}")
            return False


class AlertHub:
    """Workspace-scoped publish/subscribe over WebSockets"""

    def __init__(self):
        self._rooms: dict[int, dict[str, Connection]] = {}
        self._lock = asyncio.Lock()

    @property
    def connection_count(self) -> int:
        return sum(len(room) for room in self._rooms.values())

    def room_size(self, workspace_id: int) -> int:
        return len(self._rooms.get(workspace_id, {}))

    async def connect(self, websocket: WebSocket, workspace_id: int) -> Connection:
        """Accept the socket and join it to the workspace room"""
        await websocket.accept()
        connection = Connection(
            id=str(uuid.uuid4())[:8], workspace_id=workspace_id, websocket=websocket
        )

        async with self._lock:
            self._rooms.setdefault(workspace_id, {})[connection.id] = connection

        await connection.send({"event": "connected", "data": {"connectionId": connection.id}})
        logger.info(f"Socket {connection.id} joined workspace {workspace_id}")
        return connection

    async def disconnect(self, connection: Connection) -> None:
        async with self._lock:
            room = self._rooms.get(connection.workspace_id)
            if room is not None:
                room.pop(connection.id, None)
                if not room:
                    del self._rooms[connection.workspace_id]

        logger.info(f"Socket {connection.id} left workspace {connection.workspace_id}")

    async def publish(self, workspace_id: int, payload: dict) -> int:
        """Send a new-alert event to the workspace room; returns how many clients got it"""
        async with self._lock:
            connections = list(self._rooms.get(workspace_id, {}).values())

        if not connections:
            logger.debug(f"No live clients for workspace {workspace_id}")
            return 0

        message = {"event": NEW_ALERT_EVENT, "data": payload}
        delivered = 0
        for connection in connections:
            if await connection.send(message):
                delivered += 1
            else:
                await self.disconnect(connection)

        logger.debug(f"Alert pushed to {delivered}/{len(connections)} clients in workspace {workspace_id}")
        return delivered
