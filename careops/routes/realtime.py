"""
Real-time alert socket
Clients join their workspace room and receive new-alert events
"""

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws/workspaces/{workspace_id}")
async def workspace_alerts(websocket: WebSocket, workspace_id: int):
    hub = websocket.app.state.alert_hub
    connection = await hub.connect(websocket, workspace_id)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except ValueError:
                logger.debug(f"Ignoring non-JSON frame from {connection.id}")
                continue

            if isinstance(message, dict) and message.get("event") == "ping":
                await connection.send({"event": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        await hub.disconnect(connection)
