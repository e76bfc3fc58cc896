import logging

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect, status

from mobilespo.auth.dependencies import user_from_token
from mobilespo.services.realtime import manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


@router.websocket("/ws/notifications")
async def notifications_socket(websocket: WebSocket, token: str = None):
    try:
        user = user_from_token(token)
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await manager.connect(user.id, websocket)
    try:
        # Client messages are ignored; the socket is push-only
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("Realtime client left user_%s", user.id)
    finally:
        manager.disconnect(user.id, websocket)
