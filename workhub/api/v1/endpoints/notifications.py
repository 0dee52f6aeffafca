# =============================================
# workhub/api/v1/endpoints/notifications.py
# =============================================
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from workhub.config.database import get_db
from workhub.core.auth import resolve_user
from workhub.core.exceptions import AuthenticationError
from workhub.services.notification_service import NotificationHub, get_notification_hub

logger = logging.getLogger(__name__)

router = APIRouter()

@router.websocket("/notifications")
async def notifications_socket(
    websocket: WebSocket,
    token: str = Query(...),
    db: AsyncSession = Depends(get_db),
    hub: NotificationHub = Depends(get_notification_hub)
):
    """Push channel for new_application and status change events; clients may send "ping" """
    try:
        user = await resolve_user(token, db)
    except AuthenticationError as e:
        logger.warning(f"Rejected notification socket: {e.message}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    user_id = user.user_id
    await db.close()

    await hub.connect(user_id, websocket)
    await websocket.send_json({"type": "connected", "data": {"user_id": str(user_id)}})
    try:
        while True:
            message = await websocket.receive_text()
            if message == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        logger.info(f"Notification socket for user {user_id} disconnected by client")
    finally:
        hub.disconnect(user_id, websocket)
