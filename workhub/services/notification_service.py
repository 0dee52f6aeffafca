# =============================================
# workhub/services/notification_service.py
# =============================================
"""
Advisory push notifications over WebSockets.

Delivery is best effort: events are sent after the database commit, a
disconnected user simply misses them, and the REST API stays the source of
truth. Each server instance only reaches the sockets connected to it.
"""

from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Optional, Set
from uuid import UUID
import asyncio
import logging

from fastapi import WebSocket

logger = logging.getLogger(__name__)

class NotificationHub:
    def __init__(self):
        self._connections: Dict[str, Set[WebSocket]] = defaultdict(set)
        self._pending: Set[asyncio.Task] = set()

    async def connect(self, user_id: UUID, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections[str(user_id)].add(websocket)
        logger.info(f"Notification socket opened for user {user_id}")

    def disconnect(self, user_id: UUID, websocket: WebSocket) -> None:
        sockets = self._connections.get(str(user_id))
        if not sockets:
            return
        sockets.discard(websocket)
        if not sockets:
            del self._connections[str(user_id)]
        logger.info(f"Notification socket closed for user {user_id}")

    def connection_count(self, user_id: UUID) -> int:
        return len(self._connections.get(str(user_id), ()))

    async def send_to_user(self, user_id: UUID, event: Dict[str, Any]) -> int:
        """Send an event to every socket of the user; returns how many received it"""
        delivered = 0
        for websocket in list(self._connections.get(str(user_id), ())):
            try:
                await websocket.send_json(event)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping notification socket for user {user_id}: {e}")
                self.disconnect(user_id, websocket)
        return delivered

    def publish(self, user_id: UUID, event: Dict[str, Any]) -> Optional[asyncio.Task]:
        """Schedule delivery without waiting for it"""
        if not self._connections.get(str(user_id)):
            return None
        task = asyncio.create_task(self.send_to_user(user_id, event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def flush(self) -> None:
        """Wait for every scheduled delivery to finish"""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    def notify_new_application(
        self,
        employer_id: UUID,
        job_id: UUID,
        application_id: UUID,
        applicant_name: str,
        applied_at: datetime
    ) -> Optional[asyncio.Task]:
        return self.publish(employer_id, {
            "type": "new_application",
            "data": {
                "job_id": str(job_id),
                "application_id": str(application_id),
                "applicant_name": applicant_name,
                "timestamp": applied_at.isoformat()
            }
        })

    def notify_status_changed(
        self,
        applicant_id: UUID,
        application_id: UUID,
        job_id: UUID,
        status: str,
        changed_at: datetime
    ) -> Optional[asyncio.Task]:
        return self.publish(applicant_id, {
            "type": "application_status_changed",
            "data": {
                "application_id": str(application_id),
                "job_id": str(job_id),
                "status": status,
                "timestamp": changed_at.isoformat()
            }
        })

notification_hub = NotificationHub()

def get_notification_hub() -> NotificationHub:
    return notification_hub
