import logging
import uuid
from typing import List, Optional

from pydantic import BaseModel

from .record_store import RecordStore, StoreUnavailableError, utc_now_iso

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    id: str
    title: str
    message: str
    type: str = "info"
    read: bool = False
    created_at: str
    ephemeral: bool = False


class NotificationService:
    """
    Notifications over a RecordStore, with an in-process fallback list used
    whenever the store is unavailable. Fallback entries carry ephemeral=True.
    """

    def __init__(self, store: RecordStore):
        self.store = store
        self._memory: List[Notification] = []

    def add_notification(self, title: str, message: str, type: str = "info") -> Notification:
        payload = {"title": title, "message": message, "type": type, "read": False}
        try:
            row = self.store.create(payload)
        except StoreUnavailableError as e:
            logger.warning("Notification store unavailable, keeping in memory: %s", e)
            note = Notification(id=str(uuid.uuid4()), created_at=utc_now_iso(), ephemeral=True, **payload)
            self._memory.insert(0, note)
            return note
        return Notification.model_validate(row)

    def list_notifications(self) -> List[Notification]:
        try:
            rows = self.store.list_all()
        except StoreUnavailableError as e:
            logger.warning("Notification store unavailable, serving memory fallback: %s", e)
            return list(self._memory)
        return [Notification.model_validate(row) for row in rows]

    def mark_read(self, notification_id: str) -> Optional[Notification]:
        try:
            row = self.store.update(notification_id, {"read": True})
        except StoreUnavailableError as e:
            logger.warning("Notification store unavailable, marking in memory: %s", e)
            row = None
        if row is not None:
            return Notification.model_validate(row)

        for i, note in enumerate(self._memory):
            if note.id == notification_id:
                self._memory[i] = note.model_copy(update={"read": True})
                return self._memory[i]
        return None
