# app/services/activity_log.py

import logging
from typing import List, Optional

from app.core.exceptions import StorageError
from app.core.roles import Actor
from app.db.record_store import RecordStore
from app.models.activity import ActivityEntry

logger = logging.getLogger(__name__)


class ActivityLog:
    def __init__(self, store: RecordStore):
        self._store = store

    def record(
        self,
        actor: Actor,
        action: str,
        message: str,
        claim_id=None,
        user_id=None,
    ) -> Optional[ActivityEntry]:
        """Append one entry after the action it describes has committed.

        A failed write is logged and returns None; the action itself stands.
        """
        entry = ActivityEntry(
            actor_id=actor.id,
            actor_role=actor.role,
            action=action,
            claim_id=claim_id,
            user_id=user_id,
            message=message[:250],
        )
        try:
            return self._store.upsert(entry)
        except StorageError:
            logger.exception("Could not record %s by %s: %s", action, actor.email, message)
            return None

    def entries_for(self, actor_id) -> List[ActivityEntry]:
        # store order is oldest first
        return list(reversed(self._store.find(actor_id=actor_id)))

    def last_for(self, actor_id) -> Optional[ActivityEntry]:
        entries = self.entries_for(actor_id)
        return entries[0] if entries else None
