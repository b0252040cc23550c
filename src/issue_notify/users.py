"""Batch resolution of assignee uuids to user records."""

from __future__ import annotations

from typing import Dict, Iterable

from .logging_config import get_logger
from .models import UserRecord
from .storage.base import SessionFactory, UserStore

logger = get_logger(__name__)


class UserResolver:
    """Looks up users by uuid, one storage session per call.

    The session is opened for the query only and released before
    ``resolve()`` returns, whatever happens.
    """

    def __init__(self, sessions: SessionFactory, user_store: UserStore) -> None:
        self._sessions = sessions
        self._user_store = user_store

    def resolve(self, uuids: Iterable[str]) -> Dict[str, UserRecord]:
        """Map each known uuid in ``uuids`` to its user; unknown uuids are left out."""
        wanted = set(uuids)
        if not wanted:
            return {}
        with self._sessions.open_session() as session:
            users = self._user_store.select_by_uuids(session, wanted)
        resolved = {u.uuid: u for u in users if u.uuid in wanted}
        if len(resolved) < len(wanted):
            logger.debug("%d of %d assignees not found", len(wanted) - len(resolved), len(wanted))
        return resolved
