"""Messaging collaborator: subscriber checks and the two delivery paths.

``deliver_emails`` is the bulk path, ``deliver`` the legacy one-by-one
path. The pipeline calls both for every notification and adds up the
recipient counts they return.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Collection, Dict, List, Optional, Tuple

from ..logging_config import get_logger
from ..storage.database import NotifyDB
from ..storage.queries import select_subscribers, select_uuids_with_email
from .models import (
    IssueChangeNotification,
    MyNewIssuesNotification,
    Notification,
    NotificationType,
)

logger = get_logger(__name__)


class NotificationService(ABC):
    """Decides who wants which notification and delivers them."""

    @abstractmethod
    def has_project_subscribers_for_types(
        self, project_uuid: str, types: Collection[NotificationType]
    ) -> bool:
        """True if anyone subscribed to at least one of ``types`` on the project."""
        pass

    @abstractmethod
    def deliver_emails(self, notifications: Collection[Notification]) -> int:
        """Deliver in bulk; returns the number of recipients reached."""
        pass

    @abstractmethod
    def deliver(self, notification: Notification) -> int:
        """Deliver one notification; returns the number of recipients reached."""
        pass


@dataclass(frozen=True)
class Delivery:
    """One notification handed to one recipient."""

    channel: str  # "email" | "legacy"
    recipient_uuid: str
    notification: Notification


class SubscriptionNotificationService(NotificationService):
    """Delivers to the subscribers recorded in the notification database.

    Subscribers with an email address are served by the bulk path, the
    others by the legacy path, so a recipient is never counted twice.
    Personal notifications (changes, my new issues) only reach their
    assignee, and only if that assignee subscribed.

    Deliveries are appended to ``outbox``; sending them anywhere is left to
    whoever consumes it. Subscriptions are read once per project and kept
    for the life of the service, so create one per run.
    """

    def __init__(self, db: NotifyDB) -> None:
        self._db = db
        self._subscribers: Dict[str, Dict[str, List[Tuple[str, bool]]]] = {}
        self.outbox: List[Delivery] = []

    def has_project_subscribers_for_types(
        self, project_uuid: str, types: Collection[NotificationType]
    ) -> bool:
        by_type = self._load(project_uuid)
        return any(by_type.get(t.value) for t in types)

    def deliver_emails(self, notifications: Collection[Notification]) -> int:
        return sum(self._deliver_one(n, "email", has_email=True) for n in notifications)

    def deliver(self, notification: Notification) -> int:
        return self._deliver_one(notification, "legacy", has_email=False)

    def _deliver_one(self, notification: Notification, channel: str, has_email: bool) -> int:
        recipients = [
            uuid
            for uuid, emailable in self._recipients(notification)
            if emailable == has_email
        ]
        for uuid in recipients:
            self.outbox.append(Delivery(channel=channel, recipient_uuid=uuid, notification=notification))
        if recipients:
            logger.debug(
                "%s notification delivered to %d recipient(s) via %s",
                notification.type.value,
                len(recipients),
                channel,
            )
        return len(recipients)

    def _recipients(self, notification: Notification) -> List[Tuple[str, bool]]:
        subscribers = self._load(notification.project.project_uuid).get(notification.type.value, [])
        if notification.type is NotificationType.NEW_ISSUES:
            return list(subscribers)
        target = _personal_recipient(notification)
        if target is None:
            return []
        return [s for s in subscribers if s[0] == target]

    def _load(self, project_uuid: str) -> Dict[str, List[Tuple[str, bool]]]:
        cached = self._subscribers.get(project_uuid)
        if cached is not None:
            return cached
        with self._db.open_session() as session:
            by_type = select_subscribers(session, project_uuid, [t.value for t in NotificationType])
            emailable = select_uuids_with_email(
                session, {u for users in by_type.values() for u in users}
            )
        loaded = {
            t: [(u, u in emailable) for u in users] for t, users in by_type.items()
        }
        self._subscribers[project_uuid] = loaded
        return loaded


def _personal_recipient(notification: Notification) -> Optional[str]:
    if isinstance(notification, MyNewIssuesNotification):
        return notification.assignee_uuid
    if isinstance(notification, IssueChangeNotification):
        return notification.issue.assignee
    return None
