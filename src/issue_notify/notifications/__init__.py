"""Notification records, their builder, delivery service and counters."""

from .builder import NotificationBuilder
from .counters import DispatchCounters
from .models import (
    IssueChangeNotification,
    MyNewIssuesNotification,
    NewIssuesNotification,
    Notification,
    NotificationType,
    ProjectContext,
    StatsSummary,
    format_debt,
)
from .service import Delivery, NotificationService, SubscriptionNotificationService

__all__ = [
    "Delivery",
    "DispatchCounters",
    "IssueChangeNotification",
    "MyNewIssuesNotification",
    "NewIssuesNotification",
    "Notification",
    "NotificationBuilder",
    "NotificationService",
    "NotificationType",
    "ProjectContext",
    "StatsSummary",
    "SubscriptionNotificationService",
    "format_debt",
]
