"""The issue notification pipeline step."""

from .classifier import ChangeBatch, IssueClassifier, PassSummary, Route, route_issue
from .context import StepContext, StepStatistics
from .driver import NOTIFICATION_TYPES, RunState, SendIssueNotificationsStep

__all__ = [
    "NOTIFICATION_TYPES",
    "ChangeBatch",
    "IssueClassifier",
    "PassSummary",
    "Route",
    "RunState",
    "SendIssueNotificationsStep",
    "StepContext",
    "StepStatistics",
    "route_issue",
]
