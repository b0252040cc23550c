"""
issue-notify - post-analysis issue notifications

After an analysis completes, walks the computed issues once, rolls new
issues of the leak period up per project and per assignee, and sends
change, new-issues and my-new-issues notifications to subscribers.
"""

__version__ = "0.1.0"

from .models import AnalysisMetadata, Branch, BranchType, Issue, RuleType, UserRecord
from .pipeline import SendIssueNotificationsStep, StepContext

__all__ = [
    "AnalysisMetadata",
    "Branch",
    "BranchType",
    "Issue",
    "RuleType",
    "SendIssueNotificationsStep",
    "StepContext",
    "UserRecord",
]
