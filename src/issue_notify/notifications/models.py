"""Notification records produced by the pipeline.

Three kinds exist:
- IssueChangeNotification: one changed issue, sent in batches
- NewIssuesNotification: all new issues of the project, at most one per run
- MyNewIssuesNotification: new issues of one assignee, one per assignee
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from ..models import Issue, UserRecord
from ..statistics import Stats

# An 8 hour working day, as used when effort is shown to users.
HOURS_IN_DAY = 8


class NotificationType(Enum):
    """Notification kinds users can subscribe to."""

    NEW_ISSUES = "NewIssues"
    MY_NEW_ISSUES = "MyNewIssues"
    ISSUE_CHANGES = "IssueChanges"


@dataclass(frozen=True)
class ProjectContext:
    """Project, branch and pull request every notification is about.

    ``branch_name`` is None on the main branch and on pull requests;
    ``pull_request`` is only set on pull requests.
    """

    project_uuid: str
    project_key: str
    project_name: str
    branch_name: Optional[str] = None
    pull_request: Optional[str] = None


@dataclass(frozen=True)
class IssueChangeNotification:
    """A changed issue, decorated with what a reader needs to recognise it."""

    project: ProjectContext
    issue: Issue
    rule_name: str
    assignee: Optional[UserRecord] = None
    component_key: Optional[str] = None
    component_name: Optional[str] = None

    @property
    def type(self) -> NotificationType:
        return NotificationType.ISSUE_CHANGES


@dataclass
class StatsSummary:
    """The on-leak figures of a Stats rollup, ready to be rendered.

    Top lists hold (display label, on-leak count), highest first.
    """

    count: int
    count_by_type: Dict[str, int]
    debt_minutes: int
    top_rules: List[Tuple[str, int]] = field(default_factory=list)
    top_tags: List[Tuple[str, int]] = field(default_factory=list)
    top_components: List[Tuple[str, int]] = field(default_factory=list)
    top_assignees: List[Tuple[str, int]] = field(default_factory=list)


@dataclass
class NewIssuesNotification:
    """Summary of every new issue found in the leak period of the project."""

    project: ProjectContext
    project_version: Optional[str]
    analysis_date: datetime
    statistics: Stats
    summary: StatsSummary

    @property
    def type(self) -> NotificationType:
        return NotificationType.NEW_ISSUES

    @property
    def debt(self) -> str:
        return format_debt(self.summary.debt_minutes)


@dataclass
class MyNewIssuesNotification(NewIssuesNotification):
    """New issues of the leak period assigned to one user."""

    assignee_uuid: str = ""
    assignee: Optional[UserRecord] = None

    @property
    def type(self) -> NotificationType:
        return NotificationType.MY_NEW_ISSUES


Notification = Union[IssueChangeNotification, NewIssuesNotification, MyNewIssuesNotification]


def format_debt(minutes: int) -> str:
    """Render effort minutes as e.g. ``1d 2h 5min`` (8h working day)."""
    if minutes <= 0:
        return "0min"
    days, rest = divmod(minutes, HOURS_IN_DAY * 60)
    hours, mins = divmod(rest, 60)
    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if mins:
        parts.append(f"{mins}min")
    return " ".join(parts)
