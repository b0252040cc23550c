"""Domain records consumed by the notification pipeline.

Everything here is read from collaborators (issue cache, rule repository,
user store, analysis metadata) and treated as immutable for the length of
a run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class RuleType(Enum):
    """Kind of issue a rule raises."""

    CODE_SMELL = "CODE_SMELL"
    BUG = "BUG"
    VULNERABILITY = "VULNERABILITY"
    SECURITY_HOTSPOT = "SECURITY_HOTSPOT"


class BranchType(Enum):
    """Kind of branch an analysis ran on.

    The main branch is a LONG branch flagged with ``Branch.is_main``.
    """

    LONG = "LONG"
    SHORT = "SHORT"
    PULL_REQUEST = "PULL_REQUEST"


@dataclass(frozen=True)
class Issue:
    """One analysis finding as read back from the issue cache.

    Attributes:
        key: Unique issue identifier.
        rule_key: Identifier of the rule that raised the issue (repo:rule).
        type: Rule type; SECURITY_HOTSPOT issues never produce notifications.
        component_key: Key of the file (leaf component) the issue is on.
        creation_date: When the issue was created. Stored truncated to
            whole seconds by the persistence layer.
        is_new: Raised for the first time by this analysis.
        is_changed: State changed during this analysis.
        must_send_notifications: The change is one users are notified about.
        resolution: None while the issue is unresolved.
        assignee: Uuid of the assigned user, if any.
        effort_minutes: Remediation effort.
    """

    key: str
    rule_key: str
    type: RuleType
    component_key: str
    creation_date: datetime
    is_new: bool = False
    is_changed: bool = False
    must_send_notifications: bool = False
    resolution: Optional[str] = None
    assignee: Optional[str] = None
    severity: str = "MAJOR"
    status: str = "OPEN"
    message: str = ""
    tags: tuple[str, ...] = ()
    effort_minutes: int = 0


@dataclass(frozen=True)
class Rule:
    """Rule metadata; only the display name matters to notifications."""

    key: str
    name: str


@dataclass(frozen=True)
class UserRecord:
    """A user as stored by the user directory."""

    uuid: str
    login: str
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.login


@dataclass(frozen=True)
class Branch:
    """Branch the analysis ran on."""

    name: str
    type: BranchType = BranchType.LONG
    is_main: bool = False


@dataclass(frozen=True)
class AnalysisMetadata:
    """Context of the analysis that just completed.

    Attributes:
        project_uuid: Identifier used to look up subscribers.
        analysis_date: When the analysis ran (timezone aware).
        branch: Branch the analysis ran on.
        pull_request_key: Set when ``branch.type`` is PULL_REQUEST.
    """

    project_uuid: str
    analysis_date: datetime
    branch: Branch = field(default_factory=lambda: Branch(name="main", is_main=True))
    pull_request_key: Optional[str] = None

    @property
    def branch_name(self) -> Optional[str]:
        """Branch name carried by notifications; None on main and pull requests."""
        if self.branch.is_main or self.branch.type == BranchType.PULL_REQUEST:
            return None
        return self.branch.name

    @property
    def pull_request(self) -> Optional[str]:
        """Pull request key carried by notifications; None unless a pull request."""
        if self.branch.type == BranchType.PULL_REQUEST:
            return self.pull_request_key
        return None
