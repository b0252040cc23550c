"""In-memory collaborators and builders shared by the pipeline tests."""

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from issue_notify.components.tree import ComponentNode, ComponentType
from issue_notify.exceptions import RuleNotFoundError
from issue_notify.models import AnalysisMetadata, Branch, BranchType, Issue, Rule, RuleType, UserRecord
from issue_notify.notifications.service import NotificationService
from issue_notify.storage.base import (
    CloseableIterator,
    IssueCache,
    RuleRepository,
    Session,
    SessionFactory,
    UserStore,
)

ANALYSIS_DATE = datetime(2026, 10, 19, 8, 30, 12, 345000, tzinfo=timezone.utc)
LEAK_START = ANALYSIS_DATE.replace(microsecond=0)
BEFORE_LEAK = LEAK_START - timedelta(days=3)

PROJECT_UUID = "project-uuid"


def make_issue(**kwargs) -> Issue:
    """Create a test issue; defaults describe an unremarkable, old issue."""
    defaults = {
        "key": "issue-1",
        "rule_key": "python:S1481",
        "type": RuleType.CODE_SMELL,
        "component_key": "proj:src/a.py",
        "creation_date": BEFORE_LEAK,
    }
    defaults.update(kwargs)
    return Issue(**defaults)


def make_new_issue(**kwargs) -> Issue:
    """A new, unresolved issue created at the start of the leak period."""
    kwargs.setdefault("is_new", True)
    kwargs.setdefault("creation_date", LEAK_START)
    return make_issue(**kwargs)


def make_changed_issue(**kwargs) -> Issue:
    kwargs.setdefault("is_changed", True)
    kwargs.setdefault("must_send_notifications", True)
    kwargs.setdefault("resolution", "FIXED")
    return make_issue(**kwargs)


def make_tree() -> ComponentNode:
    """proj -> (src -> (a.py, b.py), README.md)."""
    a = ComponentNode(uuid="u-a", key="proj:src/a.py", name="a.py")
    b = ComponentNode(uuid="u-b", key="proj:src/b.py", name="b.py")
    src = ComponentNode(
        uuid="u-src", key="proj:src", name="src", type=ComponentType.DIRECTORY, children=[a, b]
    )
    readme = ComponentNode(uuid="u-readme", key="proj:README.md", name="README.md")
    return ComponentNode(
        uuid=PROJECT_UUID,
        key="proj",
        name="My Project",
        type=ComponentType.PROJECT,
        project_version="1.2",
        children=[src, readme],
    )


def make_metadata(
    branch_type: BranchType = BranchType.LONG,
    is_main: bool = True,
    name: str = "main",
    pull_request_key: Optional[str] = None,
) -> AnalysisMetadata:
    return AnalysisMetadata(
        project_uuid=PROJECT_UUID,
        analysis_date=ANALYSIS_DATE,
        branch=Branch(name=name, type=branch_type, is_main=is_main),
        pull_request_key=pull_request_key,
    )


class ListIssueCache(IssueCache):
    """Issue cache over a list; records every traversal and its release."""

    def __init__(self, issues: Iterable[Issue]) -> None:
        self._issues = list(issues)
        self.traversals = 0
        self.closes = 0

    def traverse(self) -> CloseableIterator[Issue]:
        self.traversals += 1
        return CloseableIterator(iter(self._issues), on_close=self._closed)

    def _closed(self) -> None:
        self.closes += 1


class DictRuleRepository(RuleRepository):
    def __init__(self, rules: Optional[Dict[str, str]] = None) -> None:
        self._rules = rules if rules is not None else {"python:S1481": "Unused local variable"}

    def get_by_key(self, rule_key: str) -> Rule:
        if rule_key not in self._rules:
            raise RuleNotFoundError(rule_key)
        return Rule(key=rule_key, name=self._rules[rule_key])


class FakeSession(Session):
    def __init__(self, factory: "FakeSessionFactory") -> None:
        self._factory = factory

    def close(self) -> None:
        self._factory.closed += 1


class FakeSessionFactory(SessionFactory):
    def __init__(self) -> None:
        self.opened = 0
        self.closed = 0

    def open_session(self) -> FakeSession:
        self.opened += 1
        return FakeSession(self)


class DictUserStore(UserStore):
    def __init__(self, users: Iterable[UserRecord] = ()) -> None:
        self._users = {u.uuid: u for u in users}
        self.calls: List[set] = []

    def select_by_uuids(self, session, uuids) -> List[UserRecord]:
        wanted = set(uuids)
        self.calls.append(wanted)
        return [u for uuid, u in self._users.items() if uuid in wanted]


class RecordingNotificationService(NotificationService):
    """Records every call; each delivered notification reaches a fixed number of recipients."""

    def __init__(
        self,
        has_subscribers: bool = True,
        bulk_recipients: int = 1,
        legacy_recipients: int = 0,
    ) -> None:
        self.has_subscribers = has_subscribers
        self.bulk_recipients = bulk_recipients
        self.legacy_recipients = legacy_recipients
        self.subscriber_checks: List[tuple] = []
        self.bulk_calls: List[list] = []
        self.legacy_calls: List[object] = []

    def has_project_subscribers_for_types(self, project_uuid, types) -> bool:
        self.subscriber_checks.append((project_uuid, frozenset(types)))
        return self.has_subscribers

    def deliver_emails(self, notifications) -> int:
        batch = list(notifications)
        self.bulk_calls.append(batch)
        return self.bulk_recipients * len(batch)

    def deliver(self, notification) -> int:
        self.legacy_calls.append(notification)
        return self.legacy_recipients

    def bulk_of(self, notification_class) -> List[list]:
        """Bulk calls whose notifications are all of ``notification_class``."""
        return [
            call
            for call in self.bulk_calls
            if call and all(type(n) is notification_class for n in call)
        ]
