"""Single pass over the issue cache, routing each issue to statistics or a change batch.

Routing, first match wins:
    1. security hotspot            -> ignored
    2. new and unresolved          -> new-issue statistics
    3. changed and notifiable      -> change batch
    4. anything else               -> ignored

The change batch never holds more than its capacity: it is flushed as
soon as it fills up, and once more at the end of the pass if anything is
left in it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List

from ..logging_config import get_logger
from ..models import Issue, RuleType
from ..statistics import NewIssuesStatistics

logger = get_logger(__name__)


class Route(Enum):
    """Where the classifier sent an issue."""

    HOTSPOT = "hotspot"
    NEW = "new"
    CHANGED = "changed"
    IGNORED = "ignored"


def route_issue(issue: Issue) -> Route:
    if issue.type is RuleType.SECURITY_HOTSPOT:
        return Route.HOTSPOT
    if issue.is_new and issue.resolution is None:
        return Route.NEW
    if issue.is_changed and issue.must_send_notifications:
        return Route.CHANGED
    return Route.IGNORED


class ChangeBatch:
    """Bounded buffer of changed issues, handed to ``on_flush`` when full."""

    def __init__(self, capacity: int, on_flush: Callable[[List[Issue]], None]) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._on_flush = on_flush
        self._issues: List[Issue] = []
        self.flushes = 0

    def append(self, issue: Issue) -> None:
        self._issues.append(issue)
        if len(self._issues) >= self.capacity:
            self.flush()

    def flush(self) -> None:
        """Hand the buffered issues over and start empty. No-op when empty."""
        if not self._issues:
            return
        issues, self._issues = self._issues, []
        self.flushes += 1
        logger.debug("Flushing change batch #%d (%d issues)", self.flushes, len(issues))
        self._on_flush(issues)

    def __len__(self) -> int:
        return len(self._issues)


@dataclass
class PassSummary:
    """How many issues went each way during one pass."""

    seen: int = 0
    hotspots: int = 0
    new: int = 0
    changed: int = 0
    ignored: int = 0


class IssueClassifier:
    """Feeds one forward-only pass of issues into statistics and a change batch."""

    def __init__(self, statistics: NewIssuesStatistics, batch: ChangeBatch) -> None:
        self._statistics = statistics
        self._batch = batch

    def consume(self, issues: Iterable[Issue]) -> PassSummary:
        summary = PassSummary()
        for issue in issues:
            summary.seen += 1
            route = route_issue(issue)
            if route is Route.NEW:
                summary.new += 1
                self._statistics.add(issue)
            elif route is Route.CHANGED:
                summary.changed += 1
                self._batch.append(issue)
            elif route is Route.HOTSPOT:
                summary.hotspots += 1
            else:
                summary.ignored += 1

        self._batch.flush()
        return summary
