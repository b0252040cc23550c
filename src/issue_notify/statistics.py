"""New-issue statistics: global and per-assignee rollups split by leak period.

Every counter keeps two sides, issues inside the leak period and issues
outside it, so a notification can report "N new issues" while the totals
remain available. Distributions (by rule type, tag, component, rule and
assignee) feed the "top N" sections of new-issues notifications.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .models import Issue


class Metric(Enum):
    """Issue attributes the statistics are distributed over."""

    RULE_TYPE = "ruleType"
    TAG = "tag"
    COMPONENT = "component"
    ASSIGNEE = "assignee"
    RULE = "rule"


@dataclass
class LeakCounter:
    """A value accumulated separately on and off the leak period."""

    on_leak: int = 0
    off_leak: int = 0

    def add(self, on_leak: bool, amount: int = 1) -> None:
        if on_leak:
            self.on_leak += amount
        else:
            self.off_leak += amount

    @property
    def total(self) -> int:
        return self.on_leak + self.off_leak


class Distribution:
    """LeakCounters keyed by a metric value (a tag, a rule key...)."""

    def __init__(self) -> None:
        self._counters: Dict[str, LeakCounter] = {}

    def add(self, label: str, on_leak: bool) -> None:
        self._counters.setdefault(label, LeakCounter()).add(on_leak)

    def get(self, label: str) -> Optional[LeakCounter]:
        return self._counters.get(label)

    def labels(self) -> List[str]:
        return list(self._counters)

    def top(self, n: int) -> List[Tuple[str, int]]:
        """The ``n`` labels with the most on-leak issues, highest first.

        Ties are broken by label so the order is stable across runs.
        """
        ranked = sorted(
            ((label, c.on_leak) for label, c in self._counters.items() if c.on_leak > 0),
            key=lambda item: (-item[1], item[0]),
        )
        return ranked[:n]

    def __len__(self) -> int:
        return len(self._counters)


class Stats:
    """Rollup of new issues for one scope (whole project or one assignee)."""

    def __init__(self, on_leak: Callable[[Issue], bool]) -> None:
        self._on_leak = on_leak
        self.issue_count = LeakCounter()
        self.effort = LeakCounter()
        self._distributions: Dict[Metric, Distribution] = {m: Distribution() for m in Metric}

    def add(self, issue: Issue) -> None:
        on_leak = self._on_leak(issue)
        self.issue_count.add(on_leak)
        self.effort.add(on_leak, issue.effort_minutes)

        self._distributions[Metric.RULE_TYPE].add(issue.type.value, on_leak)
        self._distributions[Metric.COMPONENT].add(issue.component_key, on_leak)
        self._distributions[Metric.RULE].add(issue.rule_key, on_leak)
        for tag in issue.tags:
            self._distributions[Metric.TAG].add(tag, on_leak)
        if issue.assignee is not None:
            self._distributions[Metric.ASSIGNEE].add(issue.assignee, on_leak)

    def distribution(self, metric: Metric) -> Distribution:
        return self._distributions[metric]

    def has_issues(self) -> bool:
        return self.issue_count.total > 0

    def has_issues_on_leak(self) -> bool:
        return self.issue_count.on_leak > 0


class NewIssuesStatistics:
    """Accumulates new, unresolved issues into global and per-assignee Stats.

    Owned by a single pipeline run and fed one issue at a time while the
    issue cache is being traversed.
    """

    def __init__(self, on_leak: Callable[[Issue], bool]) -> None:
        self._on_leak = on_leak
        self._global = Stats(on_leak)
        self._by_assignee: Dict[str, Stats] = {}

    def add(self, issue: Issue) -> None:
        self._global.add(issue)
        if issue.assignee is not None:
            stats = self._by_assignee.get(issue.assignee)
            if stats is None:
                stats = self._by_assignee[issue.assignee] = Stats(self._on_leak)
            stats.add(issue)

    @property
    def global_statistics(self) -> Stats:
        return self._global

    @property
    def assignees_statistics(self) -> Dict[str, Stats]:
        return dict(self._by_assignee)

    def has_issues_on_leak(self) -> bool:
        return self._global.has_issues_on_leak()

    def assignees_with_issues_on_leak(self) -> List[str]:
        """Assignee uuids with at least one on-leak issue, in first-seen order."""
        return [uuid for uuid, stats in self._by_assignee.items() if stats.has_issues_on_leak()]
