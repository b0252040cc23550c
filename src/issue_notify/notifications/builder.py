"""Assembles notification records from issues, statistics and run context.

Rule names are mandatory: an issue whose rule cannot be found aborts the
run with RuleNotFoundError. Components and users are optional context and
are left empty when they cannot be resolved.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..components.leaf_index import LeafIndex
from ..components.tree import ComponentNode
from ..config import DEFAULT_CONFIG, NotifyConfig
from ..models import AnalysisMetadata, Issue, RuleType, UserRecord
from ..statistics import Metric, Stats
from ..storage.base import RuleRepository
from .models import (
    IssueChangeNotification,
    MyNewIssuesNotification,
    NewIssuesNotification,
    ProjectContext,
    StatsSummary,
)

# Hotspots never reach the statistics, so they get no column either.
_COUNTED_TYPES = [t for t in RuleType if t is not RuleType.SECURITY_HOTSPOT]


class NotificationBuilder:
    """Builds the three notification kinds for one analysis."""

    def __init__(
        self,
        project: ComponentNode,
        metadata: AnalysisMetadata,
        rules: RuleRepository,
        leaf_index: LeafIndex,
        config: NotifyConfig = DEFAULT_CONFIG,
    ) -> None:
        self._project = project
        self._metadata = metadata
        self._rules = rules
        self._leaf_index = leaf_index
        self._top_count = config.top_count
        self._context = ProjectContext(
            project_uuid=metadata.project_uuid,
            project_key=project.key,
            project_name=project.name,
            branch_name=metadata.branch_name,
            pull_request=metadata.pull_request,
        )

    @property
    def project_context(self) -> ProjectContext:
        return self._context

    # ── issue changes ─────────────────────────────────────────────

    def issue_changes(
        self, issues: Iterable[Issue], assignees_by_uuid: Mapping[str, UserRecord]
    ) -> List[IssueChangeNotification]:
        """One notification per issue of the batch, in batch order."""
        return [self.issue_change(issue, assignees_by_uuid) for issue in issues]

    def issue_change(
        self, issue: Issue, assignees_by_uuid: Mapping[str, UserRecord]
    ) -> IssueChangeNotification:
        rule = self._rules.get_by_key(issue.rule_key)
        assignee = assignees_by_uuid.get(issue.assignee) if issue.assignee else None
        component = self._leaf_index.resolve(issue.component_key)
        return IssueChangeNotification(
            project=self._context,
            issue=issue,
            rule_name=rule.name,
            assignee=assignee,
            component_key=component.key if component else None,
            component_name=component.name if component else None,
        )

    # ── new issues ────────────────────────────────────────────────

    def new_issues(
        self, statistics: Stats, assignees_by_uuid: Mapping[str, UserRecord]
    ) -> NewIssuesNotification:
        """Project-wide summary; assignee names come from ``assignees_by_uuid``."""
        return NewIssuesNotification(
            project=self._context,
            project_version=self._project.project_version,
            analysis_date=self._metadata.analysis_date,
            statistics=statistics,
            summary=self._summarize(statistics, assignees_by_uuid),
        )

    def my_new_issues(
        self,
        assignee_uuid: str,
        statistics: Stats,
        assignee: Optional[UserRecord],
    ) -> MyNewIssuesNotification:
        """Summary of one assignee's new issues."""
        return MyNewIssuesNotification(
            project=self._context,
            project_version=self._project.project_version,
            analysis_date=self._metadata.analysis_date,
            statistics=statistics,
            summary=self._summarize(statistics, {}, with_assignees=False),
            assignee_uuid=assignee_uuid,
            assignee=assignee,
        )

    def _summarize(
        self,
        statistics: Stats,
        assignees_by_uuid: Mapping[str, UserRecord],
        with_assignees: bool = True,
    ) -> StatsSummary:
        by_type = statistics.distribution(Metric.RULE_TYPE)
        count_by_type: Dict[str, int] = {}
        for rule_type in _COUNTED_TYPES:
            counter = by_type.get(rule_type.value)
            count_by_type[rule_type.value] = counter.on_leak if counter else 0

        n = self._top_count
        top_rules = [
            (self._rules.get_by_key(key).name, count)
            for key, count in statistics.distribution(Metric.RULE).top(n)
        ]
        top_components = [
            (self._component_label(key), count)
            for key, count in statistics.distribution(Metric.COMPONENT).top(n)
        ]
        top_assignees: List[Tuple[str, int]] = []
        if with_assignees:
            for uuid, count in statistics.distribution(Metric.ASSIGNEE).top(n):
                user = assignees_by_uuid.get(uuid)
                top_assignees.append((user.display_name if user else uuid, count))

        return StatsSummary(
            count=statistics.issue_count.on_leak,
            count_by_type=count_by_type,
            debt_minutes=statistics.effort.on_leak,
            top_rules=top_rules,
            top_tags=statistics.distribution(Metric.TAG).top(n),
            top_components=top_components,
            top_assignees=top_assignees,
        )

    def _component_label(self, component_key: str) -> str:
        component = self._leaf_index.resolve(component_key)
        return component.name if component else component_key
