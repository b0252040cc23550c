"""Send issue notifications: the pipeline step run after an analysis.

Runs through these states:

    IDLE -> GATED_BRANCH -> GATED_SUBSCRIBERS -> STREAMING -> FINALIZING -> DONE

- Pull requests and short-lived branches end right after GATED_BRANCH,
  with no side effect at all.
- When nobody subscribed to any of the three notification kinds the
  issue cache is never opened; zero counters are still reported.
- STREAMING resolves every assignee up front, then makes one pass over
  the issue cache, dispatching change notifications batch by batch.
- FINALIZING only happens when the leak period has new issues: the
  project-wide notification goes out, then one per assignee with new
  issues.

Usage:
    step = SendIssueNotificationsStep(issue_cache, rules, tree, service, metadata, db, user_store)
    context = StepContext()
    step.execute(context)
    context.statistics.as_dict()
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Set

from ..components.leaf_index import LeafIndex
from ..components.tree import TreeRootHolder
from ..config import DEFAULT_CONFIG, NotifyConfig
from ..leak import LeakWindow
from ..logging_config import get_logger
from ..models import AnalysisMetadata, BranchType, Issue, UserRecord
from ..notifications.builder import NotificationBuilder
from ..notifications.counters import DispatchCounters
from ..notifications.models import NotificationType
from ..notifications.service import NotificationService
from ..statistics import NewIssuesStatistics
from ..storage.base import IssueCache, RuleRepository, SessionFactory, UserStore
from ..users import UserResolver
from .classifier import ChangeBatch, IssueClassifier
from .context import StepContext

logger = get_logger(__name__)

NOTIFICATION_TYPES = frozenset(NotificationType)

_DISABLED_BRANCH_TYPES = frozenset({BranchType.PULL_REQUEST, BranchType.SHORT})


class RunState(Enum):
    IDLE = "idle"
    GATED_BRANCH = "gated_branch"
    GATED_SUBSCRIBERS = "gated_subscribers"
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    DONE = "done"


class SendIssueNotificationsStep:
    """Reads the issue cache and sends the related notifications.

    Notifications go straight to the notification service rather than
    through a queue. Each ``execute()`` builds its own leaf index,
    statistics, change batch and counters; nothing carries over between
    runs. Storage and messaging errors propagate to the caller.
    """

    description = "Send issue notifications"

    def __init__(
        self,
        issue_cache: IssueCache,
        rules: RuleRepository,
        tree_root_holder: TreeRootHolder,
        service: NotificationService,
        metadata: AnalysisMetadata,
        sessions: SessionFactory,
        user_store: UserStore,
        config: NotifyConfig = DEFAULT_CONFIG,
    ) -> None:
        self._issue_cache = issue_cache
        self._rules = rules
        self._tree_root_holder = tree_root_holder
        self._service = service
        self._metadata = metadata
        self._users = UserResolver(sessions, user_store)
        self._config = config
        self.state = RunState.IDLE
        self.states: List[RunState] = [RunState.IDLE]

    def execute(self, context: StepContext) -> None:
        self.state = RunState.IDLE
        self.states = [RunState.IDLE]

        self._enter(RunState.GATED_BRANCH)
        branch_type = self._metadata.branch.type
        if branch_type in _DISABLED_BRANCH_TYPES:
            logger.debug("Issue notifications disabled on %s branches", branch_type.value)
            self._enter(RunState.DONE)
            return

        counters = DispatchCounters()
        self._enter(RunState.GATED_SUBSCRIBERS)
        if self._service.has_project_subscribers_for_types(
            self._metadata.project_uuid, NOTIFICATION_TYPES
        ):
            self._send(counters)
        else:
            logger.debug("No subscriber for project %s", self._metadata.project_uuid)

        self._enter(RunState.DONE)
        counters.dump_to(context.statistics)
        logger.info(
            "Issue notifications: %s",
            ", ".join(f"{k}={v}" for k, v in counters.as_statistics().items()),
        )

    def _enter(self, state: RunState) -> None:
        self.state = state
        if self.states[-1] is not state:
            self.states.append(state)

    # ── streaming / finalizing ────────────────────────────────────

    def _send(self, counters: DispatchCounters) -> None:
        project = self._tree_root_holder.root
        leak = LeakWindow(self._metadata.analysis_date)
        statistics = NewIssuesStatistics(leak.contains)
        builder = NotificationBuilder(
            project, self._metadata, self._rules, LeafIndex(project), self._config
        )

        self._enter(RunState.STREAMING)
        assignees_by_uuid = self._users.resolve(self._collect_assignees())

        def send_issue_changes(issues: List[Issue]) -> None:
            self._send_issue_changes(builder, issues, assignees_by_uuid, counters)

        batch = ChangeBatch(self._config.batch_size, send_issue_changes)
        with self._issue_cache.traverse() as issues:
            summary = IssueClassifier(statistics, batch).consume(issues)
        logger.debug(
            "Classified %d issues: %d new, %d changed, %d hotspots, %d ignored",
            summary.seen,
            summary.new,
            summary.changed,
            summary.hotspots,
            summary.ignored,
        )

        if statistics.has_issues_on_leak():
            self._enter(RunState.FINALIZING)
            self._send_new_issues(builder, statistics, assignees_by_uuid, counters)
            self._send_my_new_issues(builder, statistics, counters)

    def _collect_assignees(self) -> Set[str]:
        with self._issue_cache.traverse() as issues:
            return {issue.assignee for issue in issues if issue.assignee is not None}

    def _send_issue_changes(
        self,
        builder: NotificationBuilder,
        issues: List[Issue],
        assignees_by_uuid: Dict[str, UserRecord],
        counters: DispatchCounters,
    ) -> None:
        kind = NotificationType.ISSUE_CHANGES
        notifications = builder.issue_changes(issues, assignees_by_uuid)
        counters.count_deliveries(kind, self._service.deliver_emails(notifications))
        counters.count_notifications(kind)

        # legacy delivery path
        for notification in notifications:
            counters.count_deliveries(kind, self._service.deliver(notification))

    def _send_new_issues(
        self,
        builder: NotificationBuilder,
        statistics: NewIssuesStatistics,
        assignees_by_uuid: Dict[str, UserRecord],
        counters: DispatchCounters,
    ) -> None:
        kind = NotificationType.NEW_ISSUES
        notification = builder.new_issues(statistics.global_statistics, assignees_by_uuid)
        counters.count_deliveries(kind, self._service.deliver_emails([notification]))
        counters.count_notifications(kind)

        # legacy delivery path
        counters.count_deliveries(kind, self._service.deliver(notification))

    def _send_my_new_issues(
        self,
        builder: NotificationBuilder,
        statistics: NewIssuesStatistics,
        counters: DispatchCounters,
    ) -> None:
        kind = NotificationType.MY_NEW_ISSUES
        assignee_uuids = statistics.assignees_with_issues_on_leak()
        if not assignee_uuids:
            return
        users_by_uuid = self._users.resolve(assignee_uuids)
        stats_by_assignee = statistics.assignees_statistics
        notifications = [
            builder.my_new_issues(uuid, stats_by_assignee[uuid], users_by_uuid.get(uuid))
            for uuid in assignee_uuids
        ]
        counters.count_deliveries(kind, self._service.deliver_emails(notifications))
        counters.count_notifications(kind, len(notifications))

        # legacy delivery path
        for notification in notifications:
            counters.count_deliveries(kind, self._service.deliver(notification))
