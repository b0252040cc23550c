"""Run-scoped counters of notifications produced and recipients reached."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Tuple

from .models import NotificationType

if TYPE_CHECKING:
    from ..pipeline.context import StepStatistics

# Statistic names reported for each notification kind: (notifications, deliveries)
STATISTIC_NAMES: Dict[NotificationType, Tuple[str, str]] = {
    NotificationType.NEW_ISSUES: ("newIssuesNotifs", "newIssuesDeliveries"),
    NotificationType.MY_NEW_ISSUES: ("myNewIssuesNotifs", "myNewIssuesDeliveries"),
    NotificationType.ISSUE_CHANGES: ("changesNotifs", "changesDeliveries"),
}


@dataclass
class KindCounter:
    """Notifications produced and recipients reached for one kind."""

    notifications: int = 0
    deliveries: int = 0


class DispatchCounters:
    """Counters for one run. Deliveries sum the bulk and legacy paths."""

    def __init__(self) -> None:
        self._counters: Dict[NotificationType, KindCounter] = {
            kind: KindCounter() for kind in NotificationType
        }

    def get(self, kind: NotificationType) -> KindCounter:
        return self._counters[kind]

    def count_notifications(self, kind: NotificationType, n: int = 1) -> None:
        self._counters[kind].notifications += n

    def count_deliveries(self, kind: NotificationType, n: int) -> None:
        self._counters[kind].deliveries += n

    def as_statistics(self) -> Dict[str, int]:
        """The six named counters, in reporting order."""
        stats: Dict[str, int] = {}
        for kind in (
            NotificationType.NEW_ISSUES,
            NotificationType.MY_NEW_ISSUES,
            NotificationType.ISSUE_CHANGES,
        ):
            notifs_name, deliveries_name = STATISTIC_NAMES[kind]
            stats[notifs_name] = self._counters[kind].notifications
            stats[deliveries_name] = self._counters[kind].deliveries
        return stats

    def dump_to(self, sink: "StepStatistics") -> None:
        for name, value in self.as_statistics().items():
            sink.add(name, value)
