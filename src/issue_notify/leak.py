"""Leak period: which new issues count as introduced by this analysis.

Issue creation dates are persisted truncated to whole seconds, so the
analysis date has to be truncated the same way before comparing, otherwise
an issue created in the very second of the analysis would fall outside the
leak period.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .models import Issue


def truncate_to_seconds(moment: datetime) -> datetime:
    """Drop the sub-second part of ``moment``. Idempotent."""
    return moment.replace(microsecond=0)


@dataclass(frozen=True)
class LeakWindow:
    """New-code boundary of one analysis."""

    analysis_date: datetime
    start: datetime = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", truncate_to_seconds(self.analysis_date))

    def contains(self, issue: Issue) -> bool:
        """True iff ``issue`` is new, unresolved and created on/after the boundary."""
        return (
            issue.is_new
            and issue.resolution is None
            and issue.creation_date >= self.start
        )
