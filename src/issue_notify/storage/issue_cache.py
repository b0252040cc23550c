"""JSON-lines issue cache: one issue object per line, read lazily.

Each ``traverse()`` opens the file, yields issues as lines are read and
closes the file when the returned iterator is closed, so memory use does
not depend on the number of issues.
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, TextIO, Union

from ..exceptions import InputFormatError
from ..logging_config import get_logger
from ..models import Issue, RuleType
from .base import CloseableIterator, IssueCache

logger = get_logger(__name__)

# fromisoformat before 3.11 only takes 3 or 6 fractional digits
_FRACTION = re.compile(r"([T ]\d{2}:\d{2}:\d{2})\.(\d+)")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    value = _FRACTION.sub(lambda m: f"{m.group(1)}.{(m.group(2) + '000000')[:6]}", value)
    moment = datetime.fromisoformat(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def issue_from_dict(data: Dict[str, Any]) -> Issue:
    """Build an Issue from its JSON form. Raises KeyError/ValueError on bad input."""
    return Issue(
        key=data["key"],
        rule_key=data["rule_key"],
        type=RuleType(data.get("type", RuleType.CODE_SMELL.value)),
        component_key=data["component_key"],
        creation_date=parse_timestamp(data["creation_date"]),
        is_new=bool(data.get("is_new", False)),
        is_changed=bool(data.get("is_changed", False)),
        must_send_notifications=bool(data.get("must_send_notifications", False)),
        resolution=data.get("resolution"),
        assignee=data.get("assignee"),
        severity=data.get("severity", "MAJOR"),
        status=data.get("status", "OPEN"),
        message=data.get("message", ""),
        tags=tuple(data.get("tags", ())),
        effort_minutes=int(data.get("effort_minutes", 0)),
    )


class JsonLinesIssueCache(IssueCache):
    """Issue cache backed by a ``.jsonl`` dump of the analysis' issues."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self.traversals = 0

    def traverse(self) -> CloseableIterator[Issue]:
        handle = self.path.open("r", encoding="utf-8")
        self.traversals += 1
        logger.debug("Opened issue cache %s (traversal #%d)", self.path, self.traversals)
        return CloseableIterator(self._read(handle), on_close=handle.close)

    def _read(self, handle: TextIO) -> Iterator[Issue]:
        for line_no, line in enumerate(handle, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield issue_from_dict(json.loads(line))
            except (json.JSONDecodeError, KeyError, ValueError, TypeError) as e:
                raise InputFormatError(self.path, f"{type(e).__name__}: {e}", line=line_no)
