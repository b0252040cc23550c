"""Pipeline exceptions: collaborator lookups, storage, adapter input."""

from pathlib import Path
from typing import Optional

from .base import IssueNotifyError


class RuleNotFoundError(IssueNotifyError):
    """Raised when an issue references a rule the repository does not know."""

    def __init__(self, rule_key: str):
        super().__init__(f"Rule not found: {rule_key}", details={"rule_key": rule_key})
        self.rule_key = rule_key


class StorageError(IssueNotifyError):
    """Raised when the notification database cannot be used."""

    def __init__(self, reason: str, db_path: Optional[Path] = None):
        details = {"reason": reason}
        if db_path:
            details["db_path"] = str(db_path)

        super().__init__(f"Storage failure: {reason}", details=details)
        self.reason = reason
        self.db_path = db_path


class InputFormatError(IssueNotifyError):
    """Raised when an adapter input file (report, issue dump) is malformed."""

    def __init__(self, path: Path, reason: str, line: Optional[int] = None):
        details = {"path": str(path), "reason": reason}
        if line is not None:
            details["line"] = str(line)

        super().__init__(f"Malformed input file: {path}", details=details)
        self.path = path
        self.reason = reason
        self.line = line
