"""Exception hierarchy for issue-notify."""

from .base import IssueNotifyError
from .config import ConfigurationError, InvalidConfigError
from .pipeline import InputFormatError, RuleNotFoundError, StorageError

__all__ = [
    "IssueNotifyError",
    "ConfigurationError",
    "InvalidConfigError",
    "RuleNotFoundError",
    "StorageError",
    "InputFormatError",
]
