"""Storage collaborators and their sqlite / file-backed implementations."""

from .base import CloseableIterator, IssueCache, RuleRepository, Session, SessionFactory, UserStore
from .database import DbSession, NotifyDB
from .issue_cache import JsonLinesIssueCache
from .queries import SqliteRuleRepository, SqliteUserStore
from .report import AnalysisReport, load_analysis_report
from .writer import ImportSummary, import_data, load_seed_file

__all__ = [
    "AnalysisReport",
    "CloseableIterator",
    "DbSession",
    "ImportSummary",
    "IssueCache",
    "JsonLinesIssueCache",
    "NotifyDB",
    "RuleRepository",
    "Session",
    "SessionFactory",
    "SqliteRuleRepository",
    "SqliteUserStore",
    "UserStore",
    "import_data",
    "load_analysis_report",
    "load_seed_file",
]
