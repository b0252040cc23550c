"""Read-only queries against the notification database.

Used by the pipeline through the ``UserStore`` / ``RuleRepository``
interfaces and by the subscription-backed notification service.
"""

from typing import Dict, Iterable, List, Optional, Set

from ..exceptions import RuleNotFoundError
from ..logging_config import get_logger
from ..models import Rule, UserRecord
from .base import RuleRepository, UserStore
from .database import DbSession, NotifyDB

logger = get_logger(__name__)

# SQLite caps host parameters per statement (999 on older builds).
_MAX_PARAMS = 999


def _chunks(values: List[str], size: int = _MAX_PARAMS) -> Iterable[List[str]]:
    for start in range(0, len(values), size):
        yield values[start : start + size]


class SqliteUserStore(UserStore):
    """Users looked up by uuid, in chunks that respect the parameter limit."""

    def select_by_uuids(self, session: DbSession, uuids: Iterable[str]) -> List[UserRecord]:
        wanted = sorted(set(uuids))
        users: List[UserRecord] = []
        for chunk in _chunks(wanted):
            placeholders = ", ".join("?" for _ in chunk)
            rows = session.conn.execute(
                f"SELECT uuid, login, name, email FROM users WHERE uuid IN ({placeholders})",
                chunk,
            ).fetchall()
            users.extend(
                UserRecord(uuid=r["uuid"], login=r["login"], name=r["name"], email=r["email"])
                for r in rows
            )
        return users


class SqliteRuleRepository(RuleRepository):
    """All rules, read into memory on the first lookup.

    A run that never needs a rule name never opens the database.
    """

    def __init__(self, db: NotifyDB) -> None:
        self._db = db
        self._rules: Optional[Dict[str, Rule]] = None

    def get_by_key(self, rule_key: str) -> Rule:
        rule = self._load().get(rule_key)
        if rule is None:
            raise RuleNotFoundError(rule_key)
        return rule

    def __len__(self) -> int:
        return len(self._load())

    def _load(self) -> Dict[str, Rule]:
        if self._rules is None:
            with self._db.open_session() as session:
                rows = session.conn.execute("SELECT rule_key, name FROM rules").fetchall()
            logger.debug("Loaded %d rules", len(rows))
            self._rules = {r["rule_key"]: Rule(key=r["rule_key"], name=r["name"]) for r in rows}
        return self._rules


def select_uuids_with_email(session: DbSession, uuids: Iterable[str]) -> Set[str]:
    """The subset of ``uuids`` whose user has a non-empty email address."""
    result: Set[str] = set()
    for chunk in _chunks(sorted(set(uuids))):
        placeholders = ", ".join("?" for _ in chunk)
        rows = session.conn.execute(
            f"""
            SELECT uuid FROM users
            WHERE email IS NOT NULL AND email != '' AND uuid IN ({placeholders})
            """,
            chunk,
        ).fetchall()
        result.update(r["uuid"] for r in rows)
    return result


def select_subscribers(
    session: DbSession, project_uuid: str, notification_types: Iterable[str]
) -> Dict[str, List[str]]:
    """Subscribed user uuids per notification type for one project.

    Types without any subscriber are absent from the result.
    """
    types = sorted(set(notification_types))
    if not types:
        return {}
    placeholders = ", ".join("?" for _ in types)
    rows = session.conn.execute(
        f"""
        SELECT notification_type, user_uuid FROM subscriptions
        WHERE project_uuid = ? AND notification_type IN ({placeholders})
        ORDER BY notification_type, user_uuid
        """,
        [project_uuid, *types],
    ).fetchall()
    result: Dict[str, List[str]] = {}
    for r in rows:
        result.setdefault(r["notification_type"], []).append(r["user_uuid"])
    return result
