"""Seed the notification database from a JSON document in a single transaction.

Expected shape::

    {
      "users": [{"uuid": "u1", "login": "ada", "name": "Ada", "email": "ada@example.com"}],
      "rules": [{"key": "python:S1481", "name": "Unused local variables should be removed"}],
      "subscriptions": [
        {"project_uuid": "p1", "type": "NewIssues", "user_uuid": "u1"}
      ]
    }
"""

import json
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from ..exceptions import InputFormatError
from .database import DbSession


@dataclass
class ImportSummary:
    """Row counts written by ``import_data``."""

    users: int = 0
    rules: int = 0
    subscriptions: int = 0


def load_seed_file(path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise InputFormatError(path, str(e))
    if not isinstance(data, dict):
        raise InputFormatError(path, "top-level value must be an object")
    return data


def import_data(session: DbSession, data: Dict[str, Any]) -> ImportSummary:
    """Upsert users, rules and subscriptions.

    All writes happen inside a single transaction; on failure nothing is
    kept.
    """
    summary = ImportSummary()
    cur = session.conn.cursor()
    try:
        cur.execute("BEGIN")

        user_rows = [
            (u["uuid"], u["login"], u.get("name"), u.get("email"))
            for u in data.get("users", [])
        ]
        if user_rows:
            cur.executemany(
                """
                INSERT INTO users (uuid, login, name, email) VALUES (?, ?, ?, ?)
                ON CONFLICT(uuid) DO UPDATE SET
                    login = excluded.login, name = excluded.name, email = excluded.email
                """,
                user_rows,
            )
        summary.users = len(user_rows)

        rule_rows = [(r["key"], r["name"]) for r in data.get("rules", [])]
        if rule_rows:
            cur.executemany(
                """
                INSERT INTO rules (rule_key, name) VALUES (?, ?)
                ON CONFLICT(rule_key) DO UPDATE SET name = excluded.name
                """,
                rule_rows,
            )
        summary.rules = len(rule_rows)

        sub_rows = [
            (s["project_uuid"], s["type"], s["user_uuid"]) for s in data.get("subscriptions", [])
        ]
        if sub_rows:
            cur.executemany(
                """
                INSERT OR IGNORE INTO subscriptions (project_uuid, notification_type, user_uuid)
                VALUES (?, ?, ?)
                """,
                sub_rows,
            )
        summary.subscriptions = len(sub_rows)

        cur.execute("COMMIT")
    except (sqlite3.Error, KeyError, TypeError):
        cur.execute("ROLLBACK")
        raise
    return summary
