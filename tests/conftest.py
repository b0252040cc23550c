"""Shared test fixtures for issue-notify."""

import pytest

from fakes import (
    DictRuleRepository,
    DictUserStore,
    FakeSessionFactory,
    RecordingNotificationService,
    make_metadata,
    make_tree,
)
from issue_notify.models import UserRecord


@pytest.fixture
def tree():
    """Small project tree with three files."""
    return make_tree()


@pytest.fixture
def metadata():
    """Analysis of the main branch."""
    return make_metadata()


@pytest.fixture
def rules():
    return DictRuleRepository(
        {
            "python:S1481": "Unused local variable",
            "python:S1192": "String literals should not be duplicated",
        }
    )


@pytest.fixture
def users():
    return [
        UserRecord(uuid="u1", login="ada", name="Ada Lovelace", email="ada@example.com"),
        UserRecord(uuid="u2", login="grace", name="Grace Hopper", email="grace@example.com"),
    ]


@pytest.fixture
def user_store(users):
    return DictUserStore(users)


@pytest.fixture
def sessions():
    return FakeSessionFactory()


@pytest.fixture
def service():
    return RecordingNotificationService()
