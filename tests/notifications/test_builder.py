"""Tests for notification building."""

import pytest

from fakes import ANALYSIS_DATE, BEFORE_LEAK, make_changed_issue, make_metadata, make_new_issue
from issue_notify.components.leaf_index import LeafIndex
from issue_notify.exceptions import RuleNotFoundError
from issue_notify.leak import LeakWindow
from issue_notify.models import BranchType, RuleType
from issue_notify.notifications.builder import NotificationBuilder
from issue_notify.statistics import NewIssuesStatistics


def _builder(tree, rules, metadata=None, **kwargs):
    return NotificationBuilder(tree, metadata or make_metadata(), rules, LeafIndex(tree), **kwargs)


def _statistics(*issues):
    stats = NewIssuesStatistics(LeakWindow(ANALYSIS_DATE).contains)
    for issue in issues:
        stats.add(issue)
    return stats


class TestProjectContext:
    def test_main_branch_has_no_branch_name(self, tree, rules):
        context = _builder(tree, rules).project_context
        assert context.project_key == "proj"
        assert context.project_name == "My Project"
        assert context.branch_name is None
        assert context.pull_request is None

    def test_long_lived_branch_carries_its_name(self, tree, rules):
        metadata = make_metadata(name="release-1.x", is_main=False)
        context = _builder(tree, rules, metadata).project_context
        assert context.branch_name == "release-1.x"
        assert context.pull_request is None

    def test_pull_request_carries_key_not_branch(self, tree, rules):
        metadata = make_metadata(
            branch_type=BranchType.PULL_REQUEST, is_main=False, name="feature/x", pull_request_key="42"
        )
        context = _builder(tree, rules, metadata).project_context
        assert context.branch_name is None
        assert context.pull_request == "42"

    def test_pull_request_key_ignored_outside_pull_requests(self, tree, rules):
        metadata = make_metadata(name="develop", is_main=False, pull_request_key="42")
        assert _builder(tree, rules, metadata).project_context.pull_request is None


class TestIssueChange:
    def test_decorates_issue(self, tree, rules, users):
        issue = make_changed_issue(assignee="u1")
        notification = _builder(tree, rules).issue_change(issue, {"u1": users[0]})
        assert notification.issue is issue
        assert notification.rule_name == "Unused local variable"
        assert notification.assignee == users[0]
        assert notification.component_key == "proj:src/a.py"
        assert notification.component_name == "a.py"
        assert notification.project.project_key == "proj"

    def test_unresolved_assignee_is_omitted(self, tree, rules):
        notification = _builder(tree, rules).issue_change(make_changed_issue(assignee="ghost"), {})
        assert notification.assignee is None

    def test_unknown_component_is_omitted(self, tree, rules):
        issue = make_changed_issue(component_key="proj:src/deleted.py")
        notification = _builder(tree, rules).issue_change(issue, {})
        assert notification.component_key is None
        assert notification.component_name is None

    def test_unknown_rule_fails(self, tree, rules):
        with pytest.raises(RuleNotFoundError) as excinfo:
            _builder(tree, rules).issue_change(make_changed_issue(rule_key="java:S0000"), {})
        assert excinfo.value.rule_key == "java:S0000"

    def test_batch_keeps_order(self, tree, rules):
        issues = [make_changed_issue(key=str(i)) for i in range(3)]
        notifications = _builder(tree, rules).issue_changes(issues, {})
        assert [n.issue.key for n in notifications] == ["0", "1", "2"]


class TestNewIssues:
    def test_global_summary(self, tree, rules, users):
        stats = _statistics(
            make_new_issue(key="1", type=RuleType.BUG, assignee="u1", effort_minutes=30, tags=("cwe",)),
            make_new_issue(key="2", rule_key="python:S1192", assignee="u1", effort_minutes=15),
            make_new_issue(key="3", assignee="ghost", component_key="proj:gone.py", effort_minutes=600),
            make_new_issue(key="4", creation_date=BEFORE_LEAK, effort_minutes=999),
        )
        notification = _builder(tree, rules).new_issues(stats.global_statistics, {"u1": users[0]})

        assert notification.project_version == "1.2"
        assert notification.analysis_date == ANALYSIS_DATE
        assert notification.statistics is stats.global_statistics
        summary = notification.summary
        assert summary.count == 3
        assert summary.debt_minutes == 645
        assert notification.debt == "1d 2h 45min"
        assert summary.count_by_type == {"CODE_SMELL": 2, "BUG": 1, "VULNERABILITY": 0}
        assert summary.top_rules == [
            ("Unused local variable", 2),
            ("String literals should not be duplicated", 1),
        ]
        assert summary.top_tags == [("cwe", 1)]
        assert summary.top_components == [("a.py", 2), ("proj:gone.py", 1)]
        assert summary.top_assignees == [("Ada Lovelace", 2), ("ghost", 1)]

    def test_top_count_from_config(self, tree, rules):
        from issue_notify.config import NotifyConfig

        stats = _statistics(*(make_new_issue(key=str(i), tags=(f"t{i}",)) for i in range(4)))
        builder = _builder(tree, rules, config=NotifyConfig(top_count=2))
        assert len(builder.new_issues(stats.global_statistics, {}).summary.top_tags) == 2

    def test_my_new_issues(self, tree, rules, users):
        stats = _statistics(make_new_issue(assignee="u1", effort_minutes=5))
        notification = _builder(tree, rules).my_new_issues(
            "u1", stats.assignees_statistics["u1"], users[0]
        )
        assert notification.assignee_uuid == "u1"
        assert notification.assignee == users[0]
        assert notification.summary.count == 1
        assert notification.summary.top_assignees == []
        assert notification.debt == "5min"
