"""Analysis report: project tree, branch and analysis date of a finished analysis.

Expected shape::

    {
      "project_uuid": "p1",
      "analysis_date": "2026-10-19T08:30:12.345Z",
      "branch": {"name": "main", "type": "LONG", "is_main": true},
      "pull_request_key": null,
      "tree": {
        "uuid": "p1", "key": "proj", "name": "Project", "type": "project",
        "project_version": "1.2",
        "children": [{"uuid": "f1", "key": "proj:src/a.py", "name": "a.py", "type": "file"}]
      }
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from ..components.tree import ComponentNode, ComponentType
from ..exceptions import InputFormatError
from ..models import AnalysisMetadata, Branch, BranchType
from .issue_cache import parse_timestamp


@dataclass
class AnalysisReport:
    """What the pipeline needs to know about the analysis besides its issues."""

    metadata: AnalysisMetadata
    root: ComponentNode


def component_from_dict(data: Dict[str, Any]) -> ComponentNode:
    children = [component_from_dict(c) for c in data.get("children", [])]
    return ComponentNode(
        uuid=data["uuid"],
        key=data["key"],
        name=data.get("name", data["key"]),
        type=ComponentType(data.get("type", "file" if not children else "directory")),
        project_version=data.get("project_version"),
        children=children,
    )


def load_analysis_report(path: Path) -> AnalysisReport:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise InputFormatError(path, str(e))

    try:
        branch_data = data.get("branch") or {"name": "main", "is_main": True}
        branch = Branch(
            name=branch_data["name"],
            type=BranchType(branch_data.get("type", BranchType.LONG.value)),
            is_main=bool(branch_data.get("is_main", False)),
        )
        metadata = AnalysisMetadata(
            project_uuid=data["project_uuid"],
            analysis_date=parse_timestamp(data["analysis_date"]),
            branch=branch,
            pull_request_key=data.get("pull_request_key"),
        )
        root = component_from_dict(data["tree"])
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        raise InputFormatError(path, f"{type(e).__name__}: {e}")

    return AnalysisReport(metadata=metadata, root=root)
