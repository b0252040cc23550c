"""Component tree of the analysed project.

    Project (root)
        ├── Directory
        │       └── File (leaf)
        └── File (leaf)

The tree is built by the analysis and is read-only here. Only its
traversal contract is used: walk the leaves, read key/name/uuid.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, List, Optional


class ComponentType(Enum):
    """The kinds of node in a project tree."""

    PROJECT = "project"
    DIRECTORY = "directory"
    FILE = "file"


@dataclass
class ComponentNode:
    """One node of the project tree.

    Attributes:
        uuid:            stable identifier of the component
        key:             display key, also what issues reference (e.g. proj:src/a.py)
        name:            display name
        type:            component kind
        project_version: version string, set on the project root only
        children:        child nodes, empty for leaves
    """

    uuid: str
    key: str
    name: str
    type: ComponentType = ComponentType.FILE
    project_version: Optional[str] = None
    children: List["ComponentNode"] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return not self.children


def iter_post_order(root: ComponentNode) -> Iterator[ComponentNode]:
    """Yield every node, children before their parent."""
    # Explicit stack: directory trees may be deeper than the recursion limit
    stack: list[tuple[ComponentNode, bool]] = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded or node.is_leaf:
            yield node
            continue
        stack.append((node, True))
        for child in reversed(node.children):
            stack.append((child, False))


def visit_leaves(root: ComponentNode, visitor: Callable[[ComponentNode], None]) -> None:
    """Call ``visitor`` on every leaf of the tree in post-order."""
    for node in iter_post_order(root):
        if node.is_leaf:
            visitor(node)


class TreeRootHolder:
    """Gives access to the root of the tree built for the current analysis."""

    def __init__(self, root: Optional[ComponentNode] = None) -> None:
        self._root = root

    @property
    def root(self) -> ComponentNode:
        if self._root is None:
            raise RuntimeError("Component tree has not been set for this analysis")
        return self._root

    def set_root(self, root: ComponentNode) -> None:
        self._root = root
