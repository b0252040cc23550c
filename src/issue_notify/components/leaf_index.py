"""Lazy key -> leaf lookup over the project tree."""

from __future__ import annotations

from typing import Dict, Optional

from ..logging_config import get_logger
from .tree import ComponentNode, visit_leaves

logger = get_logger(__name__)


class LeafIndex:
    """Maps component keys to leaf nodes.

    The tree is walked once, on the first ``resolve()`` call. A run that
    never needs a component never pays for the traversal.

    Usage::

        index = LeafIndex(tree_root_holder.root)
        node = index.resolve(issue.component_key)  # None if not in tree
    """

    def __init__(self, root: ComponentNode) -> None:
        self._root = root
        self._leaves_by_key: Optional[Dict[str, ComponentNode]] = None

    @property
    def is_built(self) -> bool:
        return self._leaves_by_key is not None

    def resolve(self, component_key: str) -> Optional[ComponentNode]:
        if self._leaves_by_key is None:
            self._leaves_by_key = self._build()
        return self._leaves_by_key.get(component_key)

    def _build(self) -> Dict[str, ComponentNode]:
        leaves: Dict[str, ComponentNode] = {}

        def record(node: ComponentNode) -> None:
            leaves[node.key] = node

        visit_leaves(self._root, record)
        logger.debug("Indexed %d leaf components under %s", len(leaves), self._root.key)
        return leaves
