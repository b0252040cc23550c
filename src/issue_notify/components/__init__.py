"""Project component tree and the leaf index built over it."""

from .leaf_index import LeafIndex
from .tree import ComponentNode, ComponentType, TreeRootHolder, iter_post_order, visit_leaves

__all__ = [
    "ComponentNode",
    "ComponentType",
    "LeafIndex",
    "TreeRootHolder",
    "iter_post_order",
    "visit_leaves",
]
