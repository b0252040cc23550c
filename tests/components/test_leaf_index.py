"""Tests for the component tree traversal and the lazy leaf index."""

import pytest

import issue_notify.components.leaf_index as leaf_index_module
from issue_notify.components import LeafIndex, iter_post_order, visit_leaves
from issue_notify.components.tree import ComponentNode, TreeRootHolder


class TestTraversal:
    def test_post_order_visits_children_first(self, tree):
        keys = [n.key for n in iter_post_order(tree)]
        assert keys == ["proj:src/a.py", "proj:src/b.py", "proj:src", "proj:README.md", "proj"]

    def test_visit_leaves_skips_inner_nodes(self, tree):
        seen = []
        visit_leaves(tree, lambda node: seen.append(node.key))
        assert seen == ["proj:src/a.py", "proj:src/b.py", "proj:README.md"]

    def test_single_node_tree_is_a_leaf(self):
        root = ComponentNode(uuid="p", key="proj", name="proj")
        seen = []
        visit_leaves(root, lambda node: seen.append(node.key))
        assert seen == ["proj"]

    def test_deep_tree_does_not_recurse(self):
        root = ComponentNode(uuid="d0", key="d0", name="d0")
        node = root
        for depth in range(1, 5000):
            child = ComponentNode(uuid=f"d{depth}", key=f"d{depth}", name=f"d{depth}")
            node.children.append(child)
            node = child
        seen = []
        visit_leaves(root, lambda n: seen.append(n.key))
        assert seen == ["d4999"]


class TestTreeRootHolder:
    def test_unset_root_raises(self):
        with pytest.raises(RuntimeError):
            TreeRootHolder().root

    def test_set_root(self, tree):
        holder = TreeRootHolder()
        holder.set_root(tree)
        assert holder.root is tree


class TestLeafIndex:
    def test_not_built_until_first_resolve(self, tree, monkeypatch):
        calls = []
        original = leaf_index_module.visit_leaves
        monkeypatch.setattr(
            leaf_index_module,
            "visit_leaves",
            lambda root, visitor: (calls.append(root), original(root, visitor)),
        )
        index = LeafIndex(tree)
        assert not index.is_built
        assert calls == []

        assert index.resolve("proj:src/a.py").name == "a.py"
        assert index.is_built
        assert len(calls) == 1

    def test_built_once(self, tree, monkeypatch):
        calls = []
        original = leaf_index_module.visit_leaves
        monkeypatch.setattr(
            leaf_index_module,
            "visit_leaves",
            lambda root, visitor: (calls.append(root), original(root, visitor)),
        )
        index = LeafIndex(tree)
        index.resolve("proj:src/a.py")
        index.resolve("proj:src/b.py")
        index.resolve("missing")
        assert len(calls) == 1

    def test_unknown_key_resolves_to_none(self, tree):
        assert LeafIndex(tree).resolve("proj:src/deleted.py") is None

    def test_directories_are_not_indexed(self, tree):
        index = LeafIndex(tree)
        assert index.resolve("proj:src") is None
        assert index.resolve("proj") is None

    def test_leaf_under_root(self, tree):
        node = LeafIndex(tree).resolve("proj:README.md")
        assert node.uuid == "u-readme"
