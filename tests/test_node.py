"""
tests/test_node.py
==================
Pytest test suite for ``Node``, the handle onto one vertex of a ``Tree``.

Reference tree
--------------
  ((A:1,B:2)X:3,C:4);

      root ─┬─ X (3) ─┬─ A (1)
            │         └─ B (2)
            └─ C (4)

      distance to root: A=4 B=5 C=4 X=3
"""

import os
import re
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from newicktree import Node, Tree

_REFERENCE = "((A:1,B:2)X:3,C:4);"


@pytest.fixture
def tree():
    """Fresh copy of the reference tree for tests that mutate it."""
    return Tree(_REFERENCE)


@pytest.fixture(scope="module")
def ref():
    """Shared reference tree for read-only tests."""
    return Tree(_REFERENCE)


def node(tree, name):
    return tree.find_node(name, exact=True)


def names(nodes):
    return [n.name for n in nodes]


# ======================================================================== #
# Properties and identity                                                   #
# ======================================================================== #


class TestProperties:
    def test_name_and_length(self, ref):
        a = node(ref, "A")
        assert a.name == "A"
        assert a.edge_length == 1.0
        assert isinstance(a.edge_length, float)

    def test_parent_and_children(self, ref):
        a = node(ref, "A")
        assert a.parent.name == "X"
        assert names(ref.root.children) == ["X", "C"]
        assert ref.root.parent is None

    def test_leaf_and_root_flags(self, ref):
        assert node(ref, "A").is_leaf
        assert not node(ref, "X").is_leaf
        assert ref.root.is_root
        assert not node(ref, "X").is_root

    def test_setters_write_through(self, tree):
        a = node(tree, "A")
        a.name = "Alpha"
        a.edge_length = 0.5
        assert str(tree) == "((Alpha:0.5,B:2.0)X:3.0,C:4.0);"

    def test_handles_compare_equal(self, ref):
        assert node(ref, "A") == node(ref, "A")
        assert node(ref, "A") != node(ref, "B")
        assert len({node(ref, "A"), node(ref, "A"), node(ref, "B")}) == 2

    def test_handles_from_different_trees_differ(self, ref):
        other = Tree(_REFERENCE)
        assert node(ref, "A") != node(other, "A")

    def test_repr(self, ref):
        assert "name='A'" in repr(node(ref, "A"))


# ======================================================================== #
# Structure                                                                 #
# ======================================================================== #


class TestAddRemoveChild:
    def test_build_programmatically(self):
        tree = Tree()
        inner = tree.new_node("X", 3.0)
        tree.root.add_child(inner)
        inner.add_child(tree.new_node("A", 1.0))
        inner.add_child(tree.new_node("B", 2.0))
        tree.root.add_child(tree.new_node("C", 4.0))
        assert str(tree) == "((A:1.0,B:2.0)X:3.0,C:4.0);"
        assert node(tree, "A").parent == inner

    def test_add_child_moves_attached_node(self, tree):
        a = node(tree, "A")
        tree.root.add_child(a)
        assert a.parent == tree.root
        assert names(node(tree, "X").children) == ["B"]
        assert str(tree) == "((B:2.0)X:3.0,C:4.0,A:1.0);"

    def test_add_child_returns_child(self, tree):
        c = tree.new_node("D")
        assert tree.root.add_child(c) is c

    def test_cycle_rejected(self, tree):
        x = node(tree, "X")
        a = node(tree, "A")
        with pytest.raises(ValueError, match="cycle"):
            a.add_child(x)
        with pytest.raises(ValueError, match="cycle"):
            x.add_child(x)

    def test_root_cannot_become_child(self, tree):
        detached = tree.new_node("D")
        with pytest.raises(ValueError, match="root"):
            detached.add_child(tree.root)

    def test_cross_tree_rejected(self, tree):
        other = Tree("(D,E);")
        with pytest.raises(ValueError, match="different trees"):
            tree.root.add_child(node(other, "D"))

    def test_remove_child(self, tree):
        c = node(tree, "C")
        removed = tree.root.remove_child(c)
        assert removed == c
        assert c.parent is None
        assert str(tree) == "((A:1.0,B:2.0)X:3.0);"

    def test_remove_non_child(self, tree):
        with pytest.raises(ValueError, match="not a child"):
            tree.root.remove_child(node(tree, "A"))


class TestReverseEdgeDirection:
    def test_leaf_becomes_top(self, tree):
        a = node(tree, "A")
        a.reverse_edge_direction()
        assert tree.root == a
        assert a.parent is None
        assert a.edge_length == 0.0
        # Each edge keeps its length; the length moves to the new child end.
        assert str(tree) == "((B:2.0,(C:4.0):3.0)X:1.0)A;"

    def test_top_node_is_noop(self, tree):
        before = str(tree)
        tree.root.reverse_edge_direction()
        assert str(tree) == before

    def test_leaf_set_preserved(self, tree):
        node(tree, "B").reverse_edge_direction()
        assert sorted(n.name for n in tree.nodes() if n.name) == ["A", "B", "C", "X"]
        assert tree.n_nodes == 5

    def test_deep_path(self):
        depth = 3000
        newick = "(" * depth + "A" + "".join(f",B{i})" for i in range(depth)) + ";"
        tree = Tree(newick)
        a = node(tree, "A")
        a.reverse_edge_direction()
        assert tree.root == a
        assert tree.n_nodes == 2 * depth + 1


# ======================================================================== #
# Ancestry                                                                  #
# ======================================================================== #


class TestAncestry:
    def test_is_ancestor_of(self, ref):
        a = node(ref, "A")
        assert ref.root.is_ancestor_of(a)
        assert node(ref, "X").is_ancestor_of(a)
        assert not a.is_ancestor_of(a)
        assert not node(ref, "X").is_ancestor_of(node(ref, "C"))
        assert not a.is_ancestor_of(ref.root)

    def test_is_ancestor_of_other_tree(self, ref):
        other = Tree(_REFERENCE)
        assert not ref.root.is_ancestor_of(node(other, "A"))

    @pytest.mark.parametrize(
        "u, v, expected",
        [
            ("A", "B", "X"),
            ("A", "C", ""),
            ("A", "X", "X"),
            ("X", "A", "X"),
            ("C", "C", "C"),
        ],
    )
    def test_least_common_ancestor(self, ref, u, v, expected):
        assert node(ref, u).least_common_ancestor(node(ref, v)).name == expected

    def test_lca_alias(self, ref):
        assert node(ref, "A").lca(node(ref, "B")) == node(ref, "X")

    def test_lca_of_self_is_self(self, ref):
        for n in ref.nodes():
            assert n.least_common_ancestor(n) == n

    def test_lca_disconnected(self, tree):
        detached = tree.new_node("D")
        with pytest.raises(ValueError, match="not in one connected tree"):
            node(tree, "A").least_common_ancestor(detached)

    def test_distance_to_ancestor(self, ref):
        a = node(ref, "A")
        assert a.distance_to_ancestor(ref.root) == 4.0
        assert a.distance_to_ancestor(node(ref, "X")) == 1.0
        assert a.distance_to_ancestor(a) == 0.0

    def test_distance_to_non_ancestor(self, ref):
        with pytest.raises(ValueError, match="not an ancestor"):
            node(ref, "A").distance_to_ancestor(node(ref, "C"))

    def test_edge_count_to_ancestor(self, ref):
        a = node(ref, "A")
        assert a.edge_count_to_ancestor(ref.root) == 2
        assert a.edge_count_to_ancestor(a) == 0
        assert a.edge_count_to_ancestor(node(ref, "C")) is None

    def test_edge_count_to_node(self, ref):
        assert node(ref, "A").edge_count_to_node(node(ref, "C")) == 3
        assert node(ref, "A").edge_count_to_node(node(ref, "B")) == 2
        assert node(ref, "A").edge_count_to_node(node(ref, "A")) == 0


# ======================================================================== #
# Traversal                                                                 #
# ======================================================================== #


class TestTraversal:
    def test_descendants_preorder(self, ref):
        assert names(ref.root.descendants()) == ["X", "A", "B", "C"]
        assert node(ref, "A").descendants() == []

    def test_leaves_and_internal_nodes(self, ref):
        assert names(ref.root.leaves()) == ["A", "B", "C"]
        assert names(ref.root.internal_nodes()) == ["X"]

    def test_siblings(self, ref):
        assert names(node(ref, "A").siblings()) == ["B"]
        assert names(node(ref, "C").siblings()) == ["X"]
        assert ref.root.siblings() == []

    def test_find_substring_first_preorder_match(self):
        tree = Tree("(A12,(A13,A2));")
        assert tree.root.find("A1").name == "A12"
        assert tree.root.find("A13").name == "A13"

    def test_find_exact(self):
        tree = Tree("(A12,(A13,A2));")
        assert tree.root.find("A1", exact=True) is None
        assert tree.root.find("A13", exact=True).name == "A13"

    def test_find_regex(self):
        tree = Tree("(A12,(A13,A2));")
        assert tree.root.find(re.compile(r"^A\d$")).name == "A2"

    def test_find_within_subtree(self, ref):
        assert node(ref, "X").find("C") is None
        assert node(ref, "X").find("X") == node(ref, "X")

    def test_find_missing(self, ref):
        assert ref.root.find("Z") is None


# ======================================================================== #
# Ordering, naming and output                                               #
# ======================================================================== #


class TestOrderingAndNaming:
    def test_reorder_subtree(self):
        tree = Tree("(B,(D,A),C);")
        inner = tree.root.children[1]
        inner.reorder_subtree()
        assert str(tree) == "(B,(A,D),C);"

    def test_reorder_is_stable_for_equal_names(self):
        tree = Tree("((B,A)X,(D,C)X);")
        tree.root.reorder_subtree()
        assert str(tree) == "((A,B)X,(C,D)X);"

    def test_taxa_sorted_with_duplicates(self):
        tree = Tree("(C,(A,(B,A)));")
        assert tree.root.taxa() == ["A", "A", "B", "C"]

    def test_taxa_of_leaf(self, ref):
        assert node(ref, "A").taxa() == ["A"]

    def test_taxa_with_internal_names(self, ref):
        assert node(ref, "X").taxa(include_internal_names=True) == ["A", "B", "X"]
        assert ref.root.taxa(include_internal_names=True) == ["A", "B", "C", "X"]

    def test_subtree_serialize(self, ref):
        assert node(ref, "X").serialize() == "(A:1.0,B:2.0)X"
        assert str(node(ref, "X")) == "(A:1.0,B:2.0)X"
        assert node(ref, "X").serialize(include_lengths=False, name_mode="none") == "(A,B)"

    def test_node_is_exported(self, ref):
        assert isinstance(ref.root, Node)
