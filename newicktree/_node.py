"""
_node.py
========
Handle onto one vertex of a ``Tree``.

Node data does not live on ``Node`` objects: every tree keeps its nodes in an
arena of parallel arrays indexed by a stable integer ID (``names``,
``parent``, ``edge_length``, ``child_ids``).  A ``Node`` is a lightweight
``(tree, id)`` pair that reads and writes those arrays, so re-parenting during
rerooting is an ID rewrite and two handles to the same vertex compare equal.

Public API
----------
  Node properties : name, edge_length, parent, children, is_leaf, is_root
  Structure       : add_child, remove_child, reverse_edge_direction
  Ancestry        : is_ancestor_of, least_common_ancestor (lca),
                    distance_to_ancestor, edge_count_to_ancestor,
                    edge_count_to_node
  Traversal       : descendants, leaves, internal_nodes, siblings, find
  Ordering/naming : reorder_subtree, taxa
  Output          : serialize
"""

import re
from typing import List, Optional


class Node:
    """
    A vertex of a ``Tree``, addressed by arena ID.

    Attributes
    ----------
    tree : Tree   The owning tree.
    id   : int    Arena ID of this vertex within ``tree``.
    """

    __slots__ = ("tree", "id")

    def __init__(self, tree, node_id: int) -> None:
        self.tree = tree
        self.id = int(node_id)

    # ================================================================== #
    # Identity                                                             #
    # ================================================================== #

    def __eq__(self, other) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.tree is other.tree and self.id == other.id

    def __hash__(self) -> int:
        return hash((id(self.tree), self.id))

    def __repr__(self) -> str:
        return f"Node(id={self.id}, name={self.name!r}, edge_length={self.edge_length})"

    # ================================================================== #
    # Properties                                                           #
    # ================================================================== #

    @property
    def name(self) -> str:
        return self.tree.names[self.id]

    @name.setter
    def name(self, value: str) -> None:
        self.tree.names[self.id] = str(value)

    @property
    def edge_length(self) -> float:
        return float(self.tree.edge_length[self.id])

    @edge_length.setter
    def edge_length(self, value: float) -> None:
        self.tree.edge_length[self.id] = float(value)

    @property
    def parent(self) -> Optional["Node"]:
        p = int(self.tree.parent[self.id])
        return None if p == -1 else Node(self.tree, p)

    @property
    def children(self) -> List["Node"]:
        return [Node(self.tree, c) for c in self.tree.child_ids[self.id]]

    @property
    def is_leaf(self) -> bool:
        return not self.tree.child_ids[self.id]

    @property
    def is_root(self) -> bool:
        return self.id == self.tree.root_id

    # ================================================================== #
    # Structure                                                            #
    # ================================================================== #

    def add_child(self, child: "Node") -> "Node":
        """
        Append *child* to this node's children and return it.

        A child that is already attached elsewhere is moved.

        Raises
        ------
        ValueError
            If *child* belongs to another tree, is the tree's root, or is
            this node or one of its ancestors (which would create a cycle).
        """
        self._check_same_tree(child)
        if child.id == self.id or child.is_ancestor_of(self):
            raise ValueError(
                f"Cannot add node {child.id} under node {self.id}: "
                "it would create a cycle."
            )
        if child.id == self.tree.root_id:
            raise ValueError("The root cannot be added as a child; reroot instead.")
        old_parent = int(self.tree.parent[child.id])
        if old_parent != -1:
            self.tree._unlink(old_parent, child.id)
        self.tree._link(self.id, child.id)
        return child

    def remove_child(self, child: "Node") -> "Node":
        """
        Detach *child* from this node and return it; its parent is cleared.

        Raises
        ------
        ValueError   if *child* is not a child of this node.
        """
        self._check_same_tree(child)
        if int(self.tree.parent[child.id]) != self.id:
            raise ValueError(f"Node {child.id} is not a child of node {self.id}.")
        self.tree._unlink(self.id, child.id)
        return child

    def reverse_edge_direction(self) -> "Node":
        """
        Make this node the top of its tree by reversing the path to the top.

        Every node on the path from here to the current top becomes the child
        of the node that used to be its child.  Edge lengths travel with the
        edges, so each shifts down by one hop; this node's own length becomes
        0.  This is the rerooting primitive.

        Defined recursively as: detach from the parent ``p``; if ``p`` has a
        parent, reverse ``p`` first; then attach ``p`` as the last child of
        this node, give ``p`` this node's old length and zero this node's
        length.  Implemented with an explicit path list so long paths do not
        hit the recursion limit; the resulting child order and lengths match
        the recursive definition.

        Returns
        -------
        Node   self.
        """
        tree = self.tree
        parent = tree.parent
        path = [self.id]
        p = int(parent[self.id])
        while p != -1:
            path.append(p)
            p = int(parent[p])
        if len(path) == 1:
            return self

        lengths = [float(tree.edge_length[node_id]) for node_id in path]
        for k in range(len(path) - 1):
            tree._unlink(path[k + 1], path[k])
        # Innermost recursion level (next to the old top) attaches first.
        for k in range(len(path) - 2, -1, -1):
            tree._link(path[k], path[k + 1])
            tree.edge_length[path[k + 1]] = lengths[k]
        tree.edge_length[self.id] = 0.0

        if tree.root_id == path[-1]:
            tree.root_id = self.id
        return self

    # ================================================================== #
    # Ancestry                                                             #
    # ================================================================== #

    def is_ancestor_of(self, other: "Node") -> bool:
        """True if this node is found walking up from *other* (not *other* itself)."""
        if other.tree is not self.tree:
            return False
        parent = self.tree.parent
        p = int(parent[other.id])
        while p != -1:
            if p == self.id:
                return True
            p = int(parent[p])
        return False

    def least_common_ancestor(self, other: "Node") -> "Node":
        """
        Return the deepest node that is *self* or an ancestor of it and is
        also *other* or an ancestor of it.

        ``n.least_common_ancestor(n) == n``.

        Raises
        ------
        ValueError   if the two nodes are not in one connected tree.
        """
        self._check_same_tree(other)
        return Node(self.tree, self.tree._lca_id(self.id, other.id))

    lca = least_common_ancestor

    def distance_to_ancestor(self, ancestor: "Node") -> float:
        """
        Sum of edge lengths from this node up to *ancestor* (exclusive of
        *ancestor*'s own edge).  0.0 when *ancestor* is this node.

        Raises
        ------
        ValueError   if *ancestor* is neither this node nor an ancestor of it.
        """
        self._check_same_tree(ancestor)
        return self.tree._distance_to_ancestor_id(self.id, ancestor.id)

    def edge_count_to_ancestor(self, ancestor: "Node") -> Optional[int]:
        """
        Number of edges from this node up to *ancestor*; 0 for this node
        itself and ``None`` when *ancestor* is not an ancestor.
        """
        if ancestor.tree is not self.tree:
            return None
        parent = self.tree.parent
        count = 0
        node_id = self.id
        while node_id != ancestor.id:
            node_id = int(parent[node_id])
            if node_id == -1:
                return None
            count += 1
        return count

    def edge_count_to_node(self, other: "Node") -> int:
        """Number of edges on the path between this node and *other*."""
        lca = self.least_common_ancestor(other)
        return self.edge_count_to_ancestor(lca) + other.edge_count_to_ancestor(lca)

    # ================================================================== #
    # Traversal                                                            #
    # ================================================================== #

    def descendants(self) -> List["Node"]:
        """All nodes below this one in preorder (children left to right)."""
        tree = self.tree
        return [Node(tree, i) for i in tree._preorder_ids(self.id, include_start=False)]

    def leaves(self) -> List["Node"]:
        """Leaf descendants in preorder."""
        return [node for node in self.descendants() if node.is_leaf]

    def internal_nodes(self) -> List["Node"]:
        """Non-leaf descendants in preorder."""
        return [node for node in self.descendants() if not node.is_leaf]

    def siblings(self) -> List["Node"]:
        """The parent's other children; empty for a node without parent."""
        p = int(self.tree.parent[self.id])
        if p == -1:
            return []
        return [Node(self.tree, c) for c in self.tree.child_ids[p] if c != self.id]

    def find(self, pattern, exact: bool = False) -> Optional["Node"]:
        """
        Return the first node in preorder, starting with this one, whose name
        matches *pattern*, or ``None``.

        Parameters
        ----------
        pattern : str | re.Pattern
            A string matches names that contain it (or equal it when *exact*
            is set).  A compiled regular expression matches via ``search``.
        exact : bool
            Require the whole name to equal *pattern* (strings only).
        """
        names = self.tree.names
        if isinstance(pattern, re.Pattern):
            def matches(name):
                return pattern.search(name) is not None
        elif exact:
            def matches(name):
                return name == pattern
        else:
            def matches(name):
                return pattern in name

        for node_id in self.tree._preorder_ids(self.id, include_start=True):
            if matches(names[node_id]):
                return Node(self.tree, node_id)
        return None

    # ================================================================== #
    # Ordering and naming                                                  #
    # ================================================================== #

    def reorder_subtree(self) -> "Node":
        """
        Sort the children of every node in this subtree by name, in place.

        Ordinary string ordering is used, so unnamed (internal) nodes come
        before named ones.  The sort is stable.
        """
        tree = self.tree
        names = tree.names
        for node_id in tree._preorder_ids(self.id, include_start=True):
            kids = tree.child_ids[node_id]
            if len(kids) > 1:
                kids.sort(key=names.__getitem__)
        return self

    def taxa(self, include_internal_names: bool = False) -> List[str]:
        """
        Sorted names of the leaves in this subtree (this node included when
        it is a leaf).  Duplicates are kept.

        With *include_internal_names*, non-empty names of internal nodes in
        the subtree are merged into the same sorted list.
        """
        tree = self.tree
        names = tree.names
        out = []
        for node_id in tree._preorder_ids(self.id, include_start=True):
            if not tree.child_ids[node_id]:
                out.append(names[node_id])
            elif include_internal_names and names[node_id] != "":
                out.append(names[node_id])
        out.sort()
        return out

    # ================================================================== #
    # Output                                                               #
    # ================================================================== #

    def serialize(self, include_lengths: bool = True, name_mode="node") -> str:
        """
        NEWICK text for this subtree, without the trailing ``;``.

        See ``Tree.serialize`` for the meaning of the arguments.
        """
        return self.tree._serialize_from(self.id, include_lengths, name_mode)

    def __str__(self) -> str:
        return self.serialize()

    # ================================================================== #
    # Private                                                              #
    # ================================================================== #

    def _check_same_tree(self, other: "Node") -> None:
        if other.tree is not self.tree:
            raise ValueError("Nodes belong to different trees.")
