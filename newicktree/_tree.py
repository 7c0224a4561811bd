"""
_tree.py
========
A rooted phylogenetic tree stored as an arena of parallel arrays, with NEWICK
parsing/serialization and the whole-tree algorithms: rerooting (on a node or
at the midpoint), patristic distances, topology comparison, reordering and
renaming.

Public API
----------
  Tree(newick_string=None)
      Constructor.  Parses the NEWICK string (or starts from a lone unnamed
      root) and builds the node arena.
  Tree.from_file(path)

  .root, .n_nodes, .n_leaves, .nodes(), .leaves(), .internal_nodes()
  .new_node(name, edge_length), .copy()
  .serialize(include_lengths=True, name_mode='node'), .write(path, ...)
  .reorder(), .taxa(), .clades(), .find_node(pattern, exact=False)
  .unroot(), .reroot(target), .midpoint_root(backend='best')
  .most_distant_leaves(backend='best')
  .distance_matrix(backend='best'), .leaf_distance_array(backend='best')
  .compare_topology(other)
  .alias(sink=None, long=False), .un_alias(mapping), .re_alias(mapping)
  .relatives(taxon), .support_clades(), .add_support(clades), .fix_phylip()

Arena layout
------------
Every node ever allocated in the tree has an integer ID and a slot in:

  names       : list[str]            Node label; '' when unnamed.
  parent      : int32  [capacity]    Parent ID; -1 for the root / detached.
  edge_length : float64[capacity]    Length of the edge to the parent.
  child_ids   : list[list[int]]      Ordered child IDs per node.

``root_id`` is the ID of the current root.  Rerooting rewrites IDs in these
arrays; it never copies nodes.  A node dropped by ``unroot`` keeps its slot
but is unreachable from the root, and every traversal starts at the root, so
dead slots are invisible.  The numpy arrays grow by doubling.

Logging
-------
Module loggers are children of ``logging.getLogger('newicktree')``.  Parsing
summaries and unroot details go out at DEBUG, reroot/midpoint/compare/alias
summaries at INFO, ignored trailing input and backend fallbacks at WARNING.
"""

import logging
import os
from typing import Dict, List, Optional, Tuple

import numpy as np

from newicktree._backend import get_available_backends, get_best_backend, resolve_backend
from newicktree._cpu_kernels import _NUMBA_AVAILABLE, _leaf_distance_matrix_njit
from newicktree._context import get_backend_override, suppress_logger
from newicktree._errors import IncomparableTreesError
from newicktree._logging import (
    log_alias_summary,
    log_backend_availability,
    log_midpoint_root,
    log_parse_summary,
    log_renamed,
    log_reroot,
    log_topology_comparison,
    log_unroot,
)
from newicktree._node import Node
from newicktree._parser import build_tree
from newicktree._utils import (
    SHORT_ALIAS_WIDTH,
    alias_label,
    format_newick,
    is_plain_integer,
    jaccard_similarity,
    leading_int,
    strip_comments,
)

logger = logging.getLogger(__name__)

# Report which distance backends this interpreter can run.
log_backend_availability(get_available_backends(), _NUMBA_AVAILABLE)

_INITIAL_CAPACITY = 16
_LOGGING_MODULE = "newicktree._logging"
_NAME_MODES = ("node", "branch", "none")


class Tree:
    """
    A rooted phylogenetic tree with ordered children.

    Attributes
    ----------
    root_id     : int               Arena ID of the root.
    names       : list[str]         Node names by arena ID.
    parent      : int32 ndarray     Parent IDs by arena ID (-1 = none).
    edge_length : float64 ndarray   Edge lengths by arena ID.
    child_ids   : list[list[int]]   Ordered child IDs by arena ID.

    Examples
    --------
    >>> tree = Tree("(A:0.65,(B:0.1,C:0.2)90:0.5);")
    >>> tree.serialize(include_lengths=False)
    '(A,(B,C)90);'
    >>> tree.taxa()
    ['A', 'B', 'C']
    """

    # ================================================================== #
    # Construction                                                         #
    # ================================================================== #

    def __init__(self, newick_string: Optional[str] = None) -> None:
        """
        Parse *newick_string*, or create a tree holding a single unnamed root
        when it is None.

        Parameters
        ----------
        newick_string : str, optional
            NEWICK text.  ``[...]`` comments are removed before parsing; the
            trailing ';' is optional.

        Raises
        ------
        NewickParseError
            If the text is not valid NEWICK.
        """
        self._init_arena(_INITIAL_CAPACITY)

        if newick_string is None:
            self.root_id: int = self._allocate("", 0.0)
            return

        text, n_comments = strip_comments(newick_string)
        self.root_id = build_tree(self, text)
        log_parse_summary(len(newick_string), self.n_nodes, self.n_leaves, n_comments)

    @classmethod
    def from_file(cls, path) -> "Tree":
        """
        Read a NEWICK tree from *path*.  Lines are joined without their line
        breaks before parsing.
        """
        with open(path) as fh:
            text = "".join(line.rstrip("\r\n") for line in fh)
        logger.debug("Read %d characters from %s", len(text), path)
        return cls(text)

    def new_node(self, name: str = "", edge_length: float = 0.0) -> Node:
        """
        Allocate a detached node in this tree's arena.  Attach it with
        ``Node.add_child``.

        Examples
        --------
        >>> tree = Tree()
        >>> tree.root.add_child(tree.new_node("A", 1.0))
        >>> tree.root.add_child(tree.new_node("B", 2.0))
        >>> str(tree)
        '(A:1.0,B:2.0);'
        """
        return Node(self, self._allocate(str(name), float(edge_length)))

    def copy(self) -> "Tree":
        """Return an independent tree with the same arena contents."""
        clone = Tree.__new__(Tree)
        clone.names = list(self.names)
        clone.parent = self.parent.copy()
        clone.edge_length = self.edge_length.copy()
        clone.child_ids = [list(kids) for kids in self.child_ids]
        clone._n_allocated = self._n_allocated
        clone.root_id = self.root_id
        return clone

    __copy__ = copy

    # ================================================================== #
    # Accessors                                                            #
    # ================================================================== #

    @property
    def root(self) -> Node:
        return Node(self, self.root_id)

    @property
    def n_nodes(self) -> int:
        """Number of nodes reachable from the root."""
        return len(self._preorder_ids(self.root_id, include_start=True))

    @property
    def n_leaves(self) -> int:
        child_ids = self.child_ids
        return sum(
            1
            for i in self._preorder_ids(self.root_id, include_start=True)
            if not child_ids[i]
        )

    def nodes(self) -> List[Node]:
        """All nodes in preorder, root first."""
        return [Node(self, i) for i in self._preorder_ids(self.root_id, include_start=True)]

    def leaves(self) -> List[Node]:
        """Leaves in preorder."""
        return [Node(self, i) for i in self._leaf_ids()]

    def internal_nodes(self) -> List[Node]:
        """Non-leaf nodes below the root, in preorder."""
        return self.root.internal_nodes()

    def taxa(self, include_internal_names: bool = False) -> List[str]:
        """Sorted leaf names of the whole tree (see ``Node.taxa``)."""
        return self.root.taxa(include_internal_names)

    def find_node(self, pattern, exact: bool = False) -> Optional[Node]:
        """
        First node in preorder whose name contains *pattern* (or equals it
        when *exact*), or ``None``.  See ``Node.find``.
        """
        return self.root.find(pattern, exact=exact)

    def clades(self) -> List[List[str]]:
        """Sorted leaf-name list of every internal node below the root, in preorder."""
        return [node.taxa() for node in self.root.internal_nodes()]

    # ================================================================== #
    # Serialization                                                        #
    # ================================================================== #

    def serialize(self, include_lengths: bool = True, name_mode="node") -> str:
        """
        Return the NEWICK string for the tree, ending in ';'.

        Parameters
        ----------
        include_lengths : bool
            Append ``:<length>`` to nodes with a non-zero edge length.
        name_mode : {'node', 'branch', 'none'}
            Where internal node labels (usually support values) go:
            - 'node'   : written as the node's name after ``)``
            - 'branch' : not written as a name; a label that starts with a
                         positive integer is written as a second ``:<label>``
                         after the edge length instead
            - 'none'   : not written at all (``None``/``False`` also accepted)
            Leaves always carry their names.

        Examples
        --------
        >>> tree = Tree("(A:0.65,(B:0.1,C:0.2)90:0.5);")
        >>> tree.serialize(True, "none")
        '(A:0.65,(B:0.1,C:0.2):0.5);'
        >>> tree.serialize(True, "branch")
        '(A:0.65,(B:0.1,C:0.2):0.5:90);'
        """
        return self._serialize_from(self.root_id, include_lengths, name_mode) + ";"

    def __str__(self) -> str:
        return self.serialize()

    def __repr__(self) -> str:
        return f"Tree({self.serialize()!r})"

    def write(self, path, include_lengths: bool = True, name_mode="node") -> None:
        """Write the serialized tree to *path*, followed by a newline."""
        with open(path, "w") as fh:
            fh.write(format_newick(self.serialize(include_lengths, name_mode)) + "\n")
        logger.debug("Wrote tree to %s", path)

    # ================================================================== #
    # Reordering                                                           #
    # ================================================================== #

    def reorder(self) -> "Tree":
        """
        Sort children by name at every level, in place.

        Examples
        --------
        >>> str(Tree("(B,(A,D),C);").reorder())
        '((A,D),B,C);'
        """
        self.root.reorder_subtree()
        return self

    # ================================================================== #
    # Rooting                                                              #
    # ================================================================== #

    def unroot(self) -> "Tree":
        """
        Collapse a bifurcating root into a multifurcation.

        If the root has exactly two children A and B (B swapped with A when B
        is a leaf), B's edge length is added to A's, B's children move under
        the root, and B is dropped.  Any other root is left unchanged, as is
        a root whose two children are both leaves.
        """
        kids = self.child_ids[self.root_id]
        if len(kids) != 2:
            return self
        left, right = kids
        if not self.child_ids[right]:
            left, right = right, left
        if not self.child_ids[right]:
            logger.debug("Root has two leaf children; leaving it rooted")
            return self

        self.edge_length[left] += self.edge_length[right]
        moved = list(self.child_ids[right])
        for child in moved:
            self._unlink(right, child)
            self._link(self.root_id, child)
        self._unlink(self.root_id, right)
        log_unroot(self.names[right], len(moved), self.names[left])
        return self

    def reroot(self, target) -> "Tree":
        """
        Root the tree on the edge above *target*.

        The tree is unrooted first; then *target* is detached from its parent
        ``p``, the rest of the tree is re-oriented so that ``p`` is its top,
        the original edge length is split evenly between *target* and ``p``,
        and a new unnamed root with children ``[target, p]`` is installed.
        When *target* is already a child of a bifurcating root the tree is
        rooted on that edge; the root stays in place and only the split of
        the two root edges changes.

        Parameters
        ----------
        target : Node | str
            The node, or the exact name of a node.

        Raises
        ------
        KeyError     if *target* is a name not found in the tree.
        ValueError   if *target* is the root or belongs to another tree.
        """
        node = self._resolve_target(target)
        if node.id == self.root_id:
            raise ValueError("Cannot reroot on the current root.")

        root_kids = self.child_ids[self.root_id]
        if node.id in root_kids and len(root_kids) == 2:
            # Already rooted on this edge; only the split changes.
            other = root_kids[1] if root_kids[0] == node.id else root_kids[0]
            half = (self.edge_length[node.id] + self.edge_length[other]) / 2.0
            self.edge_length[node.id] = half
            self.edge_length[other] = half
            log_reroot(node.name, float(half), float(half))
            return self

        self.unroot()
        p = int(self.parent[node.id])
        self._unlink(p, node.id)
        Node(self, p).reverse_edge_direction()
        if self.edge_length[node.id] != 0:
            self.edge_length[p] = self.edge_length[node.id] / 2.0
            self.edge_length[node.id] = self.edge_length[p]
        self._install_root(node.id, p)
        log_reroot(node.name, float(self.edge_length[node.id]), float(self.edge_length[p]))
        return self

    def midpoint_root(self, backend: str = "best") -> "Tree":
        """
        Root the tree halfway along the path between its two most distant
        leaves.

        The tree is unrooted first.  When every leaf-to-leaf distance is 0
        (e.g. a star with zero lengths) nothing else changes.
        Otherwise the walk starts at whichever of the two leaves is farther
        from the root and climbs until the accumulated length reaches half
        the distance; the new root splits that edge so both leaves end up
        equally far from it.

        Parameters
        ----------
        backend : str
            Backend for the leaf distance computation (see
            ``distance_matrix``).
        """
        self.unroot()
        leaf_a, leaf_b, dist = self.most_distant_leaves(backend=backend)
        mid = dist / 2.0
        if mid == 0:
            log_midpoint_root(None, None, 0.0, 0.0, 0.0)
            return self

        root = self.root
        if leaf_a.distance_to_ancestor(root) > leaf_b.distance_to_ancestor(root):
            node_id = leaf_a.id
        else:
            node_id = leaf_b.id

        parent = self.parent
        traveled = 0.0
        while True:
            traveled += float(self.edge_length[node_id])
            up = int(parent[node_id])
            if traveled >= mid or int(parent[up]) == -1:
                break
            node_id = up

        root_kids = self.child_ids[self.root_id]
        if up == self.root_id and len(root_kids) == 2:
            # Two leaves under the root: move the split point along their path.
            other = root_kids[1] if root_kids[0] == node_id else root_kids[0]
            total = float(self.edge_length[node_id] + self.edge_length[other])
            lower = float(self.edge_length[node_id]) - max(traveled - mid, 0.0)
            self.edge_length[node_id] = lower
            self.edge_length[other] = total - lower
            log_midpoint_root(leaf_a.name, leaf_b.name, dist, lower, total - lower)
            return self

        old_length = float(self.edge_length[node_id])
        self._unlink(up, node_id)
        Node(self, up).reverse_edge_direction()
        # The midpoint lies traveled - mid below the top of this edge.
        self.edge_length[up] = max(traveled - mid, 0.0)
        self.edge_length[node_id] = old_length - self.edge_length[up]
        self._install_root(node_id, up)

        log_midpoint_root(
            leaf_a.name,
            leaf_b.name,
            dist,
            float(self.edge_length[node_id]),
            float(self.edge_length[up]),
        )
        return self

    # ================================================================== #
    # Distances                                                            #
    # ================================================================== #

    def most_distant_leaves(
        self, backend: str = "best"
    ) -> Tuple[Optional[Node], Optional[Node], float]:
        """
        Return ``(leaf_a, leaf_b, distance)`` for the pair of leaves with the
        greatest patristic distance.

        Pairs are considered in preorder × preorder order and the first pair
        reaching the maximum wins.  Returns ``(None, None, 0.0)`` when every
        distance is 0.

        Complexity
        ----------
        O(L² · depth) for L leaves.
        """
        leaf_ids = self._leaf_ids()
        dist = self._leaf_distances(leaf_ids, backend)
        if dist.size == 0 or dist.max() <= 0:
            return None, None, 0.0
        i, j = np.unravel_index(int(np.argmax(dist)), dist.shape)
        return Node(self, leaf_ids[i]), Node(self, leaf_ids[j]), float(dist[i, j])

    def leaf_distance_array(self, backend: str = "best") -> Tuple[List[str], np.ndarray]:
        """
        Pairwise patristic distances between all leaves.

        Returns
        -------
        (list[str], float64 ndarray [L, L])
            Leaf names in preorder and the symmetric distance matrix in the
            same order (zero diagonal).
        """
        leaf_ids = self._leaf_ids()
        return [self.names[i] for i in leaf_ids], self._leaf_distances(leaf_ids, backend)

    def distance_matrix(self, backend: str = "best") -> Dict[str, Dict[str, float]]:
        """
        Pairwise patristic distance between every pair of taxa.

        Returns
        -------
        dict[str, dict[str, float]]
            ``matrix[a][b]`` for taxon names *a*, *b* (keys in sorted order);
            0.0 when ``a == b``.

        Parameters
        ----------
        backend : str
            'python' (LCA walks over the node graph), 'cpu-parallel' (numba
            kernel) or 'best'.  An active ``use_backend()`` override wins.
        """
        names, dist = self.leaf_distance_array(backend)
        order = sorted(range(len(names)), key=names.__getitem__)
        matrix = {}
        for i in order:
            row = matrix.setdefault(names[i], {})
            for j in order:
                row[names[j]] = 0.0 if names[i] == names[j] else float(dist[i, j])
        return matrix

    # ================================================================== #
    # Comparison                                                           #
    # ================================================================== #

    def compare_topology(self, other: "Tree") -> Tuple[List[List[str]], List[List[str]]]:
        """
        Return the clades found in only one of the two trees.

        Both trees are copied and unrooted (the originals are untouched);
        clades are the sorted leaf-name lists of the internal nodes below the
        root and are compared by exact equality.  Internal node names
        (support values) play no part.

        Returns
        -------
        (list, list)
            Clades only in this tree, clades only in *other*.

        Raises
        ------
        IncomparableTreesError
            If the taxon lists of the two trees differ.
        """
        with suppress_logger(_LOGGING_MODULE):
            tree_a = self.copy().unroot()
            tree_b = other.copy().unroot()

        taxa_a = tree_a.taxa()
        taxa_b = tree_b.taxa()
        if taxa_a != taxa_b:
            raise IncomparableTreesError(
                set(taxa_a) - set(taxa_b), set(taxa_b) - set(taxa_a)
            )

        clades_a = tree_a.clades()
        clades_b = tree_b.clades()
        set_a = {tuple(c) for c in clades_a}
        set_b = {tuple(c) for c in clades_b}
        only_a = [c for c in clades_a if tuple(c) not in set_b]
        only_b = [c for c in clades_b if tuple(c) not in set_a]

        log_topology_comparison(
            len(clades_a),
            len(clades_b),
            len(only_a),
            len(only_b),
            jaccard_similarity(set_a, set_b),
        )
        return only_a, only_b

    # ================================================================== #
    # Renaming                                                             #
    # ================================================================== #

    def alias(self, sink=None, long: bool = False) -> Dict[str, str]:
        """
        Replace node names with sequential aliases ``SEQ0000001``,
        ``SEQ0000002``, ... in preorder.

        Nodes below the root whose name is non-empty and not a plain integer
        (support values are left alone) are renamed.

        Parameters
        ----------
        sink : str | os.PathLike | text stream, optional
            Where to write the alias table, one ``alias<TAB>original`` line
            per renamed node.
        long : bool
            Pad the counter to the length of the longest taxon name and start
            counting at 0, instead of 7 digits starting at 1.

        Returns
        -------
        dict[str, str]
            Mapping alias → original name.

        Examples
        --------
        >>> tree = Tree("((Apple,Pear),Grape);")
        >>> tree.alias()
        {'SEQ0000001': 'Apple', 'SEQ0000002': 'Pear', 'SEQ0000003': 'Grape'}
        >>> str(tree)
        '((SEQ0000001,SEQ0000002),SEQ0000003);'
        """
        if long:
            width = max((len(t) for t in self.taxa()), default=0)
            counter = 0
        else:
            width = SHORT_ALIAS_WIDTH
            counter = 1

        mapping = {}
        names = self.names
        for node_id in self._preorder_ids(self.root_id, include_start=False):
            name = names[node_id]
            if name == "" or is_plain_integer(name):
                continue
            label = alias_label(counter, width)
            mapping[label] = name
            names[node_id] = label
            counter += 1

        sink_name = None
        if sink is not None:
            lines = "".join(f"{label}\t{name}\n" for label, name in mapping.items())
            if isinstance(sink, (str, os.PathLike)):
                with open(sink, "w") as fh:
                    fh.write(lines)
                sink_name = os.fspath(sink)
            else:
                sink.write(lines)
                sink_name = getattr(sink, "name", type(sink).__name__)

        log_alias_summary(len(mapping), width, sink_name)
        return mapping

    def un_alias(self, mapping: Dict[str, str]) -> "Tree":
        """
        Rename nodes below the root whose name is a key of *mapping* to the
        mapped value.  Other names are untouched.
        """
        names = self.names
        visited = self._preorder_ids(self.root_id, include_start=False)
        n_renamed = 0
        for node_id in visited:
            new = mapping.get(names[node_id])
            if new is not None:
                names[node_id] = new
                n_renamed += 1
        log_renamed("un_alias", n_renamed, len(visited))
        return self

    def re_alias(self, mapping: Dict[str, str]) -> "Tree":
        """
        Inverse of ``un_alias``: rename nodes whose name is a value of
        *mapping* to the corresponding key (the last key wins when several
        share a value).
        """
        inverse = {}
        for key, value in mapping.items():
            inverse[value] = key
        names = self.names
        visited = self._preorder_ids(self.root_id, include_start=False)
        n_renamed = 0
        for node_id in visited:
            new = inverse.get(names[node_id])
            if new is not None:
                names[node_id] = new
                n_renamed += 1
        log_renamed("re_alias", n_renamed, len(visited))
        return self

    # ================================================================== #
    # Support values and relatives                                         #
    # ================================================================== #

    def relatives(self, taxon) -> Optional[List[List[str]]]:
        """
        For the first node matching *taxon* (see ``find_node``), the taxa
        gained at each step up towards the root: one list per ancestor,
        holding the ancestor's taxa that are not below the previous node.

        Returns ``None`` when no node matches.

        Examples
        --------
        >>> Tree("((A,B),(C,D));").relatives("A")
        [['B'], ['C', 'D']]
        """
        node = self.find_node(taxon)
        if node is None:
            return None
        out = []
        while node.parent is not None:
            below = set(node.taxa())
            out.append([t for t in node.parent.taxa() if t not in below])
            node = node.parent
        return out

    def support_clades(self) -> List[Tuple[str, List[str]]]:
        """``(name, taxa)`` for every internal node below the root, in preorder."""
        return [(node.name, node.taxa()) for node in self.root.internal_nodes()]

    def add_support(self, clades) -> "Tree":
        """
        Name internal nodes after matching clades.

        Parameters
        ----------
        clades : iterable of (support, taxa)
            An internal node whose sorted taxa equal ``sorted(taxa)`` is
            renamed ``str(support)``; the last matching entry wins.
        """
        entries = [(str(support), sorted(taxa)) for support, taxa in clades]
        for node in self.root.internal_nodes():
            node_taxa = node.taxa()
            for support, taxa in entries:
                if taxa == node_taxa:
                    node.name = support
        return self

    def fix_phylip(self) -> "Tree":
        """
        Move support values that were written as branch lengths into node
        names.

        Every node below the root loses its edge length; an internal node
        whose length truncates to a positive integer is named after it.
        """
        names = self.names
        for node_id in self._preorder_ids(self.root_id, include_start=False):
            br = int(self.edge_length[node_id])
            self.edge_length[node_id] = 0.0
            if br > 0 and self.child_ids[node_id]:
                names[node_id] = str(br)
        return self

    # ================================================================== #
    # Private instance methods                                             #
    # ================================================================== #

    def _init_arena(self, capacity: int) -> None:
        """**Private.**  Allocate empty arena arrays with room for *capacity* nodes."""
        self.names: List[str] = []
        self.parent = np.full(capacity, -1, dtype=np.int32)
        self.edge_length = np.zeros(capacity, dtype=np.float64)
        self.child_ids: List[List[int]] = []
        self._n_allocated = 0

    def _allocate(self, name: str, edge_length: float) -> int:
        """**Private.**  Create a detached node and return its ID."""
        node_id = self._n_allocated
        if node_id == self.parent.shape[0]:
            capacity = 2 * node_id
            parent = np.full(capacity, -1, dtype=np.int32)
            parent[:node_id] = self.parent
            lengths = np.zeros(capacity, dtype=np.float64)
            lengths[:node_id] = self.edge_length
            self.parent = parent
            self.edge_length = lengths
        self.names.append(name)
        self.child_ids.append([])
        self.edge_length[node_id] = edge_length
        self._n_allocated += 1
        return node_id

    def _link(self, parent_id: int, child_id: int) -> None:
        """**Private.**  Append *child_id* to *parent_id*'s children."""
        self.child_ids[parent_id].append(child_id)
        self.parent[child_id] = parent_id

    def _unlink(self, parent_id: int, child_id: int) -> None:
        """**Private.**  Remove *child_id* from *parent_id*'s children."""
        self.child_ids[parent_id].remove(child_id)
        self.parent[child_id] = -1

    def _install_root(self, left_id: int, right_id: int) -> None:
        """**Private.**  Make a new unnamed root with children [left, right]."""
        new_root = self._allocate("", 0.0)
        self._link(new_root, left_id)
        self._link(new_root, right_id)
        self.root_id = new_root

    def _resolve_target(self, target) -> Node:
        """
        **Private.**  Return the Node for *target* (a Node of this tree or an
        exact node name).

        Raises
        ------
        KeyError     if a name is not found.
        ValueError   if a Node belongs to another tree.
        """
        if isinstance(target, Node):
            if target.tree is not self:
                raise ValueError("Node belongs to a different tree.")
            return target
        node = self.find_node(str(target), exact=True)
        if node is None:
            raise KeyError(f"No node with name '{target}' found in tree.")
        return node

    def _preorder_ids(self, start: int, include_start: bool) -> List[int]:
        """
        **Private.**  IDs of the subtree at *start* in preorder (children left
        to right), via an explicit stack.
        """
        child_ids = self.child_ids
        out = []
        if include_start:
            out.append(start)
        stack = list(reversed(child_ids[start]))
        while stack:
            node_id = stack.pop()
            out.append(node_id)
            kids = child_ids[node_id]
            if kids:
                stack.extend(reversed(kids))
        return out

    def _leaf_ids(self) -> List[int]:
        """**Private.**  Leaf IDs in preorder."""
        child_ids = self.child_ids
        return [
            i
            for i in self._preorder_ids(self.root_id, include_start=True)
            if not child_ids[i]
        ]

    def _depth_array(self) -> np.ndarray:
        """**Private.**  Edge count from the root for every reachable node."""
        depth = np.zeros(self._n_allocated, dtype=np.int32)
        parent = self.parent
        for node_id in self._preorder_ids(self.root_id, include_start=False):
            depth[node_id] = depth[parent[node_id]] + 1
        return depth

    def _lca_id(self, a: int, b: int) -> int:
        """
        **Private.**  Lowest common ancestor of *a* and *b* (either may be the
        answer).

        Raises
        ------
        ValueError   if the two nodes have no common ancestor.
        """
        parent = self.parent
        above_b = {b}
        p = int(parent[b])
        while p != -1:
            above_b.add(p)
            p = int(parent[p])
        node_id = a
        while node_id != -1:
            if node_id in above_b:
                return node_id
            node_id = int(parent[node_id])
        raise ValueError(f"Nodes {a} and {b} are not in one connected tree.")

    def _distance_to_ancestor_id(self, node_id: int, ancestor_id: int) -> float:
        """
        **Private.**  Sum of edge lengths from *node_id* up to *ancestor_id*.

        Raises
        ------
        ValueError   if *ancestor_id* is not on the path to the top.
        """
        parent = self.parent
        lengths = self.edge_length
        dist = 0.0
        start = node_id
        while node_id != ancestor_id:
            if node_id == -1:
                raise ValueError(f"Node {ancestor_id} is not an ancestor of node {start}.")
            dist += float(lengths[node_id])
            node_id = int(parent[node_id])
        return dist

    def _leaf_distances(self, leaf_ids: List[int], backend: str) -> np.ndarray:
        """
        **Private.**  Symmetric [L, L] patristic distance matrix for *leaf_ids*.

        The 'python' backend evaluates each unordered pair once through the
        LCA and mirrors it; 'cpu-parallel' runs the numba kernel on the arena
        arrays.  Both sum each leg bottom-up, so results are identical.
        """
        backend_override = get_backend_override()
        if backend_override is not None:
            backend = backend_override

        try:
            resolved = resolve_backend(backend)
        except ValueError as e:
            logger.warning(str(e))
            resolved = get_best_backend()

        n = len(leaf_ids)
        logger.debug(f"leaf distances ({n} leaves, backend={resolved!r})")

        if resolved == "cpu-parallel" and n > 1:
            return _leaf_distance_matrix_njit(
                np.asarray(leaf_ids, dtype=np.int32),
                self.parent[: self._n_allocated],
                self.edge_length[: self._n_allocated],
                self._depth_array(),
            )

        dist = np.zeros((n, n), dtype=np.float64)
        for i in range(n):
            a = leaf_ids[i]
            for j in range(i + 1, n):
                b = leaf_ids[j]
                lca = self._lca_id(a, b)
                d = self._distance_to_ancestor_id(a, lca) + self._distance_to_ancestor_id(
                    b, lca
                )
                dist[i, j] = d
                dist[j, i] = d
        return dist

    def _serialize_from(self, start: int, include_lengths: bool, name_mode) -> str:
        """
        **Private.**  NEWICK text for the subtree at *start* (no ';').

        Phase-coded stack: an entry ``(node, k)`` means "children 0..k-1 are
        written"; it emits ``(`` or ``,`` before child k, and ``)`` plus the
        node's label and length once all children are written.
        """
        if name_mode is None or name_mode is False:
            name_mode = "none"
        if name_mode not in _NAME_MODES:
            raise ValueError(
                f"name_mode must be one of {', '.join(_NAME_MODES)}; got {name_mode!r}."
            )

        names = self.names
        lengths = self.edge_length
        child_ids = self.child_ids
        parts = []
        stack = [(start, 0)]
        while stack:
            node_id, k = stack.pop()
            kids = child_ids[node_id]
            if k < len(kids):
                parts.append("(" if k == 0 else ",")
                stack.append((node_id, k + 1))
                stack.append((kids[k], 0))
                continue

            name = names[node_id]
            if kids:
                parts.append(")")
            if not kids or name_mode == "node":
                parts.append(name)
            length = float(lengths[node_id])
            if include_lengths and length != 0:
                parts.append(f":{length!r}")
            if kids and name_mode == "branch" and leading_int(name) > 0:
                parts.append(f":{name}")
        return "".join(parts)
