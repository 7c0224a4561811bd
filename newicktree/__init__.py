"""
newicktree
==========

Parsing, serialization and manipulation of phylogenetic trees in NEWICK
format: rerooting (on a node or at the midpoint), ancestry and patristic
distance queries, topology comparison, and node reordering/renaming.

Main Classes
------------
Tree : Rooted phylogenetic tree with NEWICK parsing and algorithms
Node : Handle onto one vertex of a Tree

Parsing
-------
parse_newick : Parse a NEWICK string into a Tree
Tokenizer, Token, TokenKind : Lazy NEWICK token stream

Errors
------
NewickParseError : Malformed NEWICK text
IncomparableTreesError : Topology comparison of trees with different taxa

Context Managers
----------------
quiet : Suppress logging during operations
suppress_logger : Suppress specific logger
use_backend : Force specific backend for leaf distance computations

Utilities
---------
jaccard_similarity : Compute Jaccard similarity between sets
format_newick : Format NEWICK strings consistently
strip_comments : Remove bracketed comments from NEWICK text

Backend Information
-------------------
get_available_backends : Backends that can compute leaf distances here
get_best_backend : The backend 'best' resolves to

Examples
--------
Basic usage:

>>> from newicktree import Tree
>>> tree = Tree("(A:0.65,(B:0.1,C:0.2)90:0.5);")
>>> tree.serialize(include_lengths=True, name_mode="none")
'(A:0.65,(B:0.1,C:0.2):0.5);'
>>> tree.reroot("A").taxa()
['A', 'B', 'C']

With context managers:

>>> from newicktree import quiet, use_backend
>>> with quiet():
...     tree = Tree(newick).midpoint_root()
>>> with use_backend('python'):
...     matrix = tree.distance_matrix()
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Main classes
from ._tree import Tree
from ._node import Node

# Parsing
from ._parser import parse_newick
from ._tokenizer import Token, TokenKind, Tokenizer

# Errors
from ._errors import NewickParseError, IncomparableTreesError

# Context managers (user-facing utilities)
from ._context import (
    suppress_logger,
    quiet,
    use_backend,
)

# Utilities (generally useful functions)
from ._utils import (
    jaccard_similarity,
    format_newick,
    strip_comments,
)

# Backend information (useful for checking capabilities)
from ._backend import (
    get_available_backends,
    get_best_backend,
)

# Public API
__all__ = [
    # Main classes
    "Tree",
    "Node",
    # Parsing
    "parse_newick",
    "Token",
    "TokenKind",
    "Tokenizer",
    # Errors
    "NewickParseError",
    "IncomparableTreesError",
    # Context managers
    "suppress_logger",
    "quiet",
    "use_backend",
    # Utilities
    "jaccard_similarity",
    "format_newick",
    "strip_comments",
    # Backend information
    "get_available_backends",
    "get_best_backend",
    # Version info
    "__version__",
]
