"""
_logging.py
===========
Logging functions for newicktree.

All functions in this module have NO side effects except logging. They take
computed data as parameters and format/emit log messages.

This separation ensures:
- Logging can be easily disabled/mocked in tests
- Computation is separate from presentation
- Clear boundaries between tree algorithms and reporting

Every logger in the package is a child of ``logging.getLogger('newicktree')``,
so the whole package can be silenced in one place (see ``quiet()``).
"""

import logging
from typing import List, Optional


logger = logging.getLogger(__name__)


# ============================================================================ #
# System and Backend Logging (called at module import time)
# ============================================================================ #


def log_backend_availability(
    backends_available: List[str], numba_available: bool
) -> None:
    """
    Log which execution backends are available for leaf distance matrices.

    Parameters
    ----------
    backends_available : List[str]
        List of available backends (e.g., ['python', 'cpu-parallel'])
    numba_available : bool
        Whether numba was successfully imported.
    """
    logger.debug(f"Available backends: {', '.join(backends_available)}")

    if "cpu-parallel" in backends_available:
        logger.debug("  cpu-parallel: LLVM-compiled parallel code (numba.njit + prange)")
    elif not numba_available:
        logger.debug("  cpu-parallel: unavailable (install numba for ~10-100x speedup)")

    if "python" in backends_available:
        logger.debug("  python: LCA walks over the node graph (reference implementation)")

    best = backends_available[-1]  # Last in list is most optimized
    logger.debug(f"Default backend='best' will use: {best}")


# ============================================================================ #
# Parsing
# ============================================================================ #


def log_parse_summary(
    n_chars: int, n_nodes: int, n_leaves: int, n_comments: int
) -> None:
    """
    Log the outcome of parsing one NEWICK string.

    Parameters
    ----------
    n_chars : int
        Length of the input text (before comment stripping).
    n_nodes : int
        Number of nodes in the parsed tree.
    n_leaves : int
        Number of leaves in the parsed tree.
    n_comments : int
        Number of ``[...]`` comment regions removed before tokenizing.
    """
    logger.debug(
        "Parsed %d characters into %d nodes (%d leaves)", n_chars, n_nodes, n_leaves
    )
    if n_comments > 0:
        logger.debug("  Stripped %d bracketed comment(s)", n_comments)


def log_trailing_input(position: int, remainder: str) -> None:
    """
    Warn that text after the end of the tree was ignored.

    Parameters
    ----------
    position : int
        Scan position where the ignored text starts.
    remainder : str
        The ignored text (truncated for display).
    """
    if len(remainder) > 30:
        remainder = remainder[:27] + "..."
    logger.warning(
        "Ignoring trailing input after the tree at position %d: '%s'",
        position,
        remainder,
    )


# ============================================================================ #
# Rooting
# ============================================================================ #


def log_unroot(merged_name: str, n_moved: int, kept_name: str) -> None:
    """
    Log that a bifurcating root was collapsed into a multifurcation.

    Parameters
    ----------
    merged_name : str
        Name of the root child that was merged away ('' when unnamed).
    n_moved : int
        Number of its children re-attached directly to the root.
    kept_name : str
        Name of the root child that absorbed the merged edge length.
    """
    logger.debug(
        "Unrooted: merged root child %r (%d children moved to root) into edge of %r",
        merged_name,
        n_moved,
        kept_name,
    )


def log_reroot(target_name: str, target_length: float, other_length: float) -> None:
    """
    Log a reroot on a node.

    Parameters
    ----------
    target_name : str
        Name of the node the tree was rooted on ('' when unnamed).
    target_length, other_length : float
        Edge lengths assigned to the two children of the new root.
    """
    logger.info(
        "Rerooted on %r (root edges %g / %g)", target_name, target_length, other_length
    )


def log_midpoint_root(
    name_a: Optional[str],
    name_b: Optional[str],
    distance: float,
    lower_length: float,
    upper_length: float,
) -> None:
    """
    Log the outcome of midpoint rooting.

    Parameters
    ----------
    name_a, name_b : str or None
        The most distant pair of leaves (None when every distance is 0).
    distance : float
        Patristic distance between them.
    lower_length, upper_length : float
        Edge lengths assigned to the two children of the new root.
    """
    if name_a is None or distance == 0:
        logger.info("Midpoint rooting skipped: all leaf distances are 0")
        return
    logger.info(
        "Midpoint rooted between %r and %r (distance %g; root edges %g / %g)",
        name_a,
        name_b,
        distance,
        lower_length,
        upper_length,
    )


# ============================================================================ #
# Comparison and renaming
# ============================================================================ #


def log_topology_comparison(
    n_clades_a: int,
    n_clades_b: int,
    n_only_a: int,
    n_only_b: int,
    similarity: float,
) -> None:
    """
    Log the summary of a clade-by-clade topology comparison.

    Parameters
    ----------
    n_clades_a, n_clades_b : int
        Number of clades in each (unrooted) tree.
    n_only_a, n_only_b : int
        Number of clades found in only one of the trees.
    similarity : float
        Jaccard similarity of the two clade sets.
    """
    logger.info(
        "Compared topologies: %d vs %d clades, %d only in first, %d only in second",
        n_clades_a,
        n_clades_b,
        n_only_a,
        n_only_b,
    )
    logger.info(f"  Clade-set Jaccard similarity: {similarity:.3f}")


def log_alias_summary(n_aliased: int, width: int, sink_name: Optional[str]) -> None:
    """
    Log how many nodes were aliased.

    Parameters
    ----------
    n_aliased : int
        Number of nodes renamed.
    width : int
        Digit width of the generated aliases.
    sink_name : str or None
        Where the alias table was written, if anywhere.
    """
    logger.info("Aliased %d node name(s) (alias width %d)", n_aliased, width)
    if sink_name is not None:
        logger.info("  Alias table written to %s", sink_name)


def log_renamed(operation: str, n_renamed: int, n_nodes: int) -> None:
    """
    Log the outcome of ``un_alias`` / ``re_alias``.

    Parameters
    ----------
    operation : str
        Name of the renaming operation.
    n_renamed : int
        Number of nodes whose name changed.
    n_nodes : int
        Number of nodes visited.
    """
    logger.debug("%s: renamed %d of %d node(s)", operation, n_renamed, n_nodes)
