"""
_context.py
===========
Scoped changes to newicktree's global state.

Two pieces of state can be changed for the length of a ``with`` block:

  logger levels      ``suppress_logger`` for one named logger, ``quiet`` for
                     the whole 'newicktree' hierarchy.
  distance backend   ``use_backend`` overrides the ``backend=`` argument of
                     ``Tree.distance_matrix``, ``most_distant_leaves``,
                     ``leaf_distance_array`` and ``midpoint_root``.

The previous value is put back in a ``finally`` clause, so an exception in
the block never leaves the state changed.
"""

import logging
from contextlib import contextmanager
from typing import Optional

from newicktree._backend import resolve_backend

_PACKAGE_LOGGER = "newicktree"

# Set only by use_backend(); read by Tree._leaf_distances.
_backend_override: Optional[str] = None


@contextmanager
def suppress_logger(logger_name: str, level: int = logging.CRITICAL):
    """
    Raise *logger_name*'s threshold to *level* inside the block.

    ``Tree.compare_topology`` uses this on 'newicktree._logging' so that
    unrooting its working copies is not reported.

    Examples
    --------
    >>> with suppress_logger('newicktree._tree'):
    ...     tree.unroot()
    """
    target = logging.getLogger(logger_name)
    saved = target.level
    target.setLevel(level)
    try:
        yield
    finally:
        target.setLevel(saved)


@contextmanager
def quiet(level: int = logging.CRITICAL):
    """
    Silence newicktree below *level*.

    Module loggers all hang off 'newicktree', so one level change covers
    parsing, rerooting, comparison and renaming.

    >>> with quiet(logging.WARNING):   # keep trailing-input warnings
    ...     tree = Tree(text).midpoint_root()
    """
    with suppress_logger(_PACKAGE_LOGGER, level):
        yield


@contextmanager
def use_backend(backend: str):
    """
    Compute leaf distances with *backend* inside the block.

    Parameters
    ----------
    backend : str
        'python', 'cpu-parallel' or 'best'.

    Raises
    ------
    ValueError
        On entry, if *backend* cannot run here (e.g. 'cpu-parallel'
        without numba).

    Notes
    -----
    The override is module state, so it is shared between threads.
    Nested blocks restore the enclosing override on exit.
    """
    global _backend_override

    resolve_backend(backend)
    saved = _backend_override
    _backend_override = backend
    try:
        yield
    finally:
        _backend_override = saved


def get_backend_override() -> Optional[str]:
    """The backend forced by the innermost ``use_backend`` block, or None."""
    return _backend_override
