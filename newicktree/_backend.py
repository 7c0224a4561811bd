"""
_backend.py
===========
Which implementation computes leaf-to-leaf distances.

Two backends exist for ``Tree._leaf_distances`` (and so for
``distance_matrix``, ``most_distant_leaves`` and ``midpoint_root``):

  'python'        LCA walk per leaf pair in plain Python.  Always present.
  'cpu-parallel'  ``_cpu_kernels._leaf_distance_matrix_njit`` compiled by
                  numba with a ``prange`` over rows.  Present only when numba
                  imported successfully in ``_cpu_kernels``.

'best' names whichever of these is fastest on this machine.  Nothing here
logs; callers decide what to report.
"""

from typing import List

from newicktree._cpu_kernels import _NUMBA_AVAILABLE

PYTHON = "python"
CPU_PARALLEL = "cpu-parallel"
BEST = "best"


def get_available_backends() -> List[str]:
    """Backends usable in this interpreter, slowest first."""
    if _NUMBA_AVAILABLE:
        return [PYTHON, CPU_PARALLEL]
    return [PYTHON]


def get_best_backend() -> str:
    return CPU_PARALLEL if _NUMBA_AVAILABLE else PYTHON


def resolve_backend(backend: str) -> str:
    """
    Map a requested backend name onto one that can actually run.

    Parameters
    ----------
    backend : str
        'best', 'python' or 'cpu-parallel'.

    Raises
    ------
    ValueError
        If *backend* is unknown or needs numba and numba is missing.
    """
    if backend == BEST:
        return get_best_backend()
    available = get_available_backends()
    if backend not in available:
        raise ValueError(
            f"Backend '{backend}' not available for leaf distances "
            f"(have: {', '.join(available)})"
        )
    return backend
