"""
conftest.py
===========
Session-level pytest configuration for the test suite.

Custom marks
------------
large_scale
    Applied to tests that build trees large or deep enough (tens of
    thousands of nodes) to take several seconds with the python backend.
    Run them alone with ``-m large_scale`` or skip them with
    ``-m "not large_scale"``.

    Registration here suppresses PytestUnknownMarkWarning and makes the mark
    visible in ``pytest --markers``.

Warning filters
---------------
NumbaPerformanceWarning messages are filtered out during tests. Warnings
about parallel loops that numba could not parallelise are expected with the
small leaf counts used in the tests and say nothing about correctness.
"""

import pytest
import warnings


def pytest_configure(config):
    """
    Configure pytest before test collection begins.

    This runs very early in the pytest lifecycle, before any test modules
    are imported, which is important for catching warnings from numba
    kernel compilation.
    """
    config.addinivalue_line(
        "markers",
        "large_scale: tests on very large or very deep trees "
        "(slow; select with -m large_scale)",
    )

    # Suppress NumbaPerformanceWarning during tests
    # This must happen early, before any kernels are compiled
    try:
        from numba.core.errors import NumbaPerformanceWarning
        warnings.filterwarnings('ignore', category=NumbaPerformanceWarning)
    except ImportError:
        # Numba not available, no warnings to suppress
        pass


def pytest_unconfigure(config):
    """
    Clean up after all tests complete.

    Restore default warning behavior.
    """
    warnings.resetwarnings()
