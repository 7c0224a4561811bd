"""
_utils.py
=========
General-purpose utility functions for newicktree.

These are standalone functions that don't depend on the main classes
and could be useful in multiple contexts.
"""

from typing import Set, Tuple, TypeVar


T = TypeVar('T')

ALIAS_PREFIX = "SEQ"
SHORT_ALIAS_WIDTH = 7


def jaccard_similarity(set_a: Set[T], set_b: Set[T]) -> float:
    """
    Compute Jaccard similarity coefficient between two sets.

    The Jaccard similarity is the size of the intersection divided by the
    size of the union of the two sets. It ranges from 0 (completely disjoint)
    to 1 (identical sets).

    Parameters
    ----------
    set_a, set_b : Set[T]
        Two sets to compare. Can contain any hashable type.

    Returns
    -------
    float
        Jaccard similarity in [0, 1].
        Returns 0.0 if both sets are empty (union size is 0).

    Examples
    --------
    >>> jaccard_similarity({('A', 'B'), ('C', 'D')}, {('A', 'B')})
    0.5

    >>> jaccard_similarity(set(), set())
    0.0

    Notes
    -----
    Used when logging the outcome of ``Tree.compare_topology``, where the
    sets hold clades (tuples of sorted taxon names).
    """
    intersection = len(set_a & set_b)
    union = len(set_a | set_b)
    return intersection / union if union > 0 else 0.0


def format_newick(newick: str) -> str:
    """
    Format a NEWICK string for consistent representation.

    Ensures the NEWICK string:
    - Ends with a semicolon
    - Has no leading/trailing whitespace

    Parameters
    ----------
    newick : str
        NEWICK string to format.

    Returns
    -------
    str
        Formatted NEWICK string.

    Examples
    --------
    >>> format_newick('((A:1,B:1):1,(C:1,D:1):1)')
    '((A:1,B:1):1,(C:1,D:1):1);'

    >>> format_newick('  ((A:1,B:1):1);  ')
    '((A:1,B:1):1);'
    """
    newick = newick.strip()
    if not newick.endswith(';'):
        newick += ';'
    return newick


def strip_comments(text: str) -> Tuple[str, int]:
    """
    Remove bracketed comment regions ``[...]`` from *text*.

    Comments do not nest: a region runs from ``[`` to the first following
    ``]``.  An opening ``[`` with no closing ``]`` is left in place.

    Returns
    -------
    (str, int)
        The stripped text and the number of comment regions removed.

    Examples
    --------
    >>> strip_comments('(A[&rate=1]:1,B);')
    ('(A:1,B);', 1)

    >>> strip_comments('(A,B)[unterminated;')
    ('(A,B)[unterminated;', 0)
    """
    out = []
    n_removed = 0
    i = 0
    n = len(text)
    while i < n:
        c = text[i]
        if c == "[":
            j = text.find("]", i + 1)
            if j == -1:
                out.append(text[i:])
                break
            n_removed += 1
            i = j + 1
            continue
        out.append(c)
        i += 1
    return "".join(out), n_removed


def leading_int(text: str) -> int:
    """
    Return the integer formed by the leading decimal digits of *text*
    (after optional whitespace and sign), or 0 when there are none.

    Mirrors how support values are recognised in internal node labels:
    ``'90'`` → 90, ``'95abc'`` → 95, ``'0.87'`` → 0, ``'A12'`` → 0.

    Examples
    --------
    >>> leading_int('90')
    90
    >>> leading_int('A12')
    0
    """
    s = text.lstrip()
    sign = 1
    if s[:1] in ("+", "-"):
        if s[0] == "-":
            sign = -1
        s = s[1:]
    j = 0
    while j < len(s) and s[j].isdigit():
        j += 1
    if j == 0:
        return 0
    return sign * int(s[:j])


def is_plain_integer(text: str) -> bool:
    """
    True if *text* is an optionally signed run of decimal digits.

    Internal node labels of this form are support values and are never
    aliased.

    Examples
    --------
    >>> is_plain_integer('100')
    True
    >>> is_plain_integer('SEQ1')
    False
    >>> is_plain_integer('\u00b2')
    False
    """
    s = text[1:] if text[:1] in ("+", "-") else text
    return s.isascii() and s.isdigit()


def alias_label(counter: int, width: int = SHORT_ALIAS_WIDTH) -> str:
    """
    Return the alias for *counter* as ``SEQ`` followed by the counter
    zero-padded to *width* digits.

    Counters that need more than *width* digits simply widen the label.

    Examples
    --------
    >>> alias_label(1)
    'SEQ0000001'
    >>> alias_label(0, width=3)
    'SEQ000'
    >>> alias_label(1000, width=3)
    'SEQ1000'
    """
    if counter < 0:
        raise ValueError(f"Alias counter must be non-negative, got {counter}.")
    return f"{ALIAS_PREFIX}{counter:0{width}d}"
