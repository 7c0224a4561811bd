"""
_errors.py
==========
Exception types raised by newicktree.

Both classes derive from ``ValueError`` so callers that already guard NEWICK
handling with ``except ValueError`` keep working.
"""

from typing import Optional


class NewickParseError(ValueError):
    """
    Raised when NEWICK text cannot be tokenized or parsed.

    Attributes
    ----------
    message  : str            What went wrong.
    position : int | None     Scan position (0-based) where it was detected.
    context  : str | None     Text surrounding the position, for diagnostics.
    """

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        context: Optional[str] = None,
    ):
        self.message = message
        self.position = position
        self.context = context
        super().__init__(self.formatted())

    def formatted(self) -> str:
        msg = self.message
        if self.position is not None:
            msg += f" at position {self.position}"
        if self.context:
            msg += f" (near '{self.context}')"
        return msg


class IncomparableTreesError(ValueError):
    """
    Raised by ``Tree.compare_topology`` when the two trees do not share the
    same taxon list, which makes a clade-by-clade comparison meaningless.
    """

    def __init__(self, only_in_self, only_in_other):
        self.only_in_self = sorted(only_in_self)
        self.only_in_other = sorted(only_in_other)
        super().__init__(
            "The trees have different taxa: "
            f"{len(self.only_in_self)} only in the first tree, "
            f"{len(self.only_in_other)} only in the second."
        )
