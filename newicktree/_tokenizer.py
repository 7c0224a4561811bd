"""
_tokenizer.py
=============
Splits NEWICK text into a lazy stream of typed tokens.

Token kinds
-----------
  SYMBOL   one of ``(``, ``)``, ``,`` or the statement terminator ``;``
  WEIGHT   numeric literal following ``:`` (the ``:`` itself is dropped)
  LABEL    quoted (``'...'``, quotes kept) or bare node name

Scanning is an explicit character-classification state machine: every
decision is a comparison against a small set of characters, so the loop
translates directly to C/Cython if that is ever needed.

Bracketed comments ``[...]`` must be removed before tokenizing (see
``newicktree._utils.strip_comments``).
"""

from enum import Enum
from typing import NamedTuple, Optional

from newicktree._errors import NewickParseError


class TokenKind(Enum):
    SYMBOL = "symbol"
    WEIGHT = "weight"
    LABEL = "label"


class Token(NamedTuple):
    kind: TokenKind
    text: str


# Characters of surrounding text quoted in parse error messages.
_CONTEXT_RADIUS = 15


def _is_whitespace(c: str) -> bool:
    return c == " " or c == "\t" or c == "\n" or c == "\r"


def _is_symbol(c: str) -> bool:
    return c == "(" or c == ")" or c == "," or c == ";"


def _is_weight_char(c: str) -> bool:
    return ("0" <= c <= "9") or c == "." or c == "-" or c == "+" or c == "e" or c == "E"


def _is_label_boundary(c: str) -> bool:
    return c == "," or c == "(" or c == ")" or c == ":" or c == ";"


class Tokenizer:
    """
    Forward-only token stream over a NEWICK string with one token of
    lookahead.

    ``next_token()`` consumes and returns the next token, or ``None`` once the
    input is exhausted.  ``peek()`` returns the same token without consuming
    it.  Instances are also iterators.

    Examples
    --------
    >>> [t.text for t in Tokenizer("(A:0.5,'B c');")]
    ['(', 'A', '0.5', ',', "'B c'", ')', ';']
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def __iter__(self):
        return self

    def __next__(self) -> Token:
        token = self.next_token()
        if token is None:
            raise StopIteration
        return token

    def peek(self) -> Optional[Token]:
        """Return the next token without advancing the scan position."""
        saved = self.pos
        try:
            return self.next_token()
        finally:
            self.pos = saved

    def next_token(self) -> Optional[Token]:
        """Consume and return the next token, or ``None`` at end of input."""
        s = self.text
        n = len(s)
        i = self.pos

        while i < n and _is_whitespace(s[i]):
            i += 1
        if i >= n:
            self.pos = n
            return None

        c = s[i]

        if _is_symbol(c):
            self.pos = i + 1
            return Token(TokenKind.SYMBOL, c)

        if c == ":":
            j = i + 1
            while j < n and _is_weight_char(s[j]):
                j += 1
            if j == i + 1:
                raise NewickParseError(
                    "Illegal weight", position=i + 1, context=self.context_at(i)
                )
            self.pos = j
            return Token(TokenKind.WEIGHT, s[i + 1 : j])

        if c == "'":
            j = s.find("'", i + 1)
            if j == -1:
                raise NewickParseError(
                    "Unterminated quoted label", position=i, context=self.context_at(i)
                )
            self.pos = j + 1
            return Token(TokenKind.LABEL, s[i : j + 1])

        j = i
        while j < n and not _is_label_boundary(s[j]):
            j += 1
        self.pos = j
        return Token(TokenKind.LABEL, s[i:j].rstrip(" \t\r\n"))

    def context_at(self, i: int) -> str:
        """Return the text within a few characters of position *i*."""
        lo = max(0, i - _CONTEXT_RADIUS)
        hi = min(len(self.text), i + _CONTEXT_RADIUS)
        return self.text[lo:hi]
