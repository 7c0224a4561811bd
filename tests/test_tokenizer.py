"""
tests/test_tokenizer.py
=======================
Pytest test suite for the NEWICK tokenizer.

Covers the scanning rules in priority order (whitespace, symbols, weights,
quoted labels, bare labels), one-token lookahead via ``peek``, and the
error cases that must raise ``NewickParseError``.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from newicktree._errors import NewickParseError
from newicktree._tokenizer import Token, TokenKind, Tokenizer


def texts(s):
    return [t.text for t in Tokenizer(s)]


def kinds(s):
    return [t.kind for t in Tokenizer(s)]


# ======================================================================== #
# Basic token stream                                                        #
# ======================================================================== #


class TestTokenStream:
    def test_simple_tree(self):
        assert texts("(A:0.5,'B c');") == ["(", "A", "0.5", ",", "'B c'", ")", ";"]

    def test_kinds(self):
        assert kinds("(A:0.5,B)90;") == [
            TokenKind.SYMBOL,
            TokenKind.LABEL,
            TokenKind.WEIGHT,
            TokenKind.SYMBOL,
            TokenKind.LABEL,
            TokenKind.SYMBOL,
            TokenKind.LABEL,
            TokenKind.SYMBOL,
        ]

    def test_tokens_are_named_tuples(self):
        token = Tokenizer("(").next_token()
        assert token == Token(TokenKind.SYMBOL, "(")
        assert token.kind is TokenKind.SYMBOL
        assert token.text == "("

    def test_empty_input_yields_nothing(self):
        assert Tokenizer("").next_token() is None
        assert list(Tokenizer("")) == []

    def test_whitespace_only_yields_nothing(self):
        assert list(Tokenizer(" \n\r\t ")) == []

    def test_exhausted_stream_stays_exhausted(self):
        tok = Tokenizer("A")
        assert tok.next_token() == Token(TokenKind.LABEL, "A")
        assert tok.next_token() is None
        assert tok.next_token() is None


# ======================================================================== #
# Rules                                                                     #
# ======================================================================== #


class TestRules:
    def test_whitespace_between_tokens_is_skipped(self):
        assert texts("( A , B )") == ["(", "A", ",", "B", ")"]

    def test_bare_label_stops_at_boundaries(self):
        assert texts("Homo_sapiens:1,Pan(") == ["Homo_sapiens", "1", ",", "Pan", "("]

    def test_bare_label_keeps_inner_spaces(self):
        assert texts("(Homo sapiens,B)") == ["(", "Homo sapiens", ",", "B", ")"]

    @pytest.mark.parametrize(
        "literal",
        ["1", "0.65", "1e-3", "2.5E+10", "-0.1", ".5"],
    )
    def test_weight_literals(self, literal):
        tokens = list(Tokenizer(f"A:{literal}"))
        assert tokens[1] == Token(TokenKind.WEIGHT, literal)

    def test_weight_drops_colon(self):
        tokens = list(Tokenizer(":0.25"))
        assert tokens == [Token(TokenKind.WEIGHT, "0.25")]

    def test_quoted_label_keeps_quotes_and_specials(self):
        assert texts("('a,(b):c',D)") == ["(", "'a,(b):c'", ",", "D", ")"]

    def test_quoted_label_ends_at_first_quote(self):
        assert texts("'ab''cd'") == ["'ab'", "'cd'"]

    def test_semicolon_is_a_symbol(self):
        assert list(Tokenizer(";")) == [Token(TokenKind.SYMBOL, ";")]


# ======================================================================== #
# Lookahead                                                                 #
# ======================================================================== #


class TestPeek:
    def test_peek_does_not_consume(self):
        tok = Tokenizer("(A)")
        first = tok.peek()
        assert first == Token(TokenKind.SYMBOL, "(")
        assert tok.peek() == first
        assert tok.pos == 0
        assert tok.next_token() == first
        assert tok.peek() == Token(TokenKind.LABEL, "A")

    def test_peek_at_end(self):
        tok = Tokenizer("A")
        tok.next_token()
        assert tok.peek() is None

    def test_peek_restores_position_after_error(self):
        tok = Tokenizer("A:")
        tok.next_token()
        pos = tok.pos
        with pytest.raises(NewickParseError):
            tok.peek()
        assert tok.pos == pos


# ======================================================================== #
# Errors                                                                    #
# ======================================================================== #


class TestErrors:
    def test_colon_without_weight(self):
        with pytest.raises(NewickParseError, match="Illegal weight") as exc:
            list(Tokenizer("(A:,B)"))
        assert exc.value.position == 3
        assert "(A:,B)" in exc.value.context

    def test_colon_at_end_of_input(self):
        with pytest.raises(NewickParseError, match="Illegal weight"):
            list(Tokenizer("(A,B):"))

    def test_unterminated_quote(self):
        with pytest.raises(NewickParseError, match="Unterminated quoted label") as exc:
            list(Tokenizer("(A,'B"))
        assert exc.value.position == 3

    def test_error_message_includes_position(self):
        with pytest.raises(NewickParseError, match="at position 3"):
            list(Tokenizer("(A:,B)"))

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            list(Tokenizer("'open"))

    def test_context_is_window_around_position(self):
        text = "x" * 40 + "'" + "y" * 40
        tok = Tokenizer(text)
        assert tok.context_at(40) == text[25:55]
