"""
_parser.py
==========
Builds a tree from a NEWICK token stream.

Grammar (token level)
---------------------
    tree := node ';'?
    node := '(' node (',' node)* ')' [LABEL] [WEIGHT]     internal
          | LABEL [WEIGHT]                                  leaf

This is a recursive-descent grammar.  The descent is run with an explicit
stack of open ``(`` groups instead of Python recursion, so the depth of a
caterpillar tree is not limited by the interpreter's recursion limit.  The
order in which nodes are created, named and attached is the same as the
recursive formulation: a group's node is created (and attached to its
parent) at ``(``, its children are attached left to right, and its label and
weight are read after the matching ``)``.

Public API
----------
  parse_newick(newick_string) -> Tree
  build_tree(tree, text) -> int      (used by the Tree constructor)
"""

from newicktree._errors import NewickParseError
from newicktree._logging import log_trailing_input
from newicktree._tokenizer import Token, TokenKind, Tokenizer

_OPEN = Token(TokenKind.SYMBOL, "(")
_CLOSE = Token(TokenKind.SYMBOL, ")")
_COMMA = Token(TokenKind.SYMBOL, ",")
_TERMINATOR = Token(TokenKind.SYMBOL, ";")


def parse_newick(newick_string: str):
    """
    Parse *newick_string* and return a ``Tree``.

    Equivalent to ``Tree(newick_string)``.

    Raises
    ------
    NewickParseError
        If the text is not valid NEWICK.
    """
    from newicktree._tree import Tree

    return Tree(newick_string)


def build_tree(tree, text: str) -> int:
    """
    Parse *text* (comments already stripped) into the node arena of *tree*.

    Parameters
    ----------
    tree : Tree
        Tree whose arena receives the nodes (via ``_allocate`` / ``_link``).
    text : str
        NEWICK text without ``[...]`` comments.

    Returns
    -------
    int
        Arena ID of the top node.

    Raises
    ------
    NewickParseError
        On any malformed input, including empty input.
    """
    tokenizer = Tokenizer(text)
    if tokenizer.peek() is None:
        raise NewickParseError("Empty NEWICK string")

    root_id = _parse_node(tree, tokenizer)

    trailing = tokenizer.peek()
    if trailing == _TERMINATOR:
        tokenizer.next_token()
        trailing = tokenizer.peek()
    if trailing is not None:
        log_trailing_input(tokenizer.pos, text[tokenizer.pos :].strip())

    return root_id


def _parse_node(tree, tokenizer: Tokenizer) -> int:
    """
    **Private.**  Parse one ``node`` production and return its arena ID.

    ``open_groups`` holds the IDs of internal nodes whose ``)`` has not been
    read yet; the innermost is last.
    """
    open_groups = []

    while True:
        token = tokenizer.next_token()

        if token == _OPEN:
            node_id = tree._allocate("", 0.0)
            if open_groups:
                tree._link(open_groups[-1], node_id)
            open_groups.append(node_id)
            continue

        if token is None or token.kind is not TokenKind.LABEL:
            raise NewickParseError(
                f"Expected '(' or label but found {_describe(token)}",
                position=tokenizer.pos,
                context=tokenizer.context_at(tokenizer.pos),
            )

        node_id = tree._allocate(token.text, _read_weight(tokenizer))
        if not open_groups:
            return node_id
        tree._link(open_groups[-1], node_id)

        # Close every group that ends here; stop at the next sibling.
        while True:
            if tokenizer.peek() == _COMMA:
                tokenizer.next_token()
                break

            token = tokenizer.next_token()
            if token != _CLOSE:
                raise NewickParseError(
                    f"Expected ')' but found {_describe(token)}",
                    position=tokenizer.pos,
                    context=tokenizer.context_at(tokenizer.pos),
                )

            node_id = open_groups.pop()
            _read_internal_suffix(tree, node_id, tokenizer)
            if not open_groups:
                return node_id


def _read_internal_suffix(tree, node_id: int, tokenizer: Tokenizer) -> None:
    """
    **Private.**  Read the optional label and weight after a ``)``.

    A following ``)``, ``,``, ``;`` or end of input leaves the node unnamed
    with length 0.
    """
    peek = tokenizer.peek()
    if peek is None or peek.kind is TokenKind.SYMBOL:
        return
    if peek.kind is TokenKind.WEIGHT:
        tree.edge_length[node_id] = _read_weight(tokenizer)
        return
    tokenizer.next_token()
    tree.names[node_id] = peek.text
    tree.edge_length[node_id] = _read_weight(tokenizer)


def _read_weight(tokenizer: Tokenizer) -> float:
    """
    **Private.**  Consume a WEIGHT token if one is next and return its value,
    otherwise return 0.0.
    """
    peek = tokenizer.peek()
    if peek is None or peek.kind is not TokenKind.WEIGHT:
        return 0.0
    tokenizer.next_token()
    try:
        return float(peek.text)
    except ValueError:
        raise NewickParseError(
            f"Illegal weight '{peek.text}'",
            position=tokenizer.pos - len(peek.text),
            context=tokenizer.context_at(tokenizer.pos),
        ) from None


def _describe(token) -> str:
    if token is None:
        return "end of input"
    return f"{token.kind.value} '{token.text}'"
