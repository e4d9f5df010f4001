"""Printer - reconstructs template markup from a parse tree.

Used to show the offending directive in compile errors.
"""

from __future__ import annotations

from typing import Iterable

from tmplc.ast.spec import EACH, IF, SUBSTITUTION, Node, ParseNode

# Directives whose children are closed by a {{/kind}} tag.
BLOCK_DIRECTIVES = frozenset({IF, EACH, "wrap"})


def render_parse_tree(node: ParseNode, block_directives: Iterable[str] = BLOCK_DIRECTIVES) -> str:
    """Render a parse node back to template markup.

    >>> render_parse_tree(Node("if", "x", ["a", Node("else"), "b"]))
    '{{if x}}a{{else}}b{{/if}}'
    """
    parts: list[str] = []
    _render(node, frozenset(block_directives), parts)
    return "".join(parts)


def _render(node: ParseNode, blocks: frozenset, parts: list[str]) -> None:
    if isinstance(node, str):
        parts.append(node)
        return

    if node.kind == SUBSTITUTION:
        parts.append("${" + node.content + "}")
        return

    parts.append("{{" + node.kind)
    if node.content:
        parts.append(" " + node.content)
    parts.append("}}")

    for child in node.children:
        _render(child, blocks, parts)

    if node.kind in blocks or node.children:
        parts.append("{{/" + node.kind + "}}")
