from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Union

from tmplc.exceptions import ParseTreeError


SUBSTITUTION = "="
IF = "if"
ELSE = "else"
EACH = "each"
TMPL = "tmpl"

# Long-form names accepted from external parsers.
KIND_ALIASES = {
    "substitution": SUBSTITUTION,
}


@dataclass
class Node:
    """A directive in a template parse tree.

    The kind decides how content and children are read:
    - "=": content is the substituted expression, no children.
    - "if": content is the first condition; children are the branch bodies
      separated by "else" nodes whose content is the next condition.
    - "else": a branch marker inside "if", never compiled on its own.
    - "each": content is the loop header; children are the loop body.
    - "tmpl": content is the sub-template header, no children.
    """

    kind: str
    content: str = ""
    children: List["ParseNode"] = field(default_factory=list)

    @classmethod
    def from_tree(cls, tree: Any) -> "ParseNode":
        """Convert a nested-list parse tree into nodes.

        ``["if", "x", "yes", ["else", ""], "no"]`` becomes
        ``Node("if", "x", ["yes", Node("else"), "no"])``. Strings stay strings.
        """
        if isinstance(tree, str):
            return tree
        if isinstance(tree, Node):
            return cls(
                kind=tree.kind,
                content=tree.content,
                children=[cls.from_tree(child) for child in tree.children],
            )
        if not isinstance(tree, (list, tuple)):
            raise ParseTreeError(
                f"Parse node must be a string or a list, got {type(tree).__name__}"
            )
        if not tree:
            raise ParseTreeError("Parse node list must start with a kind")

        kind = tree[0]
        if not isinstance(kind, str):
            raise ParseTreeError(f"Parse node kind must be a string, got {kind!r}")

        content = tree[1] if len(tree) > 1 else ""
        if content is None:
            content = ""
        if not isinstance(content, str):
            raise ParseTreeError(
                f"Content of {kind!r} node must be a string, got {content!r}"
            )

        return cls(
            kind=KIND_ALIASES.get(kind, kind),
            content=content,
            children=[cls.from_tree(child) for child in tree[2:]],
        )

    def to_tree(self) -> list:
        """Inverse of from_tree."""
        return [
            self.kind,
            self.content,
            *[c if isinstance(c, str) else c.to_tree() for c in self.children],
        ]


ParseNode = Union[str, Node]
