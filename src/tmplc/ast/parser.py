from __future__ import annotations

from pathlib import Path
from typing import Any

from tmplc.ast.spec import Node
from tmplc.exceptions import ParseTreeError


def parse_tree_text(text: str) -> Node:
    """Parse a YAML (or JSON) document holding a nested-list parse tree.

    The document must be a list whose first item is the root kind, e.g.::

        - tmpl
        - ""
        - "Hello "
        - ["=", "name"]
    """
    data = load_yaml(text)
    root = Node.from_tree(data)
    if not isinstance(root, Node):
        raise ParseTreeError("Parse tree root must be a list, not a string")
    return root


def parse_tree_file(path: str | Path) -> Node:
    """Load a parse tree from a file."""
    return parse_tree_text(read_file(str(path)))


def read_file(filepath: str) -> str:
    try:
        with open(filepath, "r", encoding="utf-8") as file:
            return file.read()
    except OSError as exc:
        raise FileNotFoundError(f"Could not read file: {filepath}") from exc


def load_yaml(source: str) -> Any:
    import yaml
    from yaml import YAMLError

    if not isinstance(source, str):
        raise TypeError("`source` must be a string containing YAML")

    try:
        data = yaml.safe_load(source)
    except YAMLError as exc:
        raise ParseTreeError("Failed to parse YAML") from exc

    return data
