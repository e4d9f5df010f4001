"""Parse-tree types, loading and printing."""

from tmplc.ast.parser import parse_tree_file, parse_tree_text
from tmplc.ast.printer import render_parse_tree
from tmplc.ast.spec import Node, ParseNode

__all__ = ["Node", "ParseNode", "parse_tree_file", "parse_tree_text", "render_parse_tree"]
