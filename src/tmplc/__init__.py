"""tmplc - a compiler for jQuery-style templates.

Compiles parse trees of ``${expr}``, ``{{if}}``, ``{{each}}`` and ``{{tmpl}}``
directives into Python functions of ``(data, options)``.
"""

from tmplc._version import __version__
from tmplc.ast import Node, parse_tree_file, parse_tree_text, render_parse_tree
from tmplc.compiler import Compiler, compile_template
from tmplc.config import CompilerConfig, load_config
from tmplc.exceptions import (
    ConfigError,
    ParseTreeError,
    TemplateCompileError,
    TemplateNotFoundError,
    TmplcError,
)
from tmplc.registry import TemplateRegistry
from tmplc.runtime import Template, iterate, merge_all

__all__ = [
    "__version__",
    "Compiler",
    "CompilerConfig",
    "ConfigError",
    "Node",
    "ParseTreeError",
    "Template",
    "TemplateCompileError",
    "TemplateNotFoundError",
    "TemplateRegistry",
    "TmplcError",
    "compile_template",
    "iterate",
    "load_config",
    "merge_all",
    "parse_tree_file",
    "parse_tree_text",
    "render_parse_tree",
]
