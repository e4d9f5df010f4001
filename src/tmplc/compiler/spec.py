"""Compiler IR spec - a template lowered to one Python expression."""

from dataclasses import dataclass, field
from types import CodeType
from typing import Tuple


@dataclass
class TemplateProgram:
    """Complete template IR.

    ``body`` is a Python expression producing the output string. It refers to
    template expressions by their index into ``expressions``/``codes`` and to
    the runtime helpers by their ``_tmpl_`` names.
    """

    name: str
    function_name: str = "render"
    filename: str = "<tmplc>"
    body: str = "''"
    expressions: Tuple[str, ...] = field(default_factory=tuple)
    codes: Tuple[CodeType, ...] = field(default_factory=tuple)
    # Deepest loop nesting reached while compiling.
    max_depth: int = 0
