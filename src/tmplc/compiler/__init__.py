"""tmplc Compiler - transforms template parse trees to Python functions."""

from tmplc.compiler.compiler import CompilationContext, Compiler, compile_template
from tmplc.compiler.renderer import Renderer
from tmplc.compiler.scope import ScopeTracker
from tmplc.compiler.spec import TemplateProgram

__all__ = [
    "CompilationContext",
    "Compiler",
    "Renderer",
    "ScopeTracker",
    "TemplateProgram",
    "compile_template",
]
