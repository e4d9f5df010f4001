"""tmplc Exceptions

Custom exceptions for the template compiler.
"""

from __future__ import annotations

from typing import Optional


class TmplcError(Exception):
    """Base exception for all tmplc errors."""

    pass


class ParseTreeError(TmplcError):
    """Raised when a parse tree does not have the expected structure."""

    pass


class TemplateCompileError(TmplcError):
    """Raised when a parse tree cannot be compiled.

    Attributes:
        reason: Short description of what is wrong.
        directive: Reconstructed source text of the offending directive.
        source: Generated Python source, when the failure happened after
            code generation.
    """

    def __init__(self, reason: str, directive: str = "", source: Optional[str] = None):
        self.reason = reason
        self.directive = directive
        self.source = source
        message = f"{reason}: {directive}" if directive else reason
        super().__init__(message)


class TemplateNotFoundError(TmplcError, KeyError):
    """Raised when the registry cannot resolve a template name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Template not found: {name!r}")

    def __str__(self) -> str:
        return self.args[0]


class ConfigError(TmplcError):
    """Raised when a configuration file cannot be loaded."""

    pass
