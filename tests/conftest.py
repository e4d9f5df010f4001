"""Shared fixtures for tmplc tests."""

import pytest

from tmplc import Compiler, TemplateRegistry


def tree(*children):
    """Root node holding children, as an external parser would produce it."""
    return ["tmpl", "", *children]


@pytest.fixture
def registry():
    return TemplateRegistry()


@pytest.fixture
def compiler(registry):
    return Compiler(registry=registry)


@pytest.fixture
def render(compiler):
    """Compile children under a root node and apply the result."""

    def _render(*children, data=None, options=None):
        return compiler.compile(tree(*children)).apply(data, options)

    return _render
