"""Tests for the Python module renderer."""

from tmplc import __version__
from tmplc.compiler import Renderer, TemplateProgram


def test_module_layout():
    program = TemplateProgram(
        name="greeting",
        body="'Hi '",
        expressions=("name", "items"),
    )
    source = Renderer().render(program)

    assert source.startswith(f"# Generated by tmplc {__version__} from template greeting\n")
    assert "#   [0] name\n" in source
    assert "#   [1] items\n" in source
    assert "def render(_tmpl_data, _tmpl_opts):\n" in source
    assert "        'Hi '\n" in source
    compile(source, "<test>", "exec")


def test_no_expressions_section_when_empty():
    source = Renderer().render(TemplateProgram(name="plain"))
    assert "# Expressions:" not in source
    assert "''" in source


def test_multiline_expression_comment_stays_on_one_line():
    program = TemplateProgram(name="multi\nline", expressions=("a +\nb",))
    source = Renderer().render(program)
    assert "from template multi\\nline\n" in source
    assert "#   [0] a +\\nb\n" in source
    compile(source, "<test>", "exec")


def test_function_name():
    source = Renderer().render(TemplateProgram(name="t", function_name="emit"))
    assert "def emit(_tmpl_data, _tmpl_opts):" in source
