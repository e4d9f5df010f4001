"""Tests for the tmplc CLI."""

import json

import pytest
from typer.testing import CliRunner

from tmplc import __version__
from tmplc.cli import typer_app

runner = CliRunner()


@pytest.fixture
def write(tmp_path):
    def _write(name, content):
        path = tmp_path / name
        path.write_text(content if isinstance(content, str) else json.dumps(content), encoding="utf-8")
        return path

    return _write


def test_version():
    result = runner.invoke(typer_app, ["--version"])
    assert result.exit_code == 0
    assert f"tmplc {__version__}" in result.output


class TestCompileCommand:
    def test_prints_module(self, write):
        path = write("hello.yaml", ["tmpl", "", "Hi ", ["=", "name"]])
        result = runner.invoke(typer_app, ["compile", str(path)])
        assert result.exit_code == 0
        assert "from template hello" in result.output
        assert "def render(_tmpl_data, _tmpl_opts):" in result.output

    def test_name_option(self, write):
        path = write("hello.yaml", ["tmpl", "", "x"])
        result = runner.invoke(typer_app, ["compile", str(path), "-n", "greeting"])
        assert "from template greeting" in result.output

    def test_writes_output_file(self, write, tmp_path):
        path = write("hello.yaml", ["tmpl", "", "x"])
        out = tmp_path / "build" / "hello.py"
        result = runner.invoke(typer_app, ["compile", str(path), "-o", str(out)])
        assert result.exit_code == 0
        assert "Wrote compiled template" in result.output
        assert "def render(" in out.read_text(encoding="utf-8")

    def test_config_option(self, write):
        path = write("hello.yaml", ["tmpl", "", "x"])
        config = write("tmplc.yaml", "function_name: emit\n")
        result = runner.invoke(typer_app, ["compile", str(path), "-c", str(config)])
        assert result.exit_code == 0
        assert "def emit(" in result.output

    def test_compile_error(self, write):
        path = write("bad.yaml", ["tmpl", "", ["wrap", "x"]])
        result = runner.invoke(typer_app, ["compile", str(path)])
        assert result.exit_code == 1
        assert "I do not know how to compile" in result.output

    def test_missing_tree(self, tmp_path):
        result = runner.invoke(typer_app, ["compile", str(tmp_path / "missing.yaml")])
        assert result.exit_code == 1
        assert "Error" in result.output


class TestRenderCommand:
    def test_renders_with_data_and_options(self, write):
        path = write("page.yaml", ["tmpl", "", ["=", "greeting"], ", ", ["=", "name"]])
        data = write("data.yaml", "name: Ada\n")
        options = write("options.yaml", "greeting: Hello\n")
        result = runner.invoke(
            typer_app, ["render", str(path), "-d", str(data), "--options", str(options)]
        )
        assert result.exit_code == 0
        assert result.output == "Hello, Ada"

    def test_sub_templates(self, write):
        row = write("row.yaml", ["tmpl", "", "<", ["=", "value"], ">"])
        page = write("page.yaml", ["tmpl", "", ["each", "items", ["tmpl", "'row'"]]])
        data = write("data.json", {"items": [1, 2]})
        result = runner.invoke(
            typer_app, ["render", str(page), "-d", str(data), "-t", f"row={row}"]
        )
        assert result.exit_code == 0
        assert result.output == "<1><2>"

    def test_bad_template_option(self, write):
        page = write("page.yaml", ["tmpl", "", "x"])
        result = runner.invoke(typer_app, ["render", str(page), "-t", "no-equals-sign"])
        assert result.exit_code == 1
        assert "NAME=PATH" in result.output

    def test_data_must_be_mapping(self, write):
        page = write("page.yaml", ["tmpl", "", "x"])
        data = write("data.yaml", "- 1\n- 2\n")
        result = runner.invoke(typer_app, ["render", str(page), "-d", str(data)])
        assert result.exit_code == 1
        assert "mapping" in result.output

    def test_runtime_error(self, write):
        page = write("page.yaml", ["tmpl", "", ["=", "1 / 0"]])
        result = runner.invoke(typer_app, ["render", str(page)])
        assert result.exit_code == 1
        assert "ZeroDivisionError" in result.output
