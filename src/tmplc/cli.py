"""tmplc CLI Entry Point

Usage:
    tmplc compile tree.yaml                  # Print the generated Python module
    tmplc compile tree.yaml -o out.py        # Write it to a file
    tmplc render tree.yaml -d data.yaml      # Render with data
    tmplc render page.yaml -t row=row.yaml   # Register sub-templates for {{tmpl}}
    tmplc --version
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, List, NoReturn, Optional

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler

from tmplc._version import __version__
from tmplc.ast.parser import parse_tree_file
from tmplc.compiler import Compiler
from tmplc.config import CompilerConfig, load_config
from tmplc.exceptions import TmplcError

log = logging.getLogger(__name__)

console = Console(stderr=True)

typer_app = typer.Typer(no_args_is_help=True, add_completion=False)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the tmplc CLI.

    Log levels:
    - Normal: Only warnings/errors shown
    - Verbose (-v): INFO level
    - Debug (TMPLC_DEBUG=1): DEBUG level - shows every compiled template
    """
    if os.environ.get("TMPLC_DEBUG"):
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console,
        show_time=verbose,
        show_path=bool(os.environ.get("TMPLC_DEBUG")),
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    tmplc_logger = logging.getLogger("tmplc")
    tmplc_logger.setLevel(level)
    tmplc_logger.handlers = [handler]
    tmplc_logger.propagate = False


def fail(message: str) -> NoReturn:
    typer.secho(f"Error: {message}", err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def load_mapping(path: Optional[Path], what: str) -> dict[str, Any]:
    """Load a YAML/JSON mapping, or {} when no path is given."""
    if path is None:
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        fail(f"Could not read {what} file {path}: {exc}")
    except yaml.YAMLError as exc:
        fail(f"Invalid YAML in {what} file {path}: {exc}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        fail(f"{what.capitalize()} file must contain a mapping: {path}")
    return data


def parse_template_option(value: str) -> tuple[str, Path]:
    """Parse "name=path/to/tree.yaml"."""
    name, sep, path = value.partition("=")
    if not sep or not name.strip() or not path.strip():
        fail(f"Expected NAME=PATH for --template, got {value!r}")
    return name.strip(), Path(path.strip())


def make_compiler(config_path: Optional[Path]) -> Compiler:
    config = load_config(config_path) if config_path is not None else CompilerConfig()
    return Compiler(config=config)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"tmplc {__version__}")
        raise typer.Exit()


@typer_app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Compile jQuery-style template parse trees to Python."""


@typer_app.command("compile")
def compile_command(
    tree: Path = typer.Argument(..., help="Parse tree file (YAML or JSON)."),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write the generated module to a file."
    ),
    name: Optional[str] = typer.Option(
        None, "-n", "--name", help="Template name. Defaults to the file stem."
    ),
    config_path: Optional[Path] = typer.Option(
        None, "-c", "--config", help="Compiler config file (YAML)."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output."),
) -> None:
    """Compile a parse tree and print the generated Python module."""
    setup_logging(verbose)
    try:
        compiler = make_compiler(config_path)
        template = compiler.compile(parse_tree_file(tree), name or tree.stem)
    except (TmplcError, FileNotFoundError) as exc:
        fail(str(exc))

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(template.source, encoding="utf-8")
        log.info("Wrote %s", output)
        typer.echo(f"Wrote compiled template to {output}")
    else:
        typer.echo(template.source, nl=False)


@typer_app.command("render")
def render_command(
    tree: Path = typer.Argument(..., help="Parse tree file (YAML or JSON)."),
    data_path: Optional[Path] = typer.Option(
        None, "-d", "--data", help="Data mapping file (YAML or JSON)."
    ),
    options_path: Optional[Path] = typer.Option(
        None, "--options", help="Options mapping file (YAML or JSON)."
    ),
    templates: Optional[List[str]] = typer.Option(
        None,
        "-t",
        "--template",
        help="Sub-template for {{tmpl}} as NAME=PATH. Repeatable.",
    ),
    config_path: Optional[Path] = typer.Option(
        None, "-c", "--config", help="Compiler config file (YAML)."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output."),
) -> None:
    """Compile a parse tree and print the result of applying it."""
    setup_logging(verbose)
    data = load_mapping(data_path, "data")
    options = load_mapping(options_path, "options")

    try:
        compiler = make_compiler(config_path)
        for option in templates or []:
            sub_name, sub_path = parse_template_option(option)
            compiler.register(sub_name, parse_tree_file(sub_path))
            log.info("Registered sub-template %r from %s", sub_name, sub_path)
        template = compiler.compile(parse_tree_file(tree), tree.stem)
    except (TmplcError, FileNotFoundError) as exc:
        fail(str(exc))

    try:
        result = template.apply(data, options)
    except Exception as exc:
        log.debug("Template %r failed", template.name, exc_info=True)
        fail(f"{type(exc).__name__}: {exc}")

    typer.echo(result, nl=False)


def app() -> None:
    """Entry point for the installed ``tmplc`` script."""
    typer_app()


if __name__ == "__main__":
    app()
