"""Jinja2 environment and filters for rendering generated Python source."""

from typing import Any

from jinja2 import Environment, StrictUndefined


def comment_text(value: Any) -> str:
    """Make value safe to place after a ``#`` on a single line."""
    text = str(value)
    return text.replace("\r", "\\r").replace("\n", "\\n")


def get_tmplc_jinja_env() -> Environment:
    """Create the Jinja2 Environment used by the Renderer.

    Returns:
        Configured Jinja2 Environment.
    """
    env = Environment(
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )

    env.filters["comment"] = comment_text

    return env
