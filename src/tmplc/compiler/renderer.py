"""Renderer - converts TemplateProgram IR to Python module text."""

from tmplc._version import __version__
from tmplc.compiler.extensions import get_tmplc_jinja_env
from tmplc.compiler.spec import TemplateProgram

MODULE_TEMPLATE = """\
# Generated by tmplc {{ version }} from template {{ program.name | comment }}
{% if program.expressions %}
# Expressions:
{% for source in program.expressions %}
#   [{{ loop.index0 }}] {{ source | comment }}
{% endfor %}
{% endif %}


def {{ program.function_name }}(_tmpl_data, _tmpl_opts):
    _tmpl_eval = _tmpl_evaluator(_tmpl_data, _tmpl_opts)
    _tmpl_env0 = _tmpl_scope(_tmpl_data, _tmpl_opts)
    return (
        {{ program.body }}
    )
"""


class Renderer:
    """Renders TemplateProgram IR to Python source text."""

    def __init__(self) -> None:
        self._template = get_tmplc_jinja_env().from_string(MODULE_TEMPLATE)

    def render(self, program: TemplateProgram) -> str:
        """Render a TemplateProgram to a Python module.

        The module defines one function, ``program.function_name``, taking
        the data and options mappings. It expects the runtime helpers
        (``_tmpl_evaluator``, ``_tmpl_scope``, ``_tmpl_iterate``,
        ``_tmpl_merge_all``, ``_tmpl_resolve``, ``_tmpl_call``) in its globals.

        Args:
            program: The TemplateProgram IR to render.

        Returns:
            Complete Python module source as a string.
        """
        return self._template.render(program=program, version=__version__)
