"""Compiler - transforms a template parse tree into a callable Template.

The whole template becomes one Python expression. For example::

    ["tmpl", "", "Hi ", ["=", "name"], "!"]

compiles to the body::

    ''.join(('Hi ',
             str((_tmpl_var0 := _tmpl_eval(0, _tmpl_env0),
                  _tmpl_call(_tmpl_var0, _tmpl_data, _tmpl_opts)
                  if callable(_tmpl_var0) else _tmpl_var0)[1]),
             '!'))

``_tmpl_eval(i, env)`` evaluates template expression ``i`` in ``env``, so
bare names resolve against loop variables, data and options.
"""

from __future__ import annotations

import keyword
import logging
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from tmplc.ast.printer import render_parse_tree
from tmplc.ast.spec import EACH, ELSE, IF, SUBSTITUTION, TMPL, Node, ParseNode
from tmplc.compiler.expressions import (
    ExpressionError,
    ExpressionTable,
    split_accessors,
    split_arguments,
    split_header,
)
from tmplc.compiler.renderer import Renderer
from tmplc.compiler.scope import ScopeTracker
from tmplc.compiler.spec import TemplateProgram
from tmplc.config import RESERVED_PREFIX, CompilerConfig
from tmplc.exceptions import ParseTreeError, TemplateCompileError
from tmplc.registry import TemplateRegistry
from tmplc import runtime

log = logging.getLogger(__name__)

# {{each (key, value) container}}, {{each (key) container}} or {{each container}}
EACH_HEADER = re.compile(
    r"^\s*(?:\(\s*([A-Za-z_]\w*)\s*(?:,\s*([A-Za-z_]\w*)\s*)?\)\s*)?(\S[\s\S]*)$"
)


class CompilationContext:
    """Mutable state of one compile call."""

    def __init__(self, filename: str):
        self.scope = ScopeTracker()
        self.expressions = ExpressionTable(filename)
        self.max_depth = 0


class Compiler:
    """Compiles template parse trees to Templates.

    A Compiler only holds configuration and collaborators, so one instance
    can compile many templates, from several threads.
    """

    def __init__(
        self,
        config: Optional[CompilerConfig] = None,
        registry: Optional[TemplateRegistry] = None,
        helpers: Optional[Mapping[str, Any]] = None,
        escape: Callable[[str], str] = runtime.escape_literal,
        iterate: Callable[[Any, Callable[[Any, Any], Any]], Any] = runtime.iterate,
        merge_all: Callable[..., Dict[str, Any]] = runtime.merge_all,
    ):
        """Initialize the compiler.

        Args:
            config: Compiler settings. Defaults to CompilerConfig().
            registry: Registry {{tmpl}} resolves selectors through. A new
                empty one is created when omitted.
            helpers: Extra globals for template expressions, e.g. accessor
                functions used as ``${x=>upper}``.
            escape: Turns literal text into a Python string literal.
            iterate: Generic iteration primitive used by {{each}}.
            merge_all: Merge used to propagate loop variables into {{tmpl}}.
        """
        self.config = config or CompilerConfig()
        self.registry = registry if registry is not None else TemplateRegistry()
        self.helpers = dict(helpers or {})
        self.escape = escape
        self.iterate = iterate
        self.merge_all = merge_all
        self.renderer = Renderer()

    def compile(self, tree: Any, name: Optional[str] = None) -> runtime.Template:
        """Compile a parse tree into a Template.

        Args:
            tree: Root Node, or its nested-list form.
            name: Template name used in filenames and error messages.

        Returns:
            The compiled Template.

        Raises:
            ParseTreeError: If the tree is not a valid parse tree.
            TemplateCompileError: If a directive is malformed.
        """
        program = self.compile_program(tree, name)
        source = self.renderer.render(program)
        function = self._load(program, source, tree)
        log.debug(
            "Compiled template %r: %d expressions, depth %d, %d bytes of source",
            program.name,
            len(program.expressions),
            program.max_depth,
            len(source),
        )
        return runtime.Template(program.name, function, source)

    def register(self, name: str, tree: Any) -> runtime.Template:
        """Compile a tree and register the result in this compiler's registry."""
        return self.registry.register(name, self.compile(tree, name))

    def compile_program(self, tree: Any, name: Optional[str] = None) -> TemplateProgram:
        """Compile a parse tree into TemplateProgram IR."""
        root = Node.from_tree(tree)
        if not isinstance(root, Node):
            raise ParseTreeError("Parse tree root must be a node, not literal text")

        name = name or "anonymous"
        filename = f"{self.config.filename_prefix}:{name}>"
        log.debug("Compiling template %r", name)

        ctx = CompilationContext(filename)
        body = self._compile_group(root.children, ctx)

        return TemplateProgram(
            name=name,
            function_name=self.config.function_name,
            filename=filename,
            body=body,
            expressions=ctx.expressions.sources,
            codes=ctx.expressions.codes,
            max_depth=ctx.max_depth,
        )

    def _load(self, program: TemplateProgram, source: str, tree: Any) -> Callable[..., str]:
        """Execute the generated module and return its render function."""
        namespace: Dict[str, Any] = {
            "_tmpl_evaluator": runtime.evaluator_factory(
                program.codes, self.helpers, self.config.expose_arguments
            ),
            "_tmpl_scope": runtime.make_scope,
            "_tmpl_iterate": self.iterate,
            "_tmpl_merge_all": self.merge_all,
            "_tmpl_resolve": self.registry.resolve,
            "_tmpl_call": runtime.call_thunk,
        }
        try:
            code = compile(source, program.filename, "exec")
        except (SyntaxError, RecursionError, MemoryError) as exc:
            raise TemplateCompileError(
                f"Generated code for template {program.name!r} does not compile ({exc})",
                _describe(tree),
                source=source,
            ) from exc
        exec(code, namespace)
        return namespace[program.function_name]

    # ------------------------------------------------------------------
    # Tree walk
    # ------------------------------------------------------------------

    def _compile_group(self, children: List[ParseNode], ctx: CompilationContext) -> str:
        """Compile children to one string-valued expression.

        Fragments are joined from a flat tuple, so the generated code does
        not nest deeper as a template gets longer.
        """
        parts = [self._walk(child, ctx) for child in children]
        if not parts:
            return "''"
        if len(parts) == 1:
            return parts[0]
        return "''.join((" + ", ".join(parts) + "))"

    def _walk(self, node: ParseNode, ctx: CompilationContext) -> str:
        if isinstance(node, str):
            return self.escape(node)
        if node.kind == SUBSTITUTION:
            return self._compile_substitution(node, ctx)
        if node.kind == IF:
            return self._compile_if(node, ctx)
        if node.kind == EACH:
            return self._compile_each(node, ctx)
        if node.kind == TMPL:
            return self._compile_tmpl(node, ctx)
        if node.kind == ELSE:
            raise TemplateCompileError("{{else}} outside of {{if}}", render_parse_tree(node))
        raise TemplateCompileError("I do not know how to compile", render_parse_tree(node))

    def _expression(self, source: str, node: Node, ctx: CompilationContext) -> int:
        try:
            return ctx.expressions.add(source)
        except ExpressionError as exc:
            raise TemplateCompileError(
                f"Bad expression in {{{{{node.kind}}}}} ({exc})", render_parse_tree(node)
            ) from exc

    # ------------------------------------------------------------------
    # ${expr}
    # ------------------------------------------------------------------

    def _compile_substitution(self, node: Node, ctx: CompilationContext) -> str:
        """${x=>f=>g} -> str((tmp := x, g(f(tmp(data, options) if callable(tmp) else tmp)))[1])

        The temporary guarantees x is evaluated once even though the
        dethunking test reads it twice.
        """
        content = node.content.strip()
        if not content:
            raise TemplateCompileError("Empty substitution", render_parse_tree(node))

        base, accessors = split_accessors(content)
        value_index = self._expression(base, node, ctx)
        accessor_indexes = [self._expression(a, node, ctx) for a in accessors]

        tmp = ctx.scope.temp_name()
        env = ctx.scope.env_name()

        value = f"_tmpl_call({tmp}, _tmpl_data, _tmpl_opts) if callable({tmp}) else {tmp}"
        for index in accessor_indexes:
            value = f"_tmpl_eval({index}, {env})({value})"

        return f"str(({tmp} := _tmpl_eval({value_index}, {env}), {value})[1])"

    # ------------------------------------------------------------------
    # {{if}} / {{else}}
    # ------------------------------------------------------------------

    def _compile_if(self, node: Node, ctx: CompilationContext) -> str:
        """{{if a}}b{{else c}}d{{else}}e{{/if}} -> (b if a else (d if c else e))"""
        children = node.children
        end = len(children)
        env = ctx.scope.env_name()

        branches: List[Tuple[Optional[int], str]] = []
        condition = node.content
        pos = 0
        while True:
            else_index = next(
                (i for i in range(pos, end) if _is_else(children[i])),
                end,
            )
            if not condition.strip():
                if pos == 0:
                    raise TemplateCompileError(
                        "{{if}} missing condition", render_parse_tree(node)
                    )
                if else_index != end:
                    raise TemplateCompileError(
                        "{{else}} without condition must be last", render_parse_tree(node)
                    )
                condition_index = None
            else:
                condition_index = self._expression(condition, node, ctx)

            body = self._compile_group(children[pos:else_index], ctx)
            branches.append((condition_index, body))

            if else_index == end:
                break
            condition = children[else_index].content
            pos = else_index + 1

        expr = "''"
        for condition_index, body in reversed(branches):
            if condition_index is None:
                expr = f"({body})"
            else:
                expr = f"({body} if _tmpl_eval({condition_index}, {env}) else {expr})"
        return expr

    # ------------------------------------------------------------------
    # {{each}}
    # ------------------------------------------------------------------

    def _compile_each(self, node: Node, ctx: CompilationContext) -> str:
        """{{each (k, v) items}}body{{/each}} at depth 0 ->

        (_tmpl_var0 := [],
         _tmpl_iterate(items, lambda _tmpl_key1, _tmpl_value1: _tmpl_var0.append(
             (_tmpl_env1 := _tmpl_env0.new_child({'k': _tmpl_key1, 'v': _tmpl_value1}),
              body)[1])),
         ''.join(_tmpl_var0))[2]
        """
        match = EACH_HEADER.match(node.content)
        if match is None:
            raise TemplateCompileError("Malformed {{each}} content", render_parse_tree(node))

        key_name = match.group(1) or self.config.default_key_name
        value_name = match.group(2) or self.config.default_value_name
        for name in (key_name, value_name):
            if keyword.iskeyword(name) or name.startswith(RESERVED_PREFIX):
                raise TemplateCompileError(
                    f"Invalid {{{{each}}}} variable name {name!r}", render_parse_tree(node)
                )

        container_index = self._expression(match.group(3), node, ctx)
        acc = ctx.scope.temp_name()
        env = ctx.scope.env_name()

        with ctx.scope.nested(key_name, value_name) as (key_param, value_param):
            ctx.max_depth = max(ctx.max_depth, ctx.scope.depth)
            inner_env = ctx.scope.env_name()
            body = self._compile_group(node.children, ctx)

        bindings = f"{{{key_name!r}: {key_param}, {value_name!r}: {value_param}}}"
        callback = (
            f"lambda {key_param}, {value_param}: {acc}.append("
            f"({inner_env} := {env}.new_child({bindings}), {body})[1])"
        )
        return (
            f"({acc} := [], "
            f"_tmpl_iterate(_tmpl_eval({container_index}, {env}), {callback}), "
            f"''.join({acc}))[2]"
        )

    # ------------------------------------------------------------------
    # {{tmpl}}
    # ------------------------------------------------------------------

    def _compile_tmpl(self, node: Node, ctx: CompilationContext) -> str:
        """{{tmpl (data, options) selector}} -> resolve(selector).apply(data, options)

        Without explicit arguments the loop variables in scope are merged
        over the ambient data; with none in scope the ambient arguments are
        passed through as is.
        """
        try:
            arguments, selector = split_header(node.content)
            data_source, options_source = split_arguments(arguments or "")
        except ExpressionError as exc:
            raise TemplateCompileError(
                f"Malformed {{{{tmpl}}}} content ({exc})", render_parse_tree(node)
            ) from exc
        if not selector:
            raise TemplateCompileError("Malformed {{tmpl}} content", render_parse_tree(node))

        env = ctx.scope.env_name()
        tmp = ctx.scope.temp_name()

        # Data and options are evaluated before the selector, in source order.
        if data_source is not None or options_source is not None:
            data = "_tmpl_data"
            if data_source is not None:
                data = f"_tmpl_eval({self._expression(data_source, node, ctx)}, {env})"
            options = "_tmpl_opts"
            if options_source is not None:
                options = f"_tmpl_eval({self._expression(options_source, node, ctx)}, {env})"
            selector_index = self._expression(selector, node, ctx)
            return (
                f"({tmp} := ({data}, {options}), "
                f"_tmpl_resolve(_tmpl_eval({selector_index}, {env})).apply(*{tmp}))[1]"
            )

        selector_index = self._expression(selector, node, ctx)
        resolved = f"_tmpl_resolve(_tmpl_eval({selector_index}, {env}))"

        in_scope = ctx.scope.in_scope
        if in_scope:
            pairs = ", ".join(f"{name!r}: {ident}" for name, ident in in_scope)
            return f"{resolved}.apply(_tmpl_merge_all({{}}, _tmpl_data, {{{pairs}}}), _tmpl_opts)"

        return f"{resolved}.apply(_tmpl_data, _tmpl_opts)"


def _is_else(node: ParseNode) -> bool:
    return isinstance(node, Node) and node.kind == ELSE


def _describe(tree: Any) -> str:
    try:
        return render_parse_tree(Node.from_tree(tree))
    except ParseTreeError:
        return repr(tree)


def compile_template(tree: Any, name: Optional[str] = None, **kwargs: Any) -> runtime.Template:
    """Compile a parse tree with a one-off Compiler.

    Keyword arguments are passed to Compiler().
    """
    return Compiler(**kwargs).compile(tree, name)
