"""Runtime support for compiled templates.

Generated code never imports anything itself. The compiler executes it in a
namespace holding the helpers below (or replacements injected by the caller).
"""

from __future__ import annotations

import inspect
from collections import ChainMap
from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional, Sequence
from types import CodeType


def escape_literal(text: str) -> str:
    """Return a Python string literal that evaluates to ``text``."""
    return repr(str(text))


def iterate(container: Any, fn: Callable[[Any, Any], Any]) -> None:
    """Call ``fn(key, value)`` for each element of ``container``.

    Mappings yield their items in insertion order, any other iterable yields
    ``(index, item)``. ``None`` is treated as empty.
    """
    if container is None:
        return
    if isinstance(container, Mapping):
        for key, value in list(container.items()):
            fn(key, value)
        return
    for index, item in enumerate(container):
        fn(index, item)


def merge_all(target: Dict[str, Any], *sources: Optional[Mapping]) -> Dict[str, Any]:
    """Copy every key of every source onto target, left to right.

    Keys whose value is None are copied too. None sources are skipped.
    """
    for source in sources:
        if source is None:
            continue
        for key in source:
            target[key] = source[key]
    return target


def call_thunk(fn: Callable[..., Any], data: Mapping, options: Mapping) -> Any:
    """Call a substituted callable with as many of (data, options) as it takes."""
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return fn(data, options)

    args = (data, options)
    for count in (2, 1, 0):
        try:
            signature.bind(*args[:count])
        except TypeError:
            continue
        return fn(*args[:count])

    # Nothing binds; let the callable report its own error.
    return fn(data, options)


def make_scope(data: Mapping, options: Mapping) -> ChainMap:
    """Root environment: data keys shadow option keys."""
    return ChainMap(data, options)


class Evaluator:
    """Evaluates the compiled template expressions of one template call.

    The environment is flattened into the globals of each evaluation.
    Lambdas, generator expressions and comprehensions inside an expression
    only see globals, never the locals mapping passed to ``eval``.
    """

    __slots__ = ("_codes", "_globals")

    def __init__(self, codes: Sequence[CodeType], globals_: Dict[str, Any]):
        self._codes = codes
        self._globals = globals_

    def __call__(self, index: int, env: Mapping) -> Any:
        namespace = dict(self._globals)
        # ChainMap lookups keep inner loop variables over data over options.
        namespace.update(env)
        return eval(self._codes[index], namespace)


def evaluator_factory(
    codes: Sequence[CodeType],
    helpers: Optional[Mapping[str, Any]] = None,
    expose_arguments: bool = True,
) -> Callable[[Mapping, Mapping], Evaluator]:
    """Build the per-call Evaluator constructor for one template.

    Helpers become expression globals, so data and loop variables shadow them.
    """
    base = dict(helpers or {})

    def make(data: Mapping, options: Mapping) -> Evaluator:
        globals_ = dict(base)
        if expose_arguments:
            globals_["data"] = data
            globals_["options"] = options
        return Evaluator(codes, globals_)

    return make


class Template:
    """A compiled template.

    Attributes:
        name: Template name (used in error messages and registry lookups).
        source: The generated Python source.
    """

    def __init__(self, name: str, function: Callable[..., str], source: str):
        self.name = name
        self.source = source
        self._function = function

    def apply(self, data: Optional[Mapping] = None, options: Optional[Mapping] = None) -> str:
        """Render the template with data and options."""
        if data is None:
            data = {}
        if options is None:
            options = {}
        if not isinstance(data, Mapping):
            raise TypeError(f"Template data must be a mapping, got {type(data).__name__}")
        if not isinstance(options, Mapping):
            raise TypeError(
                f"Template options must be a mapping, got {type(options).__name__}"
            )
        return self._function(data, options)

    __call__ = apply

    def __repr__(self) -> str:
        return f"Template({self.name!r})"
