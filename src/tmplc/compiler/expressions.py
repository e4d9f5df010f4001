"""Template expressions - compiling and splitting Python expressions."""

from __future__ import annotations

import ast
import io
import re
import tokenize
from types import CodeType
from typing import Dict, List, Optional, Tuple

# Trailing "=>f=>g" accessor chain on a substitution.
ACCESSOR_CHAIN = re.compile(r"(?:=>[\w.\[\]]+)+$")


class ExpressionError(ValueError):
    """An expression that is not valid Python."""

    pass


class ExpressionTable:
    """Expressions of one template, compiled once, addressed by index.

    Expressions are compiled in "eval" mode. Bare names resolve against the
    environment the evaluator flattens into their globals.
    """

    def __init__(self, filename: str = "<template>"):
        self.filename = filename
        self._sources: List[str] = []
        self._codes: List[CodeType] = []
        self._index: Dict[str, int] = {}

    def add(self, source: str) -> int:
        """Compile source and return its index. Identical sources share one."""
        source = source.strip()
        if source in self._index:
            return self._index[source]
        if not source:
            raise ExpressionError("empty expression")
        # Parentheses allow line breaks; the newline ends a trailing comment.
        try:
            code = compile(f"(\n{source}\n)", self.filename, "eval")
        except SyntaxError as exc:
            raise ExpressionError(f"invalid expression {source!r}: {exc.msg}") from exc
        self._index[source] = len(self._sources)
        self._sources.append(source)
        self._codes.append(code)
        return self._index[source]

    @property
    def sources(self) -> Tuple[str, ...]:
        return tuple(self._sources)

    @property
    def codes(self) -> Tuple[CodeType, ...]:
        return tuple(self._codes)

    def __len__(self) -> int:
        return len(self._sources)


def split_accessors(content: str) -> Tuple[str, List[str]]:
    """Split "x=>f=>g" into ("x", ["f", "g"])."""
    match = ACCESSOR_CHAIN.search(content)
    if match is None or match.start() == 0:
        return content, []
    accessors = match.group(0).split("=>")[1:]
    return content[: match.start()], accessors


BRACKETS = {"(": ")", "[": "]", "{": "}"}


def split_header(text: str) -> Tuple[Optional[str], str]:
    """Split a {{tmpl}} header into its "(...)" argument text and selector.

    ``({"y": 1}) "a)b"`` gives ``('{"y": 1}', '"a)b"')``. The argument list
    ends at the parenthesis balancing the first one, found by tokenizing, so
    brackets inside strings do not count. Without a leading parenthesis the
    whole header is the selector and the arguments are None.
    """
    text = text.strip()
    if not text.startswith("("):
        return None, text

    # Offsets of each line start, to map token positions back into text.
    starts = [0]
    for line in io.StringIO(text):
        starts.append(starts[-1] + len(line))

    stack: List[str] = []
    try:
        for token in tokenize.generate_tokens(io.StringIO(text).readline):
            if token.type != tokenize.OP:
                continue
            if token.string in BRACKETS:
                stack.append(BRACKETS[token.string])
            elif token.string in BRACKETS.values():
                if not stack or stack.pop() != token.string:
                    raise ExpressionError(f"unbalanced argument list in {text!r}")
                if not stack:
                    row, col = token.end
                    end = starts[row - 1] + col
                    return text[1 : end - 1], text[end:].strip()
    except (tokenize.TokenError, SyntaxError) as exc:
        raise ExpressionError(f"unbalanced argument list in {text!r}") from exc

    raise ExpressionError(f"unbalanced argument list in {text!r}")


def split_arguments(text: str) -> Tuple[Optional[str], Optional[str]]:
    """Split the "(data, options)" part of a {{tmpl}} header.

    Accepts "data", "data, options", ", options" and "" (plus a trailing
    comma). Returns the source of each part or None where it is omitted.
    """
    stripped = text.strip()
    if not stripped:
        return None, None

    if stripped.startswith(","):
        options = stripped[1:].strip()
        if not options:
            raise ExpressionError("empty options expression")
        _parse_list(options, expected=1)
        return None, options

    elements = _parse_list(stripped, expected=2)
    data = elements[0]
    options = elements[1] if len(elements) > 1 else None
    return data, options


def _parse_list(text: str, expected: int) -> List[str]:
    # Parse as the body of a list display so the parser finds the commas.
    source = f"[\n{text}\n]"
    try:
        tree = ast.parse(source, mode="eval")
    except SyntaxError as exc:
        raise ExpressionError(f"invalid arguments {text!r}: {exc.msg}") from exc

    if not isinstance(tree.body, ast.List):
        raise ExpressionError(f"expected at most {expected} arguments, got {text!r}")
    elements = tree.body.elts
    if not elements or len(elements) > expected:
        raise ExpressionError(f"expected at most {expected} arguments, got {text!r}")
    if any(isinstance(e, ast.Starred) for e in elements):
        raise ExpressionError(f"starred arguments are not supported: {text!r}")

    return [ast.get_source_segment(source, e) for e in elements]
