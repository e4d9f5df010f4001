"""Scope tracking for nested {{each}} loops."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List, Sequence, Tuple

from tmplc.config import RESERVED_PREFIX

TEMP_PREFIX = RESERVED_PREFIX + "var"
ENV_PREFIX = RESERVED_PREFIX + "env"
KEY_PREFIX = RESERVED_PREFIX + "key"
VALUE_PREFIX = RESERVED_PREFIX + "value"


class ScopeTracker:
    """Tracks loop variables in scope and the current nesting depth.

    Every generated identifier is derived from the depth, so two loops at the
    same depth share names and a loop never clobbers the names of the loop
    around it.
    """

    def __init__(self) -> None:
        self.depth = 0
        # Stack of (template name, generated identifier) pairs, outermost first.
        self._in_scope: List[Tuple[str, str]] = []
        self._frames: List[int] = []

    @property
    def in_scope(self) -> Tuple[Tuple[str, str], ...]:
        """All loop variables visible at this point, outermost first."""
        return tuple(self._in_scope)

    def push(self, names: Sequence[Tuple[str, str]]) -> None:
        self._in_scope.extend(names)
        self._frames.append(len(names))

    def pop(self) -> None:
        count = self._frames.pop()
        del self._in_scope[len(self._in_scope) - count :]

    def temp_name(self) -> str:
        """Temporary for the current depth."""
        return f"{TEMP_PREFIX}{self.depth}"

    def env_name(self) -> str:
        """Environment mapping for the current depth."""
        return f"{ENV_PREFIX}{self.depth}"

    def loop_param_names(self) -> Tuple[str, str]:
        """Callback parameters of a loop opened at the current depth."""
        inner = self.depth + 1
        return f"{KEY_PREFIX}{inner}", f"{VALUE_PREFIX}{inner}"

    @contextmanager
    def nested(self, key_name: str, value_name: str) -> Iterator[Tuple[str, str]]:
        """Enter a loop body binding key_name and value_name.

        Yields the generated parameter identifiers for the key and value.
        """
        key_param, value_param = self.loop_param_names()
        self.push([(key_name, key_param), (value_name, value_param)])
        self.depth += 1
        try:
            yield key_param, value_param
        finally:
            self.depth -= 1
            self.pop()
