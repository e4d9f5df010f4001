"""In-memory template registry used by {{tmpl}} directives."""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional

from tmplc.exceptions import TemplateNotFoundError
from tmplc.runtime import Template

log = logging.getLogger(__name__)


class TemplateRegistry:
    """Maps template names to compiled templates.

    Lookups are safe from several threads; registration takes a lock.
    """

    def __init__(self, templates: Optional[Dict[str, Template]] = None):
        self._templates: Dict[str, Template] = dict(templates or {})
        self._lock = threading.Lock()

    def register(self, name: str, template: Template) -> Template:
        """Register a template under name, replacing any previous one."""
        if not hasattr(template, "apply"):
            raise TypeError(f"Cannot register {template!r}: it has no apply()")
        with self._lock:
            replaced = name in self._templates
            self._templates[name] = template
        log.debug("%s template %r", "Replaced" if replaced else "Registered", name)
        return template

    def unregister(self, name: str) -> None:
        with self._lock:
            if name not in self._templates:
                raise TemplateNotFoundError(name)
            del self._templates[name]

    def resolve(self, selector: Any) -> Template:
        """Resolve a name, or pass a template object through unchanged."""
        if hasattr(selector, "apply") and not isinstance(selector, str):
            return selector
        name = str(selector)
        try:
            return self._templates[name]
        except KeyError:
            raise TemplateNotFoundError(name) from None

    def names(self) -> List[str]:
        return sorted(self._templates)

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)
