# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Mako templates (``.mako``).

``<%include>`` and ``<%inherit>`` resolve against the template root through
a ``TemplateLookup``. Extra ``options`` are passed to ``mako.template.Template``.
Context keys Mako binds itself (``self``, ``context``, ``loop``) are rejected
with a render error.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ..errors import TemplatePackageUnavailableError
from .base import BaseTemplateEngine, RenderFunction

try:
    from mako.lookup import TemplateLookup
    from mako.template import Template
except ImportError:
    TemplateLookup = Template = None


# Names Mako binds itself while rendering; they cannot be passed as context.
RESERVED_NAMES = frozenset({"self", "context", "loop", "UNDEFINED", "STOP_RENDERING"})


class MakoTemplateEngine(BaseTemplateEngine):
    engine_name = "mako"
    extension = "mako"

    def __init__(self, directory: str | Path, *, main_file: str = "main", options: Mapping[str, Any] | None = None):
        if Template is None:
            raise TemplatePackageUnavailableError(self.engine_name, "Mako")
        super().__init__(directory, main_file=main_file, options=options)
        self._lookup = TemplateLookup(directories=[str(self.directory)])

    def _compile_source(self, source: str) -> RenderFunction:
        compiled = Template(text=source, lookup=self._lookup, **self.options)

        def render(context: Mapping[str, Any]) -> str:
            reserved = sorted(RESERVED_NAMES.intersection(context))
            if reserved:
                raise ValueError(f"context keys reserved by Mako: {', '.join(reserved)}")
            return compiled.render(**context)

        return render


__all__ = ["MakoTemplateEngine"]
