# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Jinja2 templates (``.j2``), the default engine.

``{% include %}`` and ``{% extends %}`` resolve against the template root.
Output is HTML-autoescaped. Extra ``options`` are passed to
``jinja2.Environment``.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ..errors import TemplatePackageUnavailableError
from .base import BaseTemplateEngine, RenderFunction

try:
    import jinja2
except ImportError:
    jinja2 = None


class JinjaTemplateEngine(BaseTemplateEngine):
    engine_name = "jinja2"
    extension = "j2"

    def __init__(self, directory: str | Path, *, main_file: str = "main", options: Mapping[str, Any] | None = None):
        if jinja2 is None:
            raise TemplatePackageUnavailableError(self.engine_name, "Jinja2")
        super().__init__(directory, main_file=main_file, options=options)
        env_options = {"autoescape": True, **self.options}
        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(self.directory)),
            **env_options,
        )

    def _compile_source(self, source: str) -> RenderFunction:
        compiled = self._env.from_string(source)
        return lambda context: compiled.render(context)


__all__ = ["JinjaTemplateEngine"]
