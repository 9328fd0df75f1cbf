# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Shared behaviour of file-based template engines.

Each engine maps a template name to ``{directory}/{name}.{extension}``
(the extension is appended when missing), reads the file off the event
loop, compiles it once and caches the compiled callable by template name
for the lifetime of the engine instance. The cache is never invalidated;
build a new engine to pick up edited templates.

The template name ``markdown`` is reserved for markdown bodies, see
:mod:`mailables.templates.markdown_body`.

Concurrent renders of the same uncached template may compile it twice;
the last assignment to the cache wins, and both results are equivalent.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from ..errors import TemplateError, TemplateNotFoundError, TemplateRenderError
from ..logger import get_logger
from .markdown_body import MARKDOWN_CONTENT_KEY, MARKDOWN_KEY, MARKDOWN_TEMPLATE, render_markdown

RenderFunction = Callable[[Mapping[str, Any]], str]


class BaseTemplateEngine(ABC):
    """Template engine reading templates from a root directory.

    Attributes:
        engine_name: Identifier used in error messages and the factory.
        extension: File extension, without the dot.
        supports_partials: Whether the engine accepts partials and helpers.
        directory: Template root directory.
        main_file: Template used when ``render`` receives an empty name.
    """

    engine_name: str = "template"
    extension: str = ""
    supports_partials: bool = False

    def __init__(self, directory: str | Path, *, main_file: str = "main", options: Mapping[str, Any] | None = None):
        self.directory = Path(directory)
        self.main_file = main_file
        self.options = dict(options or {})
        self.logger = get_logger(f"mailables.templates.{self.engine_name}")
        self._compiled: dict[str, RenderFunction] = {}

    def resolve_template_path(self, template: str) -> Path:
        """Return the file path for a template name."""
        name = template or self.main_file
        if not name.endswith(f".{self.extension}"):
            name = f"{name}.{self.extension}"
        return self.directory / name

    async def load_template(self, template: str) -> str:
        """Read a template's source text.

        Raises:
            TemplateNotFoundError: If the file is missing or unreadable.
        """
        path = self.resolve_template_path(template)
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except OSError as exc:
            raise TemplateNotFoundError(template, str(path), exc.strerror or str(exc)) from exc

    async def render(self, template: str, context: Mapping[str, Any] | None = None) -> str:
        """Render a template file with the given context.

        Raises:
            TemplateNotFoundError: If the template file cannot be read.
            TemplateRenderError: If compilation or rendering fails.
            TemplatePackageUnavailableError: If a markdown body is rendered
                without Python-Markdown installed.
        """
        context = dict(context or {})
        if template == MARKDOWN_TEMPLATE and MARKDOWN_KEY in context:
            context[MARKDOWN_CONTENT_KEY] = self._render_markdown(str(context[MARKDOWN_KEY]))
            layout = self.resolve_template_path(template)
            if template not in self._compiled and not await asyncio.to_thread(layout.is_file):
                self.logger.debug("No %s markdown layout at %s; sending converted HTML", self.engine_name, layout)
                return context[MARKDOWN_CONTENT_KEY]

        compiled = self._compiled.get(template)
        if compiled is None:
            self.logger.debug("Compiling %s template '%s'", self.engine_name, template)
            source = await self.load_template(template)
            compiled = self._compile_or_raise(source, template)
            self._compiled[template] = compiled
        try:
            return compiled(context)
        except TemplateError:
            raise
        except Exception as exc:
            raise TemplateRenderError(self.engine_name, template, str(exc)) from exc

    def _render_markdown(self, source: str) -> str:
        try:
            return render_markdown(source)
        except TemplateError:
            raise
        except Exception as exc:
            raise TemplateRenderError(self.engine_name, MARKDOWN_TEMPLATE, str(exc)) from exc

    def compile(self, source: str) -> RenderFunction:
        """Compile template source into a reusable render function.

        Raises:
            TemplateRenderError: If the source does not compile. Errors raised
                later by the returned function are wrapped the same way.
        """
        compiled = self._compile_or_raise(source, None)

        def render(context: Mapping[str, Any]) -> str:
            try:
                return compiled(dict(context or {}))
            except TemplateError:
                raise
            except Exception as exc:
                raise TemplateRenderError(self.engine_name, "<string>", str(exc)) from exc

        return render

    def is_cached(self, template: str) -> bool:
        return template in self._compiled

    def _compile_or_raise(self, source: str, template: str | None) -> RenderFunction:
        try:
            return self._compile_source(source)
        except TemplateError:
            raise
        except Exception as exc:
            raise TemplateRenderError(self.engine_name, template, str(exc)) from exc

    @abstractmethod
    def _compile_source(self, source: str) -> RenderFunction:
        """Compile source text into a callable taking the context mapping."""


__all__ = ["BaseTemplateEngine", "RenderFunction"]
