# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Handlebars templates (``.hbs``) rendered with pybars3.

Besides plain templates, this engine supports:

- partials: named sub-templates referenced as ``{{> name}}``. Partials
  listed in the configuration are read from the template root on first
  render; ``register_partial`` adds one from source text.
- helpers: named callables invoked as ``{{name arg ...}}``. Following the
  pybars convention a helper receives the current scope first, then the
  template arguments. A helper that raises does not abort rendering: the
  failure is logged as a warning and the helper yields its first template
  argument unchanged (or an empty string when it has none).
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from ..errors import TemplatePackageUnavailableError, TemplateRenderError
from .base import BaseTemplateEngine, RenderFunction

try:
    import pybars
except ImportError:
    pybars = None


class HandlebarsTemplateEngine(BaseTemplateEngine):
    """Handlebars engine with partial and helper registries."""

    engine_name = "handlebars"
    extension = "hbs"
    supports_partials = True

    def __init__(
        self,
        directory: str | Path,
        *,
        main_file: str = "main",
        partials: Mapping[str, str] | None = None,
        helpers: Mapping[str, Callable[..., Any]] | None = None,
        options: Mapping[str, Any] | None = None,
    ):
        """Create the engine.

        Args:
            directory: Template root directory.
            main_file: Template used for empty names.
            partials: Partial name to template path, relative to ``directory``.
            helpers: Helper name to callable.
            options: Unused by this engine; accepted for a uniform signature.

        Raises:
            TemplatePackageUnavailableError: If pybars3 is not installed.
        """
        if pybars is None:
            raise TemplatePackageUnavailableError(self.engine_name, "pybars3")
        super().__init__(directory, main_file=main_file, options=options)
        self._compiler = pybars.Compiler()
        self._partials: dict[str, Any] = {}
        self._helpers: dict[str, Callable[..., Any]] = {}
        self._pending_partials: dict[str, str] = dict(partials or {})
        for name, helper in (helpers or {}).items():
            self.register_helper(name, helper)

    def register_helper(self, name: str, helper: Callable[..., Any]) -> None:
        """Register a helper; failures inside it fall back to its first argument."""

        def safe_helper(this: Any, *args: Any, **kwargs: Any) -> Any:
            try:
                return helper(this, *args, **kwargs)
            except Exception as exc:
                self.logger.warning("Handlebars helper '%s' error: %s", name, exc)
                return args[0] if args else ""

        self._helpers[name] = safe_helper

    def register_partial(self, name: str, source: str) -> None:
        """Register a partial from source text.

        Raises:
            TemplateRenderError: If the partial does not compile.
        """
        try:
            self._partials[name] = self._compiler.compile(source)
        except Exception as exc:
            raise TemplateRenderError(self.engine_name, name, str(exc)) from exc
        self._pending_partials.pop(name, None)

    async def register_partial_from_file(self, name: str, template: str) -> None:
        """Register a partial read from the template root.

        Raises:
            TemplateNotFoundError: If the partial file cannot be read.
        """
        self.register_partial(name, await self.load_template(template))

    async def render(self, template: str, context: Mapping[str, Any] | None = None) -> str:
        for name, path in list(self._pending_partials.items()):
            await self.register_partial_from_file(name, path)
        return await super().render(template, context)

    def _compile_source(self, source: str) -> RenderFunction:
        compiled = self._compiler.compile(source)

        def render(context: Mapping[str, Any]) -> str:
            output = compiled(dict(context), helpers=self._helpers, partials=self._partials)
            return "".join(output) if isinstance(output, list) else str(output)

        return render


__all__ = ["HandlebarsTemplateEngine"]
