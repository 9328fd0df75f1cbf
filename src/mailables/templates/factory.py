# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Registry mapping template engine identifiers to engine classes."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from ..config import TemplateConfig
from ..errors import UnsupportedTemplateEngineError
from ..logger import get_logger
from .base import BaseTemplateEngine
from .handlebars_engine import HandlebarsTemplateEngine
from .jinja_engine import JinjaTemplateEngine
from .mako_engine import MakoTemplateEngine

logger = get_logger("mailables.templates")

SUPPORTED_ENGINES: tuple[str, ...] = ("handlebars", "jinja2", "mako")

EngineFactory = Callable[..., BaseTemplateEngine]


class TemplateEngineFactory:
    """Create template engines from :class:`TemplateConfig` values.

    The built-in engines are registered on construction. ``register_engine``
    may replace one of them or add a new identifier.
    """

    def __init__(self) -> None:
        self._engines: dict[str, EngineFactory] = {}
        self.register_engine("handlebars", HandlebarsTemplateEngine)
        self.register_engine("jinja2", JinjaTemplateEngine)
        self.register_engine("mako", MakoTemplateEngine)

    def register_engine(self, name: str, factory: EngineFactory) -> None:
        self._engines[name] = factory

    def get_engine(self, name: str) -> EngineFactory:
        """Return the factory registered under ``name``.

        Raises:
            UnsupportedTemplateEngineError: If nothing is registered under it.
        """
        try:
            return self._engines[name]
        except KeyError:
            raise UnsupportedTemplateEngineError(name, self.supported_engines()) from None

    def create_engine(self, config: TemplateConfig | None = None) -> BaseTemplateEngine:
        """Instantiate the engine selected by ``config.engine``.

        Raises:
            UnsupportedTemplateEngineError: If the identifier is unknown.
            TemplatePackageUnavailableError: If the engine's package is missing.
        """
        config = config or TemplateConfig()
        factory = self.get_engine(config.engine)
        kwargs: dict[str, Any] = {"main_file": config.main_file, "options": config.options}
        if getattr(factory, "supports_partials", False):
            kwargs["partials"] = config.partials
            kwargs["helpers"] = config.helpers
        elif config.partials or config.helpers:
            logger.warning("Template engine '%s' ignores partials and helpers", config.engine)
        return factory(config.directory, **kwargs)

    def is_engine_supported(self, name: str) -> bool:
        return name in self._engines

    def supported_engines(self) -> tuple[str, ...]:
        return tuple(sorted(self._engines))


__all__ = ["SUPPORTED_ENGINES", "TemplateEngineFactory"]
