# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""File-based template engines used to render message bodies."""

from .base import BaseTemplateEngine, RenderFunction
from .factory import SUPPORTED_ENGINES, TemplateEngineFactory
from .handlebars_engine import HandlebarsTemplateEngine
from .jinja_engine import JinjaTemplateEngine
from .mako_engine import MakoTemplateEngine
from .markdown_body import MARKDOWN_TEMPLATE, render_markdown

__all__ = [
    "SUPPORTED_ENGINES",
    "BaseTemplateEngine",
    "HandlebarsTemplateEngine",
    "JinjaTemplateEngine",
    "MARKDOWN_TEMPLATE",
    "MakoTemplateEngine",
    "RenderFunction",
    "TemplateEngineFactory",
    "render_markdown",
]
