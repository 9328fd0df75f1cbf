# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Markdown message bodies.

A markdown body travels as the reserved template name ``markdown`` with the
source under the ``markdown`` context key. Before rendering, every engine
converts it to HTML and exposes the result as ``markdown_content``. If the
template root holds a ``markdown`` layout for the engine (``markdown.j2``,
``markdown.hbs``...) it is rendered with that context; otherwise the
converted HTML is the body.
"""

from __future__ import annotations

from ..errors import TemplatePackageUnavailableError

try:
    import markdown
except ImportError:
    markdown = None

MARKDOWN_TEMPLATE = "markdown"
MARKDOWN_KEY = "markdown"
MARKDOWN_CONTENT_KEY = "markdown_content"


def render_markdown(source: str) -> str:
    """Convert markdown source to an HTML fragment.

    Raises:
        TemplatePackageUnavailableError: If Python-Markdown is not installed.
    """
    if markdown is None:
        raise TemplatePackageUnavailableError("markdown", "Markdown")
    return markdown.markdown(source)


__all__ = ["MARKDOWN_CONTENT_KEY", "MARKDOWN_KEY", "MARKDOWN_TEMPLATE", "render_markdown"]
