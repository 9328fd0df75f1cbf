# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Declarative mailables and their assembly into :class:`Content`.

A mailable describes one email through four small declarations, each
returned by a method the subclass overrides:

- ``envelope()``: subject, tags and metadata (:class:`Envelope`)
- ``content()``: raw html/text, markdown, or a template plus context
  (:class:`ContentDeclaration`)
- ``headers()``: message id, references and extra headers
  (:class:`Headers`), optional
- ``attachments()``: attachment declarations
  (:class:`~mailables.attachments.AttachmentSource`), optional

:func:`assemble` reduces them, deterministically, into one Content value.
Templates are not rendered here: the mail service renders them right before
dispatch with whichever engine is active at that moment.

Example:
    A mailable for a shipped order::

        class OrderShipped(Mailable):
            def __init__(self, order):
                self.order = order

            def envelope(self):
                return Envelope(subject="Your order has shipped", tags=["shipment"])

            def content(self):
                return ContentDeclaration(template="orders/shipped", context={"order": self.order})

            def headers(self):
                return Headers(message_id=f"<order.{self.order.id}@shop.test>")

            def attachments(self):
                return [AttachmentSource.from_path(self.order.invoice_path).named("Invoice.pdf")]

        content = await OrderShipped(order).build()
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from .attachments import AttachmentResolver, AttachmentSource
from .models import Content
from .templates.markdown_body import MARKDOWN_KEY, MARKDOWN_TEMPLATE


@dataclass(frozen=True)
class Envelope:
    """Subject, tags and metadata of a mailable."""

    subject: str | None = None
    tags: Sequence[str] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ContentDeclaration:
    """Body of a mailable: raw html/text, a template with context, or both.

    ``markdown`` is rendered to HTML at send time and takes the place of
    ``template``; ``context`` is still passed to the markdown layout.
    """

    html: str | None = None
    text: str | None = None
    template: str | None = None
    markdown: str | None = None
    context: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Headers:
    """Extra headers of a mailable.

    Attributes:
        message_id: Value for the ``Message-ID`` header.
        references: Message ids joined with a single space into ``References``.
        text: Raw header map, copied as-is.
    """

    message_id: str | None = None
    references: Sequence[str] = ()
    text: Mapping[str, str] = field(default_factory=dict)

    def header(self, name: str, value: str) -> Headers:
        """Return a copy with one more raw header; a repeated name replaces the earlier value."""
        return replace(self, text={**self.text, name: value})


def merge_headers(declaration: Headers) -> dict[str, str]:
    """Flatten a :class:`Headers` declaration into a header map."""
    merged = {str(name): str(value) for name, value in declaration.text.items()}
    if declaration.message_id:
        merged["Message-ID"] = declaration.message_id
    if declaration.references:
        merged["References"] = " ".join(declaration.references)
    return merged


class Mailable(ABC):
    """Base class for user-defined mailables."""

    @abstractmethod
    def envelope(self) -> Envelope:
        """Build the message envelope."""

    @abstractmethod
    def content(self) -> ContentDeclaration:
        """Build the message body declaration."""

    def headers(self) -> Headers:
        return Headers()

    def attachments(self) -> list[AttachmentSource]:
        return []

    async def build(self, *, storage_dir: str | Path | None = None) -> Content:
        """Assemble this mailable into a :class:`Content` value."""
        return await assemble(self, storage_dir=storage_dir)


async def assemble(mailable: Mailable, *, storage_dir: str | Path | None = None) -> Content:
    """Reduce a mailable's declarations into one :class:`Content` value.

    Attachment sources are loaded first, in declaration order; a source that
    cannot be read aborts assembly. Calling this twice on an unchanged
    mailable yields equal values.

    Args:
        mailable: The mailable to assemble.
        storage_dir: Root for storage attachments.

    Returns:
        The composed Content. Recipients are not required at this stage.

    Raises:
        AttachmentError: If an attachment source cannot be read.
    """
    attachments = await AttachmentResolver(storage_dir).resolve(mailable.attachments())

    envelope = mailable.envelope()
    declaration = mailable.content()
    headers = mailable.headers()

    fields: dict[str, Any] = {
        "subject": envelope.subject,
        "tags": list(envelope.tags),
        "metadata": dict(envelope.metadata),
        "attachments": attachments,
        "headers": merge_headers(headers),
    }
    if declaration.html is not None:
        fields["html"] = declaration.html
    if declaration.text is not None:
        fields["text"] = declaration.text
    if declaration.template:
        fields["template"] = declaration.template
        fields["context"] = dict(declaration.context)
    if declaration.markdown:
        fields["template"] = MARKDOWN_TEMPLATE
        fields["context"] = {MARKDOWN_KEY: declaration.markdown, **declaration.context}

    return Content(**fields)


__all__ = [
    "ContentDeclaration",
    "Envelope",
    "Headers",
    "Mailable",
    "assemble",
    "merge_headers",
]
