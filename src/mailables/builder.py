# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Fluent builder producing immutable :class:`Content` snapshots.

The builder keeps one private mutable state and never hands it out:
``build()`` validates a fresh Content from a copy of the state, and
``clone()`` deep-copies the state so clones cannot leak changes into each
other.

Example:
    Composing a message step by step::

        welcome = (
            MailableBuilder.create()
            .subject("Welcome!")
            .from_("Example <hello@example.com>")
            .template("welcome", {"name": "Ada"})
            .tag("onboarding")
        )
        content = await welcome.clone().to("ada@example.com").build()
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .attachments import AttachmentData, AttachmentResolver, AttachmentSource
from .models import AddressInput, Attachment, Content, coerce_address, coerce_recipients
from .templates.markdown_body import MARKDOWN_KEY, MARKDOWN_TEMPLATE


class MailableBuilder:
    """Chainable composer for :class:`Content` values."""

    def __init__(self) -> None:
        self._state: dict[str, Any] = {}
        self._attachments: list[Attachment | AttachmentSource] = []

    @classmethod
    def create(cls) -> MailableBuilder:
        return cls()

    def clone(self) -> MailableBuilder:
        """Return an independent copy of this builder."""
        cloned = type(self)()
        cloned._state = copy.deepcopy(self._state)
        cloned._attachments = list(self._attachments)
        return cloned

    # ------------------------------------------------------------- envelope
    def subject(self, subject: str) -> MailableBuilder:
        self._state["subject"] = subject
        return self

    def from_(self, address: AddressInput) -> MailableBuilder:
        self._state["from_"] = coerce_address(address)
        return self

    def to(self, address: AddressInput | list[AddressInput]) -> MailableBuilder:
        self._state["to"] = coerce_recipients(address)
        return self

    def cc(self, address: AddressInput | list[AddressInput]) -> MailableBuilder:
        self._state["cc"] = coerce_recipients(address)
        return self

    def bcc(self, address: AddressInput | list[AddressInput]) -> MailableBuilder:
        self._state["bcc"] = coerce_recipients(address)
        return self

    def reply_to(self, address: AddressInput | list[AddressInput]) -> MailableBuilder:
        self._state["reply_to"] = coerce_recipients(address)
        return self

    # ----------------------------------------------------------------- body
    def html(self, html: str) -> MailableBuilder:
        self._state["html"] = html
        return self

    def text(self, text: str) -> MailableBuilder:
        self._state["text"] = text
        return self

    def template(self, template: str, context: Mapping[str, Any] | None = None) -> MailableBuilder:
        self._state["template"] = template
        if context:
            self._state["context"] = {**self._state.get("context", {}), **context}
        return self

    def markdown(self, markdown: str) -> MailableBuilder:
        """Use a markdown body; it replaces any template set earlier."""
        self._state["template"] = MARKDOWN_TEMPLATE
        self._state["context"] = {**self._state.get("context", {}), MARKDOWN_KEY: markdown}
        return self

    def with_(self, key_or_data: str | Mapping[str, Any], value: Any = None) -> MailableBuilder:
        """Add one context entry (``key, value``) or merge a mapping."""
        context = dict(self._state.get("context", {}))
        if isinstance(key_or_data, str):
            context[key_or_data] = value
        else:
            context.update(key_or_data)
        self._state["context"] = context
        return self

    # ---------------------------------------------------------- attachments
    def attach(self, attachment: Attachment | AttachmentSource) -> MailableBuilder:
        self._attachments.append(attachment)
        return self

    def attach_from_path(
        self, path: str | Path, filename: str | None = None, mime: str | None = None
    ) -> MailableBuilder:
        return self.attach(AttachmentSource(path=str(path), filename=filename, mime=mime))

    def attach_from_storage(
        self, storage_path: str, filename: str | None = None, mime: str | None = None
    ) -> MailableBuilder:
        return self.attach(AttachmentSource(storage=storage_path, filename=filename, mime=mime))

    def attach_data(self, data: AttachmentData, filename: str, mime: str | None = None) -> MailableBuilder:
        source = AttachmentSource.from_data(data, filename)
        return self.attach(source.with_mime(mime) if mime else source)

    # -------------------------------------------------------------- headers
    def header(self, name: str, value: str) -> MailableBuilder:
        self._state["headers"] = {**self._state.get("headers", {}), name: value}
        return self

    def headers(self, headers: Mapping[str, str]) -> MailableBuilder:
        self._state["headers"] = {**self._state.get("headers", {}), **headers}
        return self

    # --------------------------------------------------------- tags/metadata
    def tag(self, tag: str) -> MailableBuilder:
        self._state["tags"] = [*self._state.get("tags", []), tag]
        return self

    def tags(self, tags: list[str]) -> MailableBuilder:
        self._state["tags"] = [*self._state.get("tags", []), *tags]
        return self

    def metadata(self, key_or_data: str | Mapping[str, Any], value: Any = None) -> MailableBuilder:
        metadata = dict(self._state.get("metadata", {}))
        if isinstance(key_or_data, str):
            metadata[key_or_data] = value
        else:
            metadata.update(key_or_data)
        self._state["metadata"] = metadata
        return self

    # ---------------------------------------------------------------- build
    async def build(self, *, storage_dir: str | Path | None = None) -> Content:
        """Resolve pending attachment declarations and snapshot the state.

        Raises:
            AttachmentError: If a declared attachment cannot be read.
        """
        pending = [item for item in self._attachments if isinstance(item, AttachmentSource)]
        loaded = iter(await AttachmentResolver(storage_dir).resolve(pending))
        attachments = [
            next(loaded) if isinstance(item, AttachmentSource) else item
            for item in self._attachments
        ]
        state = copy.deepcopy(self._state)
        return Content(**state, attachments=attachments)


__all__ = ["MailableBuilder"]
