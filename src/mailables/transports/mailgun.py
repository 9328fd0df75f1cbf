# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Mailgun delivery through the messages API.

The message is posted as a multipart form. Recipients are repeated form
fields, custom headers use the ``h:`` prefix, tags the ``o:tag`` field and
metadata ``v:`` variables (JSON-encoded unless already a string).
"""

from __future__ import annotations

import json
from typing import Any

import aiohttp

from ..attachments import split_mime
from ..config import MailgunTransportConfig
from ..models import Content, as_address_list
from .base import format_address, format_address_header
from .http import HttpMailTransport


def build_form_fields(content: Content) -> list[tuple[str, str]]:
    """Return the non-file form fields for a message, in submission order."""
    fields: list[tuple[str, str]] = []
    if content.from_ is not None:
        fields.append(("from", format_address(content.from_)))
    for name, value in (("to", content.to), ("cc", content.cc), ("bcc", content.bcc)):
        for address in as_address_list(value):
            fields.append((name, format_address(address)))
    if content.subject is not None:
        fields.append(("subject", content.subject))
    if content.text is not None:
        fields.append(("text", content.text))
    if content.html is not None:
        fields.append(("html", content.html))
    if reply_to := format_address_header(content.reply_to):
        fields.append(("h:Reply-To", reply_to))
    for header, value in content.headers.items():
        fields.append((f"h:{header}", value))
    for tag in content.tags:
        fields.append(("o:tag", tag))
    for key, value in content.metadata.items():
        fields.append((f"v:{key}", value if isinstance(value, str) else json.dumps(value)))
    return fields


class MailgunTransport(HttpMailTransport):
    provider = "mailgun"

    def __init__(self, config: MailgunTransportConfig):
        super().__init__()
        self.config = config
        self.options = config.options
        self.timeout = config.options.timeout

    @property
    def base_url(self) -> str:
        return f"{self.options.protocol}://{self.options.host}/v3"

    def _auth(self) -> aiohttp.BasicAuth:
        return aiohttp.BasicAuth("api", self.options.api_key)

    def build_form(self, content: Content) -> aiohttp.FormData:
        self.require_sender(content)
        form = aiohttp.FormData()
        for name, value in build_form_fields(content):
            form.add_field(name, value)
        for attachment in content.attachments:
            maintype, subtype = split_mime(attachment)
            form.add_field(
                "attachment",
                attachment.content,
                filename=attachment.filename,
                content_type=f"{maintype}/{subtype}",
            )
        return form

    async def _deliver(self, content: Content) -> dict[str, Any]:
        form = self.build_form(content)
        response = await self._request("POST", f"{self.base_url}/{self.options.domain}/messages", data=form)
        message_id = response.get("id") if isinstance(response, dict) else None
        return {"message_id": message_id, "response": response}

    async def verify(self) -> bool:
        return await self._probe(f"{self.base_url}/domains/{self.options.domain}")


__all__ = ["MailgunTransport", "build_form_fields"]
