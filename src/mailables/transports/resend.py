# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Resend delivery through the ``/emails`` endpoint."""

from __future__ import annotations

from typing import Any

from ..config import ResendTransportConfig
from ..models import Address, Content
from .base import format_address, split_tag
from .http import HttpMailTransport, b64


def _addresses(value: Address | list[Address]) -> str | list[str]:
    if isinstance(value, list):
        return [format_address(address) for address in value]
    return format_address(value)


def build_payload(content: Content) -> dict[str, Any]:
    """Return the JSON body for one message.

    Single addresses are sent as strings and lists as lists. Tags become
    ``{"name", "value"}`` pairs split on the first ``:``; a tag without a
    value is sent with an empty value. Metadata is not sent.
    """
    payload: dict[str, Any] = {}
    if content.from_ is not None:
        payload["from"] = format_address(content.from_)
    for key, value in (("to", content.to), ("cc", content.cc), ("bcc", content.bcc), ("reply_to", content.reply_to)):
        if value is not None:
            payload[key] = _addresses(value)
    if content.subject is not None:
        payload["subject"] = content.subject
    if content.html is not None:
        payload["html"] = content.html
    if content.text is not None:
        payload["text"] = content.text
    if content.headers:
        payload["headers"] = dict(content.headers)
    if content.attachments:
        payload["attachments"] = [
            {"filename": attachment.filename, "content": b64(attachment.content)}
            for attachment in content.attachments
        ]
    if content.tags:
        tags = []
        for tag in content.tags:
            name, value = split_tag(tag)
            tags.append({"name": name, "value": value or ""})
        payload["tags"] = tags
    return payload


class ResendTransport(HttpMailTransport):
    provider = "resend"

    def __init__(self, config: ResendTransportConfig):
        super().__init__()
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.timeout = config.timeout

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.api_key}"}

    async def _deliver(self, content: Content) -> dict[str, Any]:
        self.require_sender(content)
        response = await self._request("POST", f"{self.base_url}/emails", json=build_payload(content))
        message_id = response.get("id") if isinstance(response, dict) else None
        return {"message_id": message_id, "response": response}

    async def verify(self) -> bool:
        return await self._probe(f"{self.base_url}/domains")


__all__ = ["ResendTransport", "build_payload"]
