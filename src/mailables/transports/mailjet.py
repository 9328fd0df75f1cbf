# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Mailjet delivery through the v3.1 send API.

Addresses become ``{"Email", "Name"}`` objects. Mailjet accepts a single
Reply-To; when several are given the first one is used. Metadata is sent
as the JSON ``EventPayload`` returned in webhook events. Tags have no
Mailjet equivalent here and are not sent.
"""

from __future__ import annotations

import json
from typing import Any

import aiohttp

from ..attachments import split_mime
from ..config import MailjetTransportConfig
from ..errors import TransportError
from ..models import Address, Content, as_address_list
from .http import HttpMailTransport, b64

MAILJET_API_URL = "https://api.mailjet.com"


def _contact(address: Address) -> dict[str, str]:
    contact = {"Email": address.address}
    if address.name:
        contact["Name"] = address.name
    return contact


def build_message(content: Content) -> dict[str, Any]:
    """Return the entry of ``Messages`` describing one message."""
    message: dict[str, Any] = {}
    if content.from_ is not None:
        message["From"] = _contact(content.from_)
    for key, value in (("To", content.to), ("Cc", content.cc), ("Bcc", content.bcc)):
        if addresses := as_address_list(value):
            message[key] = [_contact(address) for address in addresses]
    if reply_to := as_address_list(content.reply_to):
        message["ReplyTo"] = _contact(reply_to[0])
    if content.subject is not None:
        message["Subject"] = content.subject
    if content.text is not None:
        message["TextPart"] = content.text
    if content.html is not None:
        message["HTMLPart"] = content.html
    if content.headers:
        message["Headers"] = dict(content.headers)
    if content.attachments:
        message["Attachments"] = [
            {
                "ContentType": "/".join(split_mime(attachment)),
                "Filename": attachment.filename,
                "Base64Content": b64(attachment.content),
            }
            for attachment in content.attachments
        ]
    if content.metadata:
        message["EventPayload"] = json.dumps(content.metadata)
    return message


class MailjetTransport(HttpMailTransport):
    provider = "mailjet"

    def __init__(self, config: MailjetTransportConfig, base_url: str = MAILJET_API_URL):
        super().__init__()
        self.config = config
        self.options = config.options
        self.base_url = base_url.rstrip("/")
        self.timeout = config.options.timeout

    def _auth(self) -> aiohttp.BasicAuth:
        return aiohttp.BasicAuth(self.options.api_key, self.options.api_secret)

    def build_payload(self, content: Content) -> dict[str, Any]:
        self.require_sender(content)
        return {"Messages": [build_message(content)]}

    async def _deliver(self, content: Content) -> dict[str, Any]:
        response = await self._request("POST", f"{self.base_url}/v3.1/send", json=self.build_payload(content))
        messages = response.get("Messages", []) if isinstance(response, dict) else []
        for result in messages:
            if result.get("Status") == "error":
                raise TransportError(self.provider, json.dumps(result.get("Errors", [])))
        recipients = [item for result in messages for item in result.get("To", [])]
        message_id = recipients[0].get("MessageID") if recipients else None
        return {"message_id": message_id, "response": response}

    async def verify(self) -> bool:
        return await self._probe(f"{self.base_url}/v3/REST/apikey")


__all__ = ["MAILJET_API_URL", "MailjetTransport", "build_message"]
