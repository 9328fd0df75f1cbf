# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Amazon SES delivery with aioboto3.

Messages are rendered to MIME and sent with ``SendRawEmail`` so attachments
and custom headers survive unchanged. Every to/cc/bcc address becomes an
envelope destination, and the ``Bcc`` header is removed from the raw
message. Tags are sent as SES message tags (``name:value``, or ``name``
with the value ``true``). A non-ASCII display name in ``Source`` is RFC 2047
encoded.
"""

from __future__ import annotations

from email.utils import formataddr
from typing import Any

import aioboto3

from ..config import SesTransportConfig
from ..models import Content
from .base import MailTransport, split_tag
from .mime import build_mime_message


class SesTransport(MailTransport):
    provider = "ses"

    def __init__(self, config: SesTransportConfig):
        super().__init__()
        self.config = config

    def _session(self):
        credentials = self.config.credentials
        return aioboto3.Session(
            aws_access_key_id=credentials.access_key_id,
            aws_secret_access_key=credentials.secret_access_key,
            aws_session_token=credentials.session_token,
            region_name=self.config.region,
        )

    def _client(self):
        return self._session().client("ses", endpoint_url=self.config.endpoint)

    def build_request(self, content: Content) -> dict[str, Any]:
        """Return the ``send_raw_email`` keyword arguments for a message."""
        sender = self.require_sender(content)
        msg = build_mime_message(content)
        del msg["Bcc"]
        request: dict[str, Any] = {
            "Source": formataddr((sender.name or "", sender.address), charset="utf-8"),
            "Destinations": [address.address for address in content.recipients()],
            "RawMessage": {"Data": msg.as_bytes()},
        }
        if content.tags:
            tags = []
            for tag in content.tags:
                name, value = split_tag(tag)
                tags.append({"Name": name, "Value": value or "true"})
            request["Tags"] = tags
        if self.config.configuration_set:
            request["ConfigurationSetName"] = self.config.configuration_set
        self.logger.debug("SES request from %s to %d destination(s)", sender.address, len(request["Destinations"]))
        return request

    async def _deliver(self, content: Content) -> dict[str, Any]:
        request = self.build_request(content)
        async with self._client() as ses:
            response = await ses.send_raw_email(**request)
        return {"message_id": response.get("MessageId"), "response": response}

    async def verify(self) -> bool:
        """Call ``GetSendQuota``; return False if the credentials are rejected."""
        try:
            async with self._client() as ses:
                await ses.get_send_quota()
        except Exception as exc:
            self.logger.warning("SES verification in %s failed: %s", self.config.region, exc)
            return False
        return True


__all__ = ["SesTransport"]
