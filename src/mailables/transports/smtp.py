# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Direct SMTP delivery with aiosmtplib."""

from __future__ import annotations

from email.message import EmailMessage
from typing import Any

from ..config import SmtpTransportConfig
from ..models import Content
from .base import MailTransport
from .mime import build_mime_message
from .smtp_pool import SMTPPool


class SmtpTransport(MailTransport):
    """Send messages through an SMTP relay.

    Connections come from an :class:`SMTPPool`, so repeated sends from the
    same task reuse one authenticated session. ``secure`` selects implicit
    TLS; otherwise STARTTLS is used when the server offers it, unless
    ``ignore_tls`` is set.
    """

    provider = "smtp"

    def __init__(self, config: SmtpTransportConfig, pool: SMTPPool | None = None):
        super().__init__()
        self.config = config
        self.pool = pool or SMTPPool(ttl=config.pool_ttl, timeout=config.timeout)

    async def _get_connection(self):
        config = self.config
        return await self.pool.get_connection(
            config.host,
            config.port,
            config.auth.user,
            config.auth.password,
            use_tls=config.secure,
            start_tls=False if config.ignore_tls else None,
        )

    def build_message(self, content: Content) -> EmailMessage:
        return build_mime_message(content)

    async def _deliver(self, content: Content) -> dict[str, Any]:
        msg = self.build_message(content)
        sender = content.from_.address if content.from_ else self.config.auth.user
        smtp = await self._get_connection()
        errors, response = await smtp.send_message(msg, sender=sender)
        return {
            "message_id": msg["Message-ID"],
            "accepted": [address.address for address in content.recipients() if address.address not in errors],
            "rejected": sorted(errors),
            "response": response,
        }

    async def verify(self) -> bool:
        """Open (or reuse) a connection; return False if that fails."""
        try:
            await self._get_connection()
        except Exception as exc:
            self.logger.warning("SMTP verification against %s failed: %s", self.config.host, exc)
            return False
        return True

    async def close(self) -> None:
        await self.pool.close_all()


__all__ = ["SmtpTransport"]
