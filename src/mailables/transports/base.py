# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Common contract of delivery provider adapters.

Every adapter exposes ``send(content)``, which returns the provider's
result on success. Before any provider call the adapter checks that the
message has at least one to/cc/bcc recipient. Validation errors are raised
as-is; anything the provider leg raises is logged and wrapped in
:class:`~mailables.errors.TransportError`, whose message starts with the
provider name.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from email.utils import formataddr
from typing import Any

from ..errors import MailError, RecipientRequiredError, SenderRequiredError, TransportError
from ..logger import get_logger
from ..models import Address, Content, as_address_list


class MailTransport(ABC):
    """Base class for delivery provider adapters.

    Attributes:
        provider: Provider name, used in log lines and error messages.
    """

    provider: str = "transport"

    def __init__(self) -> None:
        self.logger = get_logger(f"mailables.transports.{self.provider}")

    async def send(self, content: Content) -> Any:
        """Dispatch one message.

        Raises:
            RecipientRequiredError: If the message has no to/cc/bcc recipient.
            SenderRequiredError: If the provider needs a From and none is set.
            TransportError: If the provider call fails.
        """
        if not content.has_recipients:
            raise RecipientRequiredError(self.provider)
        try:
            result = await self._deliver(content)
        except MailError:
            raise
        except Exception as exc:
            self.logger.error("%s delivery failed: %s", self.provider, exc)
            raise TransportError(self.provider, exc) from exc
        self.logger.info("Message sent via %s to %d recipient(s)", self.provider, len(content.recipients()))
        return result

    @abstractmethod
    async def _deliver(self, content: Content) -> Any:
        """Perform the provider call for a validated message."""

    async def verify(self) -> bool:
        """Check connectivity and credentials where the provider allows it."""
        return True

    async def close(self) -> None:
        """Release pooled resources."""

    async def __aenter__(self) -> MailTransport:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def require_sender(self, content: Content) -> Address:
        if content.from_ is None:
            raise SenderRequiredError(self.provider)
        return content.from_


def format_address(address: Address) -> str:
    """Render one address as an RFC 5322 mailbox."""
    return formataddr((address.name or "", address.address))


def format_address_header(value: Address | list[Address] | None) -> str | None:
    """Render a recipient field as a comma-separated header value, or None."""
    addresses = as_address_list(value)
    if not addresses:
        return None
    return ", ".join(format_address(address) for address in addresses)


def split_tag(tag: str) -> tuple[str, str | None]:
    """Split a ``name:value`` tag on its first colon."""
    name, sep, value = tag.partition(":")
    return name, value if sep else None


__all__ = [
    "MailTransport",
    "format_address",
    "format_address_header",
    "split_tag",
]
