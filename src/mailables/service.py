# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Mail service: the entry point applications send mail through.

A :class:`MailService` owns exactly one transport and one template engine,
both built from :class:`~mailables.config.MailConfig` when the service is
constructed. Sending goes through these steps:

1. Assemble the message (a :class:`~mailables.mailable.Mailable` or
   :class:`~mailables.builder.MailableBuilder` is built; a mapping is
   validated into :class:`~mailables.models.Content`).
2. Apply recipients accumulated by :meth:`MailService.to`, which replace
   the message's own.
3. Render the template, if any, into the html body with the active engine.
4. Apply the global From and Reply-To defaults where the message has none.
5. Hand the result to the transport and return its result unchanged.

Switching transport never mutates a service: :meth:`MailService.mailer`
returns a new, independent service sharing the template engine.

Example:
    Sending through the default and a named mailer::

        service = MailService(config)
        await service.send(WelcomeMail(user))
        await service.to("ada@example.com").cc("ops@example.com").send(WelcomeMail(user))
        await service.mailer("marketing").send(newsletter_builder)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Union

from .builder import MailableBuilder
from .config import MailConfig
from .errors import ConfigurationError
from .factory import MailTransportFactory
from .logger import get_logger
from .mailable import Mailable
from .models import AddressInput, Content, coerce_recipients
from .templates import BaseTemplateEngine, TemplateEngineFactory
from .transports import MailTransport

if TYPE_CHECKING:
    from .testing import MailFake

MailMessage = Union[Content, Mailable, MailableBuilder, Mapping[str, Any]]


class MailService:
    """Compose, render and dispatch messages through one transport.

    Attributes:
        config: The service configuration.
        transport: The active transport adapter.
        template_engine: The active template engine.
    """

    def __init__(
        self,
        config: MailConfig,
        *,
        transport_factory: MailTransportFactory | None = None,
        engine_factory: TemplateEngineFactory | None = None,
        transport: MailTransport | None = None,
        template_engine: BaseTemplateEngine | None = None,
    ):
        """Build the service.

        Args:
            config: Service configuration.
            transport_factory: Factory used to build ``config.transport``.
            engine_factory: Factory used to build the template engine.
            transport: Ready-made transport, bypassing the factory.
            template_engine: Ready-made engine, bypassing the factory.

        Raises:
            ConfigurationError: If the transport or template configuration is invalid.
            TemplatePackageUnavailableError: If the engine package is missing.
        """
        self.config = config
        self.logger = get_logger("mailables.service")
        self.transport_factory = transport_factory or MailTransportFactory()
        self.engine_factory = engine_factory or TemplateEngineFactory()
        self.transport = transport or self.transport_factory.create_transport(config.transport)
        self.template_engine = template_engine or self.engine_factory.create_engine(config.templates)

    async def send(
        self,
        message: MailMessage,
        *,
        to: Any = None,
        cc: Any = None,
        bcc: Any = None,
    ) -> Any:
        """Assemble, render and dispatch one message.

        Args:
            message: A Content value, Mailable, MailableBuilder or mapping.
            to: Recipients replacing the message's own ``to`` when given.
            cc: Recipients replacing the message's own ``cc`` when given.
            bcc: Recipients replacing the message's own ``bcc`` when given.

        Returns:
            The transport's dispatch result, unmodified.

        Raises:
            AttachmentError: If an attachment cannot be read.
            TemplateError: If the template cannot be rendered.
            MailValidationError: If the message has no recipient or sender.
            TransportError: If the provider call fails.
        """
        content = await self.prepare(message, to=to, cc=cc, bcc=bcc)
        self.logger.debug("Dispatching '%s' via %s", content.subject, self.transport.provider)
        return await self.transport.send(content)

    async def prepare(self, message: MailMessage, *, to: Any = None, cc: Any = None, bcc: Any = None) -> Content:
        """Return the Content that ``send`` would hand to the transport."""
        content = await self._assemble(message)

        updates: dict[str, Any] = {}
        for field_name, value in (("to", to), ("cc", cc), ("bcc", bcc)):
            recipients = coerce_recipients(value)
            if recipients is not None:
                updates[field_name] = recipients
        if content.template:
            updates["html"] = await self.template_engine.render(content.template, content.context or {})
        if content.from_ is None and self.config.from_address is not None:
            updates["from_"] = self.config.from_address
        if content.reply_to is None and self.config.reply_to is not None:
            updates["reply_to"] = self.config.reply_to
        return content.model_copy(update=updates) if updates else content

    async def _assemble(self, message: MailMessage) -> Content:
        if isinstance(message, Content):
            return message
        if isinstance(message, (Mailable, MailableBuilder)):
            return await message.build(storage_dir=self.config.storage_dir)
        if isinstance(message, Mapping):
            return Content.model_validate(dict(message))
        raise TypeError(f"Cannot send {type(message).__name__}; expected Content, Mailable or MailableBuilder")

    def to(self, *addresses: AddressInput) -> PendingMail:
        """Start a fluent send addressed to ``addresses``."""
        return PendingMail(self).to(*addresses)

    def mailer(self, name: str) -> MailService:
        """Return a new service bound to the named alternate transport.

        Raises:
            ConfigurationError: If no mailer is configured under ``name``.
        """
        if name not in self.config.mailers:
            available = ", ".join(sorted(self.config.mailers)) or "none"
            raise ConfigurationError(f"Mailer '{name}' is not configured (available: {available})")
        return MailService(
            replace(self.config, transport=self.config.mailers[name]),
            transport_factory=self.transport_factory,
            engine_factory=self.engine_factory,
            template_engine=self.template_engine,
        )

    def fake(self) -> MailFake:
        """Return a service with the same settings that records instead of sending."""
        from .testing import MailFake

        return MailFake(self.config, template_engine=self.template_engine)

    async def verify(self) -> bool:
        return await self.transport.verify()

    async def close(self) -> None:
        await self.transport.close()

    async def __aenter__(self) -> MailService:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


class PendingMail:
    """Recipients accumulated by :meth:`MailService.to`, awaiting a message."""

    def __init__(self, service: MailService):
        self._service = service
        self._to: list[AddressInput] = []
        self._cc: list[AddressInput] = []
        self._bcc: list[AddressInput] = []

    def to(self, *addresses: AddressInput) -> PendingMail:
        self._to.extend(addresses)
        return self

    def cc(self, *addresses: AddressInput) -> PendingMail:
        self._cc.extend(addresses)
        return self

    def bcc(self, *addresses: AddressInput) -> PendingMail:
        self._bcc.extend(addresses)
        return self

    async def send(self, message: MailMessage) -> Any:
        return await self._service.send(
            message,
            to=self._to or None,
            cc=self._cc or None,
            bcc=self._bcc or None,
        )


__all__ = ["MailMessage", "MailService", "PendingMail"]
