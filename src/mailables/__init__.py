# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Compose email once, deliver it through interchangeable transports.

This package provides:

- A normalized message model (``Content``) built from declarative mailables
  or a fluent builder, with attachments resolved from paths, a storage root
  or inline data
- Template rendering through Jinja2, Handlebars (pybars3) or Mako
- Delivery adapters for SMTP (aiosmtplib), Amazon SES (aioboto3) and the
  Mailgun, Mailjet and Resend HTTP APIs (aiohttp)
- A mail service applying global defaults, plus an in-memory fake for tests

Example:
    Sending a templated message over SMTP::

        from mailables import MailConfig, MailService, MailableBuilder, SmtpTransportConfig

        service = MailService(MailConfig(
            transport=SmtpTransportConfig(host="smtp.example.com", auth={"user": "u", "pass": "p"}),
            from_address="Example <hello@example.com>",
        ))
        await service.send(
            MailableBuilder.create().to("ada@example.com").subject("Hi").template("welcome", {"name": "Ada"})
        )

Authors:
    Softwell S.r.l.
"""

from .attachments import AttachmentResolver, AttachmentSource
from .builder import MailableBuilder
from .config import (
    MailConfig,
    MailgunTransportConfig,
    MailjetTransportConfig,
    ResendTransportConfig,
    SesTransportConfig,
    SmtpTransportConfig,
    TemplateConfig,
    parse_transport_config,
)
from .errors import (
    AttachmentError,
    ConfigurationError,
    MailError,
    MailValidationError,
    RecipientRequiredError,
    SenderRequiredError,
    TemplateError,
    TemplateNotFoundError,
    TemplatePackageUnavailableError,
    TemplateRenderError,
    TransportError,
    UnsupportedTemplateEngineError,
    UnsupportedTransportError,
)
from .factory import MailTransportFactory
from .mailable import ContentDeclaration, Envelope, Headers, Mailable, assemble
from .models import Address, Attachment, Content
from .service import MailService, PendingMail
from .templates import TemplateEngineFactory
from .testing import FakeTransport, MailFake

__version__ = "0.1.0"

__all__ = [
    "Address",
    "Attachment",
    "AttachmentError",
    "AttachmentResolver",
    "AttachmentSource",
    "ConfigurationError",
    "Content",
    "ContentDeclaration",
    "Envelope",
    "FakeTransport",
    "Headers",
    "MailConfig",
    "MailError",
    "MailFake",
    "MailService",
    "MailTransportFactory",
    "MailValidationError",
    "Mailable",
    "MailableBuilder",
    "MailgunTransportConfig",
    "MailjetTransportConfig",
    "PendingMail",
    "RecipientRequiredError",
    "ResendTransportConfig",
    "SenderRequiredError",
    "SesTransportConfig",
    "SmtpTransportConfig",
    "TemplateConfig",
    "TemplateEngineFactory",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplatePackageUnavailableError",
    "TemplateRenderError",
    "TransportError",
    "UnsupportedTemplateEngineError",
    "UnsupportedTransportError",
    "assemble",
    "parse_transport_config",
]
