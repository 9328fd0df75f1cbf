# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Exception hierarchy for mail composition and dispatch.

Every failure surfaced by the package derives from :class:`MailError` and
carries a stable ``code`` attribute, so callers can branch on the failure
kind without parsing messages:

- Configuration errors: raised when a transport, template engine or mailer
  is constructed with missing or unknown settings.
- Assembly errors: an attachment source could not be read.
- Template errors: engine package missing, template file missing, or
  compile/render failure (three distinct subclasses).
- Transport errors: the provider leg failed; the message starts with the
  provider name.
- Validation errors: the message cannot be dispatched as composed
  (no recipient, no sender where the provider requires one).
"""

from __future__ import annotations


class MailError(Exception):
    """Base class for all mailables errors."""

    code = "mail_error"


class ConfigurationError(MailError, ValueError):
    """Raised when required configuration is missing or invalid."""

    code = "configuration_error"


class UnsupportedTransportError(ConfigurationError):
    """Raised when a transport configuration carries an unknown type tag."""

    code = "unsupported_transport"

    def __init__(self, transport: str | None):
        self.transport = transport
        super().__init__(f"Unsupported transport type: {transport or 'unknown'}")


class UnsupportedTemplateEngineError(ConfigurationError):
    """Raised when a template engine identifier is unknown or not registered."""

    code = "unsupported_template_engine"

    def __init__(self, engine: str, supported: tuple[str, ...] | list[str] = ()):
        self.engine = engine
        message = f"Unsupported template engine '{engine}'"
        if supported:
            message += f". Supported engines: {', '.join(supported)}"
        super().__init__(message)


class AttachmentError(MailError):
    """Raised when an attachment source cannot be resolved to bytes."""

    code = "attachment_error"

    def __init__(self, filename: str | None, source: str | None, reason: str):
        self.filename = filename
        self.source = source
        super().__init__(f"Attachment {filename or source or '<unnamed>'} could not be loaded: {reason}")


class TemplateError(MailError):
    """Base class for template engine failures."""

    code = "template_error"


class TemplatePackageUnavailableError(TemplateError):
    """Raised when the package backing a template engine is not installed."""

    code = "template_package_unavailable"

    def __init__(self, engine: str, package: str):
        self.engine = engine
        self.package = package
        super().__init__(
            f"Template engine '{engine}' is not available. "
            f"Please install it with: pip install {package}"
        )


class TemplateNotFoundError(TemplateError):
    """Raised when a template file cannot be located or read."""

    code = "template_not_found"

    def __init__(self, template: str, path: str, reason: str | None = None):
        self.template = template
        self.path = path
        message = f"Failed to load template file '{template}' ({path})"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class TemplateRenderError(TemplateError):
    """Raised when a template fails to compile or render."""

    code = "template_render_error"

    def __init__(self, engine: str, template: str | None, reason: str):
        self.engine = engine
        self.template = template
        if template:
            message = f"Failed to render {engine} template '{template}': {reason}"
        else:
            message = f"Failed to compile {engine} template: {reason}"
        super().__init__(message)


class TransportError(MailError):
    """Raised when a delivery provider rejects or fails a dispatch."""

    code = "transport_error"

    def __init__(self, provider: str, original: Exception | str):
        self.provider = provider
        self.original = original
        super().__init__(f"{provider} transport failed: {original}")


class MailValidationError(MailError, ValueError):
    """Raised when a message cannot be dispatched as composed."""

    code = "validation_error"


class RecipientRequiredError(MailValidationError):
    """Raised by a transport when a message has no to/cc/bcc recipient."""

    code = "recipient_required"

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"{provider}: at least one recipient (to, cc or bcc) is required")


class SenderRequiredError(MailValidationError):
    """Raised by providers that cannot dispatch without a From address."""

    code = "sender_required"

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"{provider}: a From address is required")


__all__ = [
    "AttachmentError",
    "ConfigurationError",
    "MailError",
    "MailValidationError",
    "RecipientRequiredError",
    "SenderRequiredError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplatePackageUnavailableError",
    "TemplateRenderError",
    "TransportError",
    "UnsupportedTemplateEngineError",
    "UnsupportedTransportError",
]
