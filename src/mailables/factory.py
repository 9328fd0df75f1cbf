# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Construction of transport adapters from tagged configuration values.

``create_transport`` dispatches once on the configuration's ``type`` tag.
Built-in tags are validated against their configuration model first, so a
missing required field fails here rather than at the first send. Other
tags are looked up among custom transports registered by the application.

Example:
    Registering a custom transport::

        factory = MailTransportFactory()
        factory.register_custom_transport("log", lambda config: LogTransport(config))
        transport = factory.create_transport({"type": "log", "level": "info"})
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from .config import TRANSPORT_CONFIG_TYPES
from .errors import ConfigurationError, UnsupportedTransportError
from .logger import get_logger
from .transports import (
    MailgunTransport,
    MailjetTransport,
    MailTransport,
    ResendTransport,
    SesTransport,
    SmtpTransport,
)

logger = get_logger("mailables.factory")

CustomTransportFactory = Callable[[Any], MailTransport]

BUILTIN_TRANSPORTS: dict[str, Callable[[Any], MailTransport]] = {
    "smtp": SmtpTransport,
    "ses": SesTransport,
    "mailgun": MailgunTransport,
    "mailjet": MailjetTransport,
    "resend": ResendTransport,
}


def _transport_tag(config: Any) -> str | None:
    if isinstance(config, Mapping):
        return config.get("type")
    return getattr(config, "type", None)


def _missing_fields(exc: ValidationError) -> list[str]:
    missing: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "configuration"
        if location not in missing:
            missing.append(location)
    return missing


class MailTransportFactory:
    """Select and construct the adapter matching a transport configuration."""

    def __init__(self) -> None:
        self._custom: dict[str, CustomTransportFactory] = {}

    def register_custom_transport(self, name: str, factory: CustomTransportFactory) -> None:
        """Register a constructor for configurations tagged ``name``.

        Raises:
            ConfigurationError: If ``name`` is a built-in transport.
        """
        if name in BUILTIN_TRANSPORTS:
            raise ConfigurationError(f"Cannot override built-in transport '{name}'")
        self._custom[name] = factory

    def available_transports(self) -> list[str]:
        return [*BUILTIN_TRANSPORTS, *sorted(self._custom)]

    def validate_config(self, config: Any) -> BaseModel:
        """Return the typed configuration model for a built-in transport.

        Raises:
            ConfigurationError: If required fields are missing or invalid.
        """
        tag = _transport_tag(config)
        model = TRANSPORT_CONFIG_TYPES[tag]
        if isinstance(config, model):
            return config
        data = config if isinstance(config, Mapping) else config.model_dump(by_alias=True)
        try:
            return model.model_validate(dict(data))
        except ValidationError as exc:
            fields = ", ".join(_missing_fields(exc))
            raise ConfigurationError(f"{tag} transport requires {fields} configuration") from exc

    def create_transport(self, config: Any) -> MailTransport:
        """Construct the adapter for ``config``.

        Args:
            config: A transport configuration model, or a mapping with a
                ``type`` key.

        Raises:
            ConfigurationError: If required fields are missing.
            UnsupportedTransportError: If the tag is neither built-in nor registered.
        """
        tag = _transport_tag(config)
        if tag in BUILTIN_TRANSPORTS:
            transport = BUILTIN_TRANSPORTS[tag](self.validate_config(config))
        elif tag in self._custom:
            transport = self._custom[tag](config)
        else:
            raise UnsupportedTransportError(tag)
        logger.debug("Created %s transport", tag)
        return transport


__all__ = ["BUILTIN_TRANSPORTS", "MailTransportFactory"]
