# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Configuration for transports, template engines and the mail service.

Transport configurations are pydantic models forming a closed sum type
discriminated on ``type``; each variant declares exactly the fields its
adapter needs, and required fields are enforced when the model is built.
Service-level settings are plain dataclasses grouping the constructor
inputs supplied by the host application:

- ``MailConfig.transport``: the active transport configuration
- ``MailConfig.mailers``: named alternate transport configurations
- ``MailConfig.templates``: template engine settings
- ``MailConfig.from_address`` / ``MailConfig.reply_to``: global defaults

Example:
    Building a service configuration::

        config = MailConfig(
            transport=SmtpTransportConfig(
                host="smtp.example.com",
                auth=SmtpAuth(user="mailer", password="secret"),
            ),
            mailers={"marketing": {"type": "resend", "api_key": "re_123"}},
            from_address="Example <hello@example.com>",
            templates=TemplateConfig(engine="jinja2", directory="templates"),
        )
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .models import Address, coerce_address


class _FrozenConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


class SmtpAuth(_FrozenConfig):
    """SMTP credentials (``pass`` is accepted as an alias for ``password``)."""

    user: Annotated[str, Field(min_length=1, description="SMTP username")]
    password: Annotated[str, Field(min_length=1, alias="pass", description="SMTP password")]


class SmtpTransportConfig(_FrozenConfig):
    """Direct SMTP relay settings.

    Attributes:
        host: SMTP server hostname.
        port: Server port.
        secure: Use implicit TLS (typically port 465).
        ignore_tls: Never upgrade the connection with STARTTLS.
        auth: Credentials.
        pool_ttl: Seconds a pooled connection may be reused.
        timeout: Connection timeout in seconds.
    """

    type: Literal["smtp"] = "smtp"
    host: Annotated[str, Field(min_length=1)]
    port: Annotated[int, Field(default=587, gt=0, lt=65536)]
    secure: bool = False
    ignore_tls: bool = False
    auth: SmtpAuth
    pool_ttl: Annotated[int, Field(default=300, ge=0)]
    timeout: Annotated[float, Field(default=10.0, gt=0)]


class SesCredentials(_FrozenConfig):
    """AWS credential pair, with an optional session token."""

    access_key_id: Annotated[str, Field(min_length=1)]
    secret_access_key: Annotated[str, Field(min_length=1)]
    session_token: str | None = None


class SesTransportConfig(_FrozenConfig):
    """Amazon SES settings.

    Attributes:
        region: AWS region name.
        credentials: AWS credential pair.
        endpoint: Optional endpoint URL override (e.g. a local SES mock).
        configuration_set: Optional SES configuration set name.
    """

    type: Literal["ses"] = "ses"
    region: Annotated[str, Field(min_length=1)]
    credentials: SesCredentials
    endpoint: str | None = None
    configuration_set: str | None = None


class MailgunOptions(_FrozenConfig):
    """Mailgun API settings."""

    domain: Annotated[str, Field(min_length=1)]
    api_key: Annotated[str, Field(min_length=1)]
    host: str = "api.mailgun.net"
    protocol: Literal["http", "https"] = "https"
    timeout: Annotated[float, Field(default=30.0, gt=0)]


class MailgunTransportConfig(_FrozenConfig):
    type: Literal["mailgun"] = "mailgun"
    options: MailgunOptions


class MailjetOptions(_FrozenConfig):
    """Mailjet API key pair."""

    api_key: Annotated[str, Field(min_length=1)]
    api_secret: Annotated[str, Field(min_length=1)]
    timeout: Annotated[float, Field(default=30.0, gt=0)]


class MailjetTransportConfig(_FrozenConfig):
    type: Literal["mailjet"] = "mailjet"
    options: MailjetOptions


class ResendTransportConfig(_FrozenConfig):
    type: Literal["resend"] = "resend"
    api_key: Annotated[str, Field(min_length=1)]
    base_url: str = "https://api.resend.com"
    timeout: Annotated[float, Field(default=30.0, gt=0)]


TransportConfig = Annotated[
    Union[
        SmtpTransportConfig,
        SesTransportConfig,
        MailgunTransportConfig,
        MailjetTransportConfig,
        ResendTransportConfig,
    ],
    Field(discriminator="type"),
]

TRANSPORT_CONFIG_TYPES: dict[str, type[BaseModel]] = {
    "smtp": SmtpTransportConfig,
    "ses": SesTransportConfig,
    "mailgun": MailgunTransportConfig,
    "mailjet": MailjetTransportConfig,
    "resend": ResendTransportConfig,
}

_transport_adapter: TypeAdapter[Any] = TypeAdapter(TransportConfig)


def parse_transport_config(data: Mapping[str, Any]) -> BaseModel:
    """Validate a raw mapping into the matching transport configuration.

    Raises:
        pydantic.ValidationError: If the tag is unknown or fields are invalid.
    """
    return _transport_adapter.validate_python(dict(data))


@dataclass
class TemplateConfig:
    """Template engine settings.

    Attributes:
        engine: Engine identifier (``handlebars``, ``jinja2`` or ``mako``).
        directory: Root directory holding template files.
        main_file: Template used when a render call passes an empty name.
        partials: Partial name to template path (relative to ``directory``).
        helpers: Helper name to callable, for engines supporting helpers.
        options: Extra keyword options forwarded to the engine.
    """

    engine: str = "jinja2"
    directory: str = "templates"
    main_file: str = "main"
    partials: dict[str, str] = field(default_factory=dict)
    helpers: dict[str, Callable[..., Any]] = field(default_factory=dict)
    options: dict[str, Any] = field(default_factory=dict)


@dataclass
class MailConfig:
    """Main configuration container for :class:`~mailables.service.MailService`.

    Attributes:
        transport: Active transport configuration, either a transport model
            or a raw mapping with a ``type`` key (custom transports included).
        mailers: Named alternate transport configurations for ``mailer()``.
        from_address: Global From applied to messages that have none.
        reply_to: Global Reply-To applied to messages that have none.
        templates: Template engine settings; ``None`` uses the defaults.
        storage_dir: Root for storage-relative attachments; ``None`` means
            ``<cwd>/storage``.
    """

    transport: Any
    mailers: dict[str, Any] = field(default_factory=dict)
    from_address: Address | str | Mapping[str, Any] | None = None
    reply_to: Address | str | Mapping[str, Any] | None = None
    templates: TemplateConfig | None = None
    storage_dir: str | None = None

    def __post_init__(self) -> None:
        if self.from_address is not None:
            self.from_address = coerce_address(self.from_address)
        if self.reply_to is not None:
            self.reply_to = coerce_address(self.reply_to)


__all__ = [
    "MailConfig",
    "MailgunOptions",
    "MailgunTransportConfig",
    "MailjetOptions",
    "MailjetTransportConfig",
    "ResendTransportConfig",
    "SesCredentials",
    "SesTransportConfig",
    "SmtpAuth",
    "SmtpTransportConfig",
    "TRANSPORT_CONFIG_TYPES",
    "TemplateConfig",
    "TransportConfig",
    "parse_transport_config",
]
