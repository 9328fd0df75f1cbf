# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Pydantic models for the normalized email representation.

This module defines the transport-ready value types shared by every other
component: the assembly pipeline produces them, the mail service enriches
them, and the transport adapters translate them to wire formats.

Models:
    - Address: One mailbox (address plus optional display name)
    - Attachment: A fully loaded attachment payload
    - Content: The normalized message handed to a transport

Address fields accept loose inputs (``"a@b.c"``, ``"Name <a@b.c>"``, mappings
with ``address``/``name`` or ``email``/``name`` keys, :class:`Address`
instances, or ordered lists of any of those) and normalize them on
validation. A single value stays single and a list stays a list, since some
providers format the two shapes differently.
"""

from __future__ import annotations

from collections.abc import Mapping
from email.utils import parseaddr
from typing import Annotated, Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = r"^[^@\s<>]+@[^@\s<>]+$"


class Address(BaseModel):
    """A single mailbox.

    Attributes:
        address: The email address.
        name: Optional display name.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    address: Annotated[
        str,
        Field(pattern=EMAIL_PATTERN, description="Email address")
    ]
    name: Annotated[
        str | None,
        Field(default=None, description="Display name")
    ]

    def __str__(self) -> str:
        if self.name:
            return f"{self.name} <{self.address}>"
        return self.address


AddressInput = Union[str, Address, Mapping[str, Any]]
Recipients = Union[Address, list[Address], None]


def coerce_address(value: AddressInput) -> Address:
    """Normalize one loose address input into an :class:`Address`.

    Raises:
        TypeError: If the value has an unsupported type.
        pydantic.ValidationError: If the address is not email-shaped.
    """
    if isinstance(value, Address):
        return value
    if isinstance(value, str):
        name, address = parseaddr(value.strip())
        return Address(address=address or value.strip(), name=name or None)
    if isinstance(value, Mapping):
        address = value.get("address") or value.get("email")
        return Address(address=address, name=value.get("name") or None)
    raise TypeError(f"Unsupported address value: {value!r}")


def coerce_recipients(value: Any) -> Address | list[Address] | None:
    """Normalize a single address or an ordered list of addresses.

    ``None`` and empty lists both mean "absent".
    """
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        items = [coerce_address(item) for item in value if item]
        return items or None
    if isinstance(value, str) and not value.strip():
        return None
    return coerce_address(value)


def as_address_list(value: Address | list[Address] | None) -> list[Address]:
    """Return the addresses of a recipient field as a list, preserving order."""
    if value is None:
        return []
    if isinstance(value, list):
        return list(value)
    return [value]


class Attachment(BaseModel):
    """An attachment whose source has already been resolved to bytes.

    Attributes:
        filename: Name presented to the recipient.
        content: Raw payload.
        content_type: Optional MIME type; transports guess it from the
            filename when absent.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    filename: Annotated[
        str,
        Field(min_length=1, description="Attachment file name")
    ]
    content: Annotated[
        bytes,
        Field(description="Attachment payload")
    ]
    content_type: Annotated[
        str | None,
        Field(default=None, description="MIME type, e.g. application/pdf")
    ]


class Content(BaseModel):
    """The normalized, transport-ready representation of one email.

    A Content value may be partially built: recipients are only checked by
    the transport at dispatch time. Instances are immutable; the mail
    service derives enriched copies with ``model_copy(update=...)``.

    Attributes:
        subject: Subject line.
        from_: Sender (``from`` when validating mappings).
        to: Primary recipients.
        cc: Carbon-copy recipients.
        bcc: Blind carbon-copy recipients.
        reply_to: Reply-To mailbox(es).
        html: HTML body.
        text: Plain-text body.
        template: Template name rendered into ``html`` before dispatch.
        context: Template context.
        attachments: Loaded attachments, in declaration order.
        headers: Extra headers; one value per name.
        tags: Free-form labels, in declaration order.
        metadata: Provider-side tracking data.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    subject: str | None = None
    from_: Annotated[Address | None, Field(default=None, alias="from")]
    to: Recipients = None
    cc: Recipients = None
    bcc: Recipients = None
    reply_to: Recipients = None
    html: str | None = None
    text: str | None = None
    template: str | None = None
    context: dict[str, Any] | None = None
    attachments: list[Attachment] = Field(default_factory=list)
    headers: dict[str, str] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("from_", mode="before")
    @classmethod
    def _coerce_sender(cls, value: Any) -> Any:
        if value is None or isinstance(value, Address):
            return value
        return coerce_address(value)

    @field_validator("to", "cc", "bcc", "reply_to", mode="before")
    @classmethod
    def _coerce_recipients(cls, value: Any) -> Any:
        return coerce_recipients(value)

    @field_validator("headers", mode="before")
    @classmethod
    def _stringify_headers(cls, value: Any) -> Any:
        if value is None:
            return {}
        return {str(key): str(item) for key, item in dict(value).items()}

    def recipients(self) -> list[Address]:
        """Return every to/cc/bcc address, in that order."""
        return as_address_list(self.to) + as_address_list(self.cc) + as_address_list(self.bcc)

    @property
    def has_recipients(self) -> bool:
        return bool(self.recipients())


__all__ = [
    "Address",
    "AddressInput",
    "Attachment",
    "Content",
    "Recipients",
    "as_address_list",
    "coerce_address",
    "coerce_recipients",
]
