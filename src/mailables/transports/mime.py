# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Rendering of :class:`Content` into a MIME message.

Used by the SMTP and SES adapters, which both hand a complete RFC 5322
message to the provider.
"""

from __future__ import annotations

from email.message import EmailMessage
from email.utils import formatdate, make_msgid

from ..attachments import split_mime
from ..models import Content
from .base import format_address, format_address_header


def build_mime_message(content: Content) -> EmailMessage:
    """Build an ``EmailMessage`` from a Content value.

    Address headers are only present when the matching field is set. Custom
    headers replace generated ones with the same name. ``Message-ID`` and
    ``Date`` are generated when the custom headers do not supply them. The
    body is ``text/plain`` with an ``text/html`` alternative when both are
    set, otherwise whichever one is set.
    """
    msg = EmailMessage()
    if content.from_ is not None:
        msg["From"] = format_address(content.from_)
    for header, value in (
        ("To", content.to),
        ("Cc", content.cc),
        ("Bcc", content.bcc),
        ("Reply-To", content.reply_to),
    ):
        if formatted := format_address_header(value):
            msg[header] = formatted
    msg["Subject"] = content.subject or ""

    for header, value in content.headers.items():
        if header in msg:
            msg.replace_header(header, value)
        else:
            msg[header] = value
    if "Message-ID" not in msg:
        domain = content.from_.address.split("@", 1)[1] if content.from_ else None
        msg["Message-ID"] = make_msgid(domain=domain)
    if "Date" not in msg:
        msg["Date"] = formatdate(localtime=True)

    if content.text is not None and content.html is not None:
        msg.set_content(content.text)
        msg.add_alternative(content.html, subtype="html")
    elif content.html is not None:
        msg.set_content(content.html, subtype="html")
    else:
        msg.set_content(content.text or "")

    for attachment in content.attachments:
        maintype, subtype = split_mime(attachment)
        msg.add_attachment(attachment.content, maintype=maintype, subtype=subtype, filename=attachment.filename)
    return msg


__all__ = ["build_mime_message"]
