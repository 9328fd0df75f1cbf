# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Delivery provider adapters."""

from .base import MailTransport, format_address, format_address_header
from .mailgun import MailgunTransport
from .mailjet import MailjetTransport
from .mime import build_mime_message
from .resend import ResendTransport
from .ses import SesTransport
from .smtp import SmtpTransport
from .smtp_pool import SMTPPool

__all__ = [
    "MailTransport",
    "MailgunTransport",
    "MailjetTransport",
    "ResendTransport",
    "SMTPPool",
    "SesTransport",
    "SmtpTransport",
    "build_mime_message",
    "format_address",
    "format_address_header",
]
