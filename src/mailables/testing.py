# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""In-memory transport for application test suites.

:class:`FakeTransport` records every message it receives, in order, and
returns a synthetic result without delivering anything. :class:`MailFake`
is a :class:`~mailables.service.MailService` wired to one, so messages go
through the same assembly, rendering and defaults as in production.

Example:
    Asserting on sent mail::

        mail = MailService(config).fake()
        await mail.to("ada@example.com").send(WelcomeMail(user))

        mail.assert_sent_count(1)
        mail.assert_sent(lambda content: content.subject == "Welcome!")
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .config import MailConfig
from .models import Content
from .service import MailService
from .templates import BaseTemplateEngine
from .transports import MailTransport

Predicate = Callable[[Content], bool]


class FakeTransport(MailTransport):
    """Transport that records messages instead of sending them.

    Recorded state only grows; use a new instance to start over.
    """

    provider = "fake"

    def __init__(self) -> None:
        super().__init__()
        self._sent: list[Content] = []

    async def send(self, content: Content) -> dict[str, str]:
        return await self._deliver(content)

    async def _deliver(self, content: Content) -> dict[str, str]:
        self._sent.append(content)
        return {"message_id": f"fake-{len(self._sent)}"}

    def get_sent_mails(self) -> list[Content]:
        """Return a copy of the recorded messages, oldest first."""
        return list(self._sent)

    def assert_sent(self, predicate: Predicate | None = None) -> None:
        """Assert that a message was sent, optionally one matching ``predicate``."""
        if not self._sent:
            raise AssertionError("No mail was sent")
        if predicate is not None and not any(predicate(content) for content in self._sent):
            raise AssertionError(f"No sent mail matched the given predicate ({len(self._sent)} sent)")

    def assert_sent_count(self, count: int) -> None:
        sent = len(self._sent)
        if sent != count:
            raise AssertionError(f"Expected {count} mails to be sent, but {sent} were sent")

    def assert_nothing_sent(self) -> None:
        self.assert_sent_count(0)


class MailFake(MailService):
    """Mail service that records messages through a :class:`FakeTransport`."""

    def __init__(
        self,
        config: MailConfig | None = None,
        *,
        template_engine: BaseTemplateEngine | None = None,
    ):
        self.fake_transport = FakeTransport()
        super().__init__(
            config or MailConfig(transport=None),
            transport=self.fake_transport,
            template_engine=template_engine,
        )

    def get_sent_mails(self) -> list[Content]:
        return self.fake_transport.get_sent_mails()

    def assert_sent(self, predicate: Predicate | None = None) -> None:
        self.fake_transport.assert_sent(predicate)

    def assert_sent_count(self, count: int) -> None:
        self.fake_transport.assert_sent_count(count)

    def assert_nothing_sent(self) -> None:
        self.fake_transport.assert_nothing_sent()

    def mailer(self, name: str) -> MailFake:
        """Return this fake; every mailer records into the same list."""
        return self

    def fake(self) -> MailFake:
        return self


__all__ = ["FakeTransport", "MailFake"]
