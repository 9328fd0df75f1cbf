"""Tests for the mail service orchestration."""

from unittest.mock import AsyncMock

import pytest

from mailables.builder import MailableBuilder
from mailables.config import MailConfig, TemplateConfig
from mailables.errors import ConfigurationError, RecipientRequiredError, TemplateNotFoundError
from mailables.mailable import ContentDeclaration, Envelope, Mailable
from mailables.models import Address, Content
from mailables.service import MailService
from mailables.transports import MailTransport, ResendTransport, SmtpTransport

SMTP = {"type": "smtp", "host": "smtp.example.com", "auth": {"user": "u", "pass": "p"}}


class RecordingTransport(MailTransport):
    provider = "recording"

    def __init__(self):
        super().__init__()
        self.sent = []
        self.close = AsyncMock()

    async def _deliver(self, content):
        self.sent.append(content)
        return {"message_id": f"rec-{len(self.sent)}"}


class Welcome(Mailable):
    def __init__(self, name):
        self.name = name

    def envelope(self):
        return Envelope(subject="Welcome")

    def content(self):
        return ContentDeclaration(template="welcome", context={"name": self.name})


@pytest.fixture
def templates(tmp_path):
    (tmp_path / "welcome.j2").write_text("<p>Hello {{ name }}</p>")
    return TemplateConfig(directory=str(tmp_path))


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def service(templates, transport):
    config = MailConfig(
        transport=SMTP,
        mailers={"marketing": {"type": "resend", "api_key": "re_123"}},
        from_address="Shop <shop@example.com>",
        reply_to="support@example.com",
        templates=templates,
    )
    return MailService(config, transport=transport)


@pytest.mark.asyncio
async def test_send_content_applies_defaults(service, transport):
    result = await service.send(Content(to="a@example.com", subject="S", text="hi"))

    assert result == {"message_id": "rec-1"}
    [sent] = transport.sent
    assert sent.from_ == Address(address="shop@example.com", name="Shop")
    assert sent.reply_to == Address(address="support@example.com")


@pytest.mark.asyncio
async def test_explicit_from_and_reply_to_win(service, transport):
    await service.send(
        Content(to="a@example.com", from_="other@example.com", reply_to="r@example.com", text="hi")
    )
    [sent] = transport.sent
    assert sent.from_.address == "other@example.com"
    assert sent.reply_to == Address(address="r@example.com")


@pytest.mark.asyncio
async def test_mailable_template_rendered_before_dispatch(service, transport):
    await service.to("a@example.com").send(Welcome("Ada"))

    [sent] = transport.sent
    assert sent.html == "<p>Hello Ada</p>"
    assert sent.subject == "Welcome"
    assert sent.to == [Address(address="a@example.com")]


@pytest.mark.asyncio
async def test_builder_and_mapping_messages(service, transport):
    await service.send(MailableBuilder().to("a@example.com").template("welcome").with_("name", "Bob"))
    await service.send({"to": "b@example.com", "from": "x@example.com", "text": "hi"})

    assert transport.sent[0].html == "<p>Hello Bob</p>"
    assert transport.sent[1].from_.address == "x@example.com"


@pytest.mark.asyncio
async def test_accumulated_recipients_win(service, transport):
    message = Content(to="original@example.com", cc="keep@example.com", text="hi")
    await service.to("a@example.com").to("b@example.com").bcc("audit@example.com").send(message)

    [sent] = transport.sent
    assert [item.address for item in sent.to] == ["a@example.com", "b@example.com"]
    assert sent.cc == Address(address="keep@example.com")
    assert [item.address for item in sent.bcc] == ["audit@example.com"]


@pytest.mark.asyncio
async def test_missing_template_surfaces(service, transport):
    with pytest.raises(TemplateNotFoundError):
        await service.send(Content(to="a@example.com", template="missing"))
    assert transport.sent == []


@pytest.mark.asyncio
async def test_recipient_validation_happens_in_transport(service, transport):
    with pytest.raises(RecipientRequiredError):
        await service.send(Content(subject="S", text="hi"))


@pytest.mark.asyncio
async def test_send_rejects_unknown_message_type(service):
    with pytest.raises(TypeError):
        await service.send(42)


def test_transport_built_from_config(templates):
    service = MailService(MailConfig(transport=SMTP, templates=templates))
    assert isinstance(service.transport, SmtpTransport)


def test_mailer_returns_independent_service(service):
    marketing = service.mailer("marketing")

    assert marketing is not service
    assert isinstance(marketing.transport, ResendTransport)
    assert marketing.template_engine is service.template_engine
    assert marketing.config.from_address == service.config.from_address
    assert isinstance(service.transport, RecordingTransport)


def test_unknown_mailer(service):
    with pytest.raises(ConfigurationError) as exc_info:
        service.mailer("transactional")
    assert "transactional" in str(exc_info.value)


@pytest.mark.asyncio
async def test_lifecycle_delegates_to_transport(service, transport):
    async with service:
        assert await service.verify() is True
    transport.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_markdown_body_rendered_to_html(service, transport):
    pytest.importorskip("markdown")
    await service.send(MailableBuilder().to("a@example.com").markdown("# News\n\nHello **Ada**"))

    [sent] = transport.sent
    assert sent.html == "<h1>News</h1>\n<p>Hello <strong>Ada</strong></p>"
