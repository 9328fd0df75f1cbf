"""Tests for the SMTP transport and MIME rendering."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from mailables.config import SmtpTransportConfig
from mailables.errors import RecipientRequiredError, TransportError
from mailables.models import Attachment, Content
from mailables.transports.mime import build_mime_message
from mailables.transports.smtp import SmtpTransport


def make_config(**overrides):
    data = {"host": "smtp.example.com", "auth": {"user": "mailer", "pass": "secret"}}
    data.update(overrides)
    return SmtpTransportConfig(**data)


@pytest.fixture
def smtp_client():
    client = MagicMock()
    client.send_message = AsyncMock(return_value=({}, "250 OK queued"))
    return client


@pytest.fixture
def pool(smtp_client):
    pool = MagicMock()
    pool.get_connection = AsyncMock(return_value=smtp_client)
    pool.close_all = AsyncMock()
    return pool


@pytest.mark.asyncio
async def test_send_minimal_message(pool, smtp_client):
    transport = SmtpTransport(make_config(), pool=pool)
    content = Content(to="x@example.com", subject="S", html="<p>H</p>")

    result = await transport.send(content)

    msg = smtp_client.send_message.await_args.args[0]
    assert msg["To"] == "x@example.com"
    assert "Cc" not in msg
    assert "Bcc" not in msg
    assert "Reply-To" not in msg
    assert msg["Subject"] == "S"
    assert msg.get_content_type() == "text/html"
    assert smtp_client.send_message.await_args.kwargs["sender"] == "mailer"
    assert result["accepted"] == ["x@example.com"]
    assert result["rejected"] == []
    assert result["message_id"] == msg["Message-ID"]


@pytest.mark.asyncio
async def test_connection_parameters(pool):
    transport = SmtpTransport(make_config(port=465, secure=True), pool=pool)
    await transport.send(Content(to="x@example.com", text="hi"))

    pool.get_connection.assert_awaited_once_with(
        "smtp.example.com", 465, "mailer", "secret", use_tls=True, start_tls=None
    )


@pytest.mark.asyncio
async def test_ignore_tls_disables_starttls(pool):
    transport = SmtpTransport(make_config(ignore_tls=True), pool=pool)
    await transport.send(Content(to="x@example.com", text="hi"))
    assert pool.get_connection.await_args.kwargs["start_tls"] is False


@pytest.mark.asyncio
async def test_sender_defaults_to_from(pool, smtp_client):
    transport = SmtpTransport(make_config(), pool=pool)
    await transport.send(Content(from_="Shop <shop@example.com>", to="x@example.com", text="hi"))
    assert smtp_client.send_message.await_args.kwargs["sender"] == "shop@example.com"


@pytest.mark.asyncio
async def test_rejected_recipients_reported(pool, smtp_client):
    smtp_client.send_message.return_value = ({"b@example.com": (550, "no such user")}, "250 OK")
    transport = SmtpTransport(make_config(), pool=pool)

    result = await transport.send(Content(to=["a@example.com", "b@example.com"], text="hi"))
    assert result["accepted"] == ["a@example.com"]
    assert result["rejected"] == ["b@example.com"]


@pytest.mark.asyncio
async def test_requires_recipient(pool, smtp_client):
    transport = SmtpTransport(make_config(), pool=pool)
    with pytest.raises(RecipientRequiredError):
        await transport.send(Content(subject="S", html="<p>H</p>"))
    pool.get_connection.assert_not_awaited()
    smtp_client.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_failure_wrapped_with_provider_name(pool, smtp_client):
    smtp_client.send_message.side_effect = ConnectionRefusedError("connection refused")
    transport = SmtpTransport(make_config(), pool=pool)

    with pytest.raises(TransportError) as exc_info:
        await transport.send(Content(to="x@example.com", text="hi"))
    assert str(exc_info.value).startswith("smtp")
    assert "connection refused" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, ConnectionRefusedError)


@pytest.mark.asyncio
async def test_verify_degrades_to_false(pool):
    pool.get_connection.side_effect = OSError("unreachable")
    transport = SmtpTransport(make_config(), pool=pool)
    assert await transport.verify() is False


@pytest.mark.asyncio
async def test_async_context_closes_pool(pool):
    async with SmtpTransport(make_config(), pool=pool) as transport:
        assert await transport.verify() is True
    pool.close_all.assert_awaited_once()


class TestBuildMimeMessage:
    def test_address_headers_and_custom_headers(self):
        content = Content(
            from_="Shop <shop@example.com>",
            to=["Ada <a@example.com>", "b@example.com"],
            cc="c@example.com",
            bcc="d@example.com",
            reply_to="support@example.com",
            subject="Hello",
            text="plain",
            html="<p>html</p>",
            headers={"Message-ID": "<1@shop.test>", "References": "a b", "X-Campaign": "spring"},
        )
        msg = build_mime_message(content)

        assert msg["From"] == "Shop <shop@example.com>"
        assert msg["To"] == "Ada <a@example.com>, b@example.com"
        assert msg["Cc"] == "c@example.com"
        assert msg["Bcc"] == "d@example.com"
        assert msg["Reply-To"] == "support@example.com"
        assert msg["Message-ID"] == "<1@shop.test>"
        assert msg["References"] == "a b"
        assert msg["X-Campaign"] == "spring"
        assert msg["Date"] is not None
        assert msg.get_content_type() == "multipart/alternative"

    def test_generated_message_id_uses_sender_domain(self):
        msg = build_mime_message(Content(from_="shop@example.com", to="x@example.com", text="hi"))
        assert msg["Message-ID"].endswith("@example.com>")

    def test_attachments(self):
        content = Content(
            to="x@example.com",
            text="see attached",
            attachments=[
                Attachment(filename="f.txt", content=b"ABC"),
                Attachment(filename="data.bin", content=b"\x00", content_type="application/x-custom"),
            ],
        )
        msg = build_mime_message(content)
        parts = list(msg.iter_attachments())

        assert [part.get_filename() for part in parts] == ["f.txt", "data.bin"]
        assert parts[0].get_content() == "ABC"
        assert parts[1].get_content_type() == "application/x-custom"
        assert parts[1].get_content() == b"\x00"
