"""Tests for declarative mailables and their assembly."""

import pytest

from mailables.attachments import AttachmentSource
from mailables.errors import AttachmentError
from mailables.mailable import (
    ContentDeclaration,
    Envelope,
    Headers,
    Mailable,
    assemble,
    merge_headers,
)


class OrderShipped(Mailable):
    def __init__(self, attachments=None, headers=None):
        self._attachments = attachments or []
        self._headers = headers or Headers()

    def envelope(self):
        return Envelope(subject="Shipped", tags=["orders", "shipment"], metadata={"order_id": 42})

    def content(self):
        return ContentDeclaration(template="orders/shipped", context={"order": {"id": 42}})

    def headers(self):
        return self._headers

    def attachments(self):
        return list(self._attachments)


class RawBody(Mailable):
    def envelope(self):
        return Envelope(subject="Raw")

    def content(self):
        return ContentDeclaration(html="<p>Hi</p>", text="Hi")


@pytest.mark.asyncio
async def test_envelope_and_template_are_mapped():
    content = await OrderShipped().build()

    assert content.subject == "Shipped"
    assert content.tags == ["orders", "shipment"]
    assert content.metadata == {"order_id": 42}
    assert content.template == "orders/shipped"
    assert content.context == {"order": {"id": 42}}
    assert content.html is None
    assert content.has_recipients is False


@pytest.mark.asyncio
async def test_raw_body_is_copied():
    content = await assemble(RawBody())
    assert content.html == "<p>Hi</p>"
    assert content.text == "Hi"
    assert content.template is None


@pytest.mark.asyncio
async def test_assembly_is_idempotent(tmp_path):
    path = tmp_path / "invoice.pdf"
    path.write_bytes(b"%PDF-1.4")
    mailable = OrderShipped(
        attachments=[AttachmentSource.from_path(path), AttachmentSource.from_data("ABC", "f.txt")],
        headers=Headers(message_id="<1@shop.test>", references=["a", "b"]),
    )

    first = await mailable.build()
    second = await mailable.build()
    assert first == second


@pytest.mark.asyncio
async def test_data_attachment_reaches_content_unchanged():
    content = await OrderShipped(attachments=[AttachmentSource.from_data("ABC", "f.txt")]).build()

    [attachment] = content.attachments
    assert attachment.filename == "f.txt"
    assert attachment.content == b"ABC"


@pytest.mark.asyncio
async def test_unreadable_attachment_aborts_assembly(tmp_path):
    mailable = OrderShipped(attachments=[AttachmentSource.from_path(tmp_path / "missing.pdf")])
    with pytest.raises(AttachmentError):
        await mailable.build()


@pytest.mark.asyncio
async def test_storage_dir_is_forwarded(tmp_path):
    (tmp_path / "terms.txt").write_text("terms")
    mailable = OrderShipped(attachments=[AttachmentSource.from_storage("terms.txt")])

    content = await mailable.build(storage_dir=tmp_path)
    assert content.attachments[0].content == b"terms"


def test_later_header_overwrites_earlier():
    headers = Headers().header("X", "1").header("X", "2")
    assert merge_headers(headers) == {"X": "2"}


def test_references_joined_with_single_space():
    assert merge_headers(Headers(references=["a", "b"])) == {"References": "a b"}


def test_message_id_header():
    merged = merge_headers(Headers(message_id="<id@example.com>", text={"X-Campaign": "spring"}))
    assert merged == {"X-Campaign": "spring", "Message-ID": "<id@example.com>"}


@pytest.mark.asyncio
async def test_headers_reach_content():
    headers = Headers(references=["a", "b"]).header("X", "1").header("X", "2")
    content = await OrderShipped(headers=headers).build()
    assert content.headers == {"X": "2", "References": "a b"}


class Newsletter(Mailable):
    def envelope(self):
        return Envelope(subject="News")

    def content(self):
        return ContentDeclaration(markdown="# Issue 3", context={"issue": 3})


@pytest.mark.asyncio
async def test_markdown_body_uses_markdown_template():
    content = await Newsletter().build()
    assert content.template == "markdown"
    assert content.context == {"markdown": "# Issue 3", "issue": 3}
    assert content.html is None
