import pytest

from mailables.attachments import AttachmentSource
from mailables.builder import MailableBuilder
from mailables.models import Address, Attachment


@pytest.mark.asyncio
async def test_build_snapshot():
    content = await (
        MailableBuilder.create()
        .subject("Welcome")
        .from_("Shop <shop@example.com>")
        .to(["a@example.com", "b@example.com"])
        .cc("c@example.com")
        .reply_to("support@example.com")
        .html("<p>Hi</p>")
        .text("Hi")
        .tag("onboarding")
        .tags(["welcome", "v2"])
        .metadata("user_id", 7)
        .build()
    )

    assert content.subject == "Welcome"
    assert content.from_ == Address(address="shop@example.com", name="Shop")
    assert [item.address for item in content.to] == ["a@example.com", "b@example.com"]
    assert content.cc == Address(address="c@example.com")
    assert content.reply_to == Address(address="support@example.com")
    assert content.tags == ["onboarding", "welcome", "v2"]
    assert content.metadata == {"user_id": 7}


@pytest.mark.asyncio
async def test_template_context_merges():
    content = await MailableBuilder().template("welcome", {"name": "Ada"}).with_("plan", "pro").with_({"seats": 3}).build()
    assert content.template == "welcome"
    assert content.context == {"name": "Ada", "plan": "pro", "seats": 3}


@pytest.mark.asyncio
async def test_last_header_write_wins():
    content = await MailableBuilder().header("X", "1").headers({"X": "2", "Y": "y"}).build()
    assert content.headers == {"X": "2", "Y": "y"}


@pytest.mark.asyncio
async def test_attachments_resolved_in_order(tmp_path):
    path = tmp_path / "a.txt"
    path.write_text("A")
    storage = tmp_path / "storage"
    storage.mkdir()
    (storage / "d.txt").write_text("D")
    preloaded = Attachment(filename="b.txt", content=b"B")

    content = await (
        MailableBuilder()
        .attach_from_path(path)
        .attach(preloaded)
        .attach_data("ABC", "f.txt", mime="text/plain")
        .attach(AttachmentSource.from_storage("d.txt"))
        .build(storage_dir=storage)
    )

    assert [item.filename for item in content.attachments] == ["a.txt", "b.txt", "f.txt", "d.txt"]
    assert content.attachments[2].content == b"ABC"
    assert content.attachments[2].content_type == "text/plain"


@pytest.mark.asyncio
async def test_clones_do_not_share_state():
    base = MailableBuilder.create().subject("Base").with_("name", "Ada").header("X", "1")
    first = base.clone().to("a@example.com").with_("name", "Bob")
    second = base.clone().to("b@example.com").header("X", "2")

    first_content = await first.build()
    second_content = await second.build()
    base_content = await base.build()

    assert first_content.context == {"name": "Bob"}
    assert second_content.context == {"name": "Ada"}
    assert second_content.headers == {"X": "2"}
    assert base_content.to is None
    assert base_content.headers == {"X": "1"}


@pytest.mark.asyncio
async def test_build_twice_gives_equal_independent_values():
    builder = MailableBuilder().to("a@example.com").metadata({"k": [1, 2]})
    first = await builder.build()
    second = await builder.build()

    assert first == second
    assert first.metadata is not second.metadata


@pytest.mark.asyncio
async def test_markdown_replaces_template():
    content = await MailableBuilder().template("welcome", {"name": "Ada"}).markdown("Hi *Ada*").build()
    assert content.template == "markdown"
    assert content.context == {"name": "Ada", "markdown": "Hi *Ada*"}
