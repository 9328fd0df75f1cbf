import email
import email.header

import pytest

from mailables.config import SesTransportConfig
from mailables.errors import RecipientRequiredError, SenderRequiredError, TransportError
from mailables.models import Content
from mailables.transports.ses import SesTransport


class DummySesClient:
    def __init__(self, recorder):
        self.recorder = recorder

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def send_raw_email(self, **kwargs):
        if self.recorder.get("fail"):
            raise RuntimeError("MessageRejected: Email address is not verified")
        self.recorder["request"] = kwargs
        return {"MessageId": "ses-123"}

    async def get_send_quota(self):
        if self.recorder.get("fail"):
            raise RuntimeError("InvalidClientTokenId")
        return {"Max24HourSend": 200.0}


@pytest.fixture
def recorder(monkeypatch):
    recorder = {}

    class DummySession:
        def __init__(self, **kwargs):
            recorder["session"] = kwargs

        def client(self, name, endpoint_url=None):
            recorder["client"] = (name, endpoint_url)
            return DummySesClient(recorder)

    monkeypatch.setattr("mailables.transports.ses.aioboto3.Session", DummySession)
    return recorder


def make_transport(**overrides):
    data = {
        "region": "eu-west-1",
        "credentials": {"access_key_id": "AKIA", "secret_access_key": "secret"},
    }
    data.update(overrides)
    return SesTransport(SesTransportConfig(**data))


@pytest.mark.asyncio
async def test_send_raw_email(recorder):
    transport = make_transport(endpoint="http://localhost:4566", configuration_set="tracking")
    content = Content(
        from_="Shop <shop@example.com>",
        to="a@example.com",
        cc=["c@example.com"],
        bcc="hidden@example.com",
        subject="Hi",
        html="<p>Hi</p>",
        tags=["campaign:spring", "newsletter"],
    )

    result = await transport.send(content)

    assert result["message_id"] == "ses-123"
    assert recorder["client"] == ("ses", "http://localhost:4566")
    assert recorder["session"]["region_name"] == "eu-west-1"
    assert recorder["session"]["aws_access_key_id"] == "AKIA"

    request = recorder["request"]
    assert request["Source"] == "Shop <shop@example.com>"
    assert request["Destinations"] == ["a@example.com", "c@example.com", "hidden@example.com"]
    assert request["Tags"] == [
        {"Name": "campaign", "Value": "spring"},
        {"Name": "newsletter", "Value": "true"},
    ]
    assert request["ConfigurationSetName"] == "tracking"

    raw = email.message_from_bytes(request["RawMessage"]["Data"])
    assert raw["Bcc"] is None
    assert raw["To"] == "a@example.com"
    assert raw["Subject"] == "Hi"


@pytest.mark.asyncio
async def test_optional_request_fields_omitted(recorder):
    await make_transport().send(Content(from_="shop@example.com", to="a@example.com", text="hi"))
    request = recorder["request"]
    assert "Tags" not in request
    assert "ConfigurationSetName" not in request


@pytest.mark.asyncio
async def test_requires_recipient(recorder):
    with pytest.raises(RecipientRequiredError):
        await make_transport().send(Content(from_="shop@example.com", text="hi"))
    assert "request" not in recorder


@pytest.mark.asyncio
async def test_requires_sender(recorder):
    with pytest.raises(SenderRequiredError):
        await make_transport().send(Content(to="a@example.com", text="hi"))


@pytest.mark.asyncio
async def test_provider_failure_wrapped(recorder):
    recorder["fail"] = True
    with pytest.raises(TransportError) as exc_info:
        await make_transport().send(Content(from_="shop@example.com", to="a@example.com", text="hi"))
    assert str(exc_info.value).startswith("ses transport failed")
    assert "not verified" in str(exc_info.value)


@pytest.mark.asyncio
async def test_verify(recorder):
    transport = make_transport()
    assert await transport.verify() is True
    recorder["fail"] = True
    assert await transport.verify() is False


@pytest.mark.asyncio
async def test_non_ascii_sender_name_is_encoded(recorder):
    await make_transport().send(Content(from_="Café Ünï <cafe@example.com>", to="a@example.com", text="hi"))
    source = recorder["request"]["Source"]
    assert source.isascii()
    assert source.startswith("=?utf-8?")
    assert source.endswith("<cafe@example.com>")
    name = str(email.header.make_header(email.header.decode_header(source.rsplit(" <", 1)[0])))
    assert name == "Café Ünï"
