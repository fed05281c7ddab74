import pytest

from textify.infrastructure.sms.twilio_sender import TwilioSMSSender


class FakeMessages:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def create(self, body, from_, to):
        if self.error:
            raise self.error
        self.calls.append({"body": body, "from_": from_, "to": to})
        return type("Message", (), {"sid": "SM42"})


class FakeClient:
    def __init__(self, error=None):
        self.messages = FakeMessages(error)


def test_send_creates_message_and_returns_sid():
    client = FakeClient()
    sender = TwilioSMSSender(client=client)

    sid = sender.send("hello", "+15550000000", "+15551234567")

    assert sid == "SM42"
    assert client.messages.calls == [{"body": "hello", "from_": "+15550000000", "to": "+15551234567"}]


def test_send_propagates_provider_errors():
    from twilio.base.exceptions import TwilioRestException

    error = TwilioRestException(status=400, uri="/Messages", msg="Invalid 'To' Phone Number", code=21211)
    sender = TwilioSMSSender(client=FakeClient(error))

    with pytest.raises(TwilioRestException):
        sender.send("hello", "+15550000000", "bogus")
