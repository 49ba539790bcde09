"""
Tests for converting WhatsApp protobuf messages into InboundMessage.

Protobuf objects are replaced by a small fake exposing the same
attribute names and HasField(), so neonize is never imported.
"""

from datetime import datetime, timezone

import pytest

from wabridge.classifier import classify
from wabridge.inbound import jid_to_string, to_inbound_message
from wabridge.models import MessageKind


class FakeProto:
    """Attribute bag with protobuf-style field presence."""

    def __init__(self, **fields):
        self.__dict__["_fields"] = fields

    def __getattr__(self, name):
        try:
            return self.__dict__["_fields"][name]
        except KeyError:
            raise AttributeError(name)

    def HasField(self, name):
        return name in self._fields


def make_event(timestamp=1736935200, **message_fields):
    message_fields.setdefault("conversation", "")
    return FakeProto(
        Info=FakeProto(
            Timestamp=timestamp,
            MessageSource=FakeProto(Sender=FakeProto(User="919876543210", Server="s.whatsapp.net")),
        ),
        Message=FakeProto(**message_fields),
    )


class TestToInboundMessage:
    """Test field mapping."""

    def test_sender_and_timestamp(self):
        message = to_inbound_message(make_event(conversation="hi"))

        assert message.sender == "919876543210@s.whatsapp.net"
        assert message.timestamp == datetime(2025, 1, 15, 10, 0, 0, tzinfo=timezone.utc)
        assert message.conversation == "hi"

    def test_missing_timestamp_uses_now(self):
        before = datetime.now(timezone.utc)
        message = to_inbound_message(make_event(timestamp=0))
        assert message.timestamp >= before

    def test_raw_is_protobuf_message(self):
        event = make_event(imageMessage=FakeProto(caption="", mimetype="image/jpeg"))
        assert to_inbound_message(event).raw is event.Message

    def test_image_caption(self):
        message = to_inbound_message(make_event(imageMessage=FakeProto(caption="sunset", mimetype="image/jpeg")))
        assert message.image.caption == "sunset"
        assert message.image.mimetype == "image/jpeg"
        assert message.video is None

    def test_document_file_name(self):
        part = FakeProto(caption="", fileName="report.pdf", mimetype="application/pdf")
        message = to_inbound_message(make_event(documentMessage=part))
        assert message.document.label == "report.pdf"

    def test_audio_without_caption_fields(self):
        message = to_inbound_message(make_event(audioMessage=FakeProto(mimetype="audio/ogg; codecs=opus")))
        assert message.audio.caption == ""
        assert message.audio.file_name == ""

    def test_location(self):
        part = FakeProto(degreesLatitude=52.52, degreesLongitude=13.405)
        message = to_inbound_message(make_event(locationMessage=part))
        assert (message.location.latitude, message.location.longitude) == (52.52, 13.405)

    def test_jid_without_server(self):
        assert jid_to_string(FakeProto(User="status", Server="")) == "status"


class TestConvertedKinds:
    """Each protobuf content shape classifies as its kind."""

    @pytest.mark.parametrize("fields,expected", [
        ({"conversation": "hi"}, MessageKind.TEXT),
        ({"extendedTextMessage": FakeProto(text="link")}, MessageKind.EXTENDED_TEXT),
        ({"imageMessage": FakeProto(caption="", mimetype="image/jpeg")}, MessageKind.IMAGE),
        ({"videoMessage": FakeProto(caption="", mimetype="video/mp4")}, MessageKind.VIDEO),
        ({"documentMessage": FakeProto(caption="", fileName="a.pdf", mimetype="application/pdf")}, MessageKind.DOCUMENT),
        ({"audioMessage": FakeProto(mimetype="audio/ogg")}, MessageKind.AUDIO),
        ({"contactMessage": FakeProto(displayName="Alice")}, MessageKind.CONTACT),
        ({"locationMessage": FakeProto(degreesLatitude=1.0, degreesLongitude=2.0)}, MessageKind.LOCATION),
        ({"reactionMessage": FakeProto(text="+1")}, MessageKind.UNKNOWN),
    ])
    def test_kind(self, fields, expected):
        assert classify(to_inbound_message(make_event(**fields))) == expected
