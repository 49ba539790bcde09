"""
Conversion of WhatsApp protobuf messages into InboundMessage.

Works on the attribute names of the WhatsApp E2E `Message` protobuf and
the `MessageInfo` carried by neonize's message event, without importing
neonize itself.
"""

from datetime import datetime, timezone
from typing import Optional

from wabridge.models import InboundMessage, Location, MediaContent


def jid_to_string(jid) -> str:
    return f"{jid.User}@{jid.Server}" if jid.Server else jid.User


def _media(msg, field: str) -> Optional[MediaContent]:
    if not msg.HasField(field):
        return None
    part = getattr(msg, field)
    # audioMessage has neither caption nor fileName
    return MediaContent(
        caption=getattr(part, "caption", ""),
        file_name=getattr(part, "fileName", ""),
        mimetype=part.mimetype,
    )


def to_inbound_message(event) -> InboundMessage:
    """
    Convert a neonize message event to an InboundMessage.

    Args:
        event: Object with `Info` (MessageInfo) and `Message` (E2E Message)

    Returns:
        InboundMessage whose `raw` is the protobuf Message, for downloads
    """
    info = event.Info
    msg = event.Message

    if info.Timestamp:
        timestamp = datetime.fromtimestamp(info.Timestamp, tz=timezone.utc)
    else:
        timestamp = datetime.now(timezone.utc)

    location = None
    if msg.HasField("locationMessage"):
        location = Location(
            latitude=msg.locationMessage.degreesLatitude,
            longitude=msg.locationMessage.degreesLongitude,
        )

    return InboundMessage(
        sender=jid_to_string(info.MessageSource.Sender),
        timestamp=timestamp,
        conversation=msg.conversation,
        extended_text=msg.extendedTextMessage.text if msg.HasField("extendedTextMessage") else None,
        image=_media(msg, "imageMessage"),
        video=_media(msg, "videoMessage"),
        document=_media(msg, "documentMessage"),
        audio=_media(msg, "audioMessage"),
        contact=msg.contactMessage.displayName if msg.HasField("contactMessage") else None,
        location=location,
        raw=msg,
    )
