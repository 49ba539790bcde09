"""
Inbound message classification and persistence.

Each inbound message is attributed to exactly one content kind, checked in
this order:

    text -> extended_text -> image -> video -> document -> audio
         -> contact -> location -> unknown

The first match wins. Media kinds download their payload through the chat
client and store it through the media store before the log row is written.
"""

import logging
from typing import Callable, Optional

from wabridge.context import BridgeContext
from wabridge.metrics import record_inbound_message
from wabridge.models import MEDIA_KINDS, InboundMessage, LogRecord, MessageKind

logger = logging.getLogger(__name__)

UNKNOWN_SUMMARY = "unsupported message type"


# Precedence order of content kinds
PREDICATES: list[tuple[MessageKind, Callable[[InboundMessage], bool]]] = [
    (MessageKind.TEXT, lambda m: bool(m.conversation)),
    (MessageKind.EXTENDED_TEXT, lambda m: m.extended_text is not None),
    (MessageKind.IMAGE, lambda m: m.image is not None),
    (MessageKind.VIDEO, lambda m: m.video is not None),
    (MessageKind.DOCUMENT, lambda m: m.document is not None),
    (MessageKind.AUDIO, lambda m: m.audio is not None),
    (MessageKind.CONTACT, lambda m: m.contact is not None),
    (MessageKind.LOCATION, lambda m: m.location is not None),
]


def classify(message: InboundMessage) -> MessageKind:
    """Return the content kind of a message; UNKNOWN if nothing matches."""
    for kind, matches in PREDICATES:
        if matches(message):
            return kind
    return MessageKind.UNKNOWN


def format_location(latitude: float, longitude: float) -> str:
    return f"{latitude:.6f},{longitude:.6f}"


class MessageClassifier:
    """Turns inbound messages into append log records."""

    def __init__(self, context: BridgeContext):
        self.context = context

    def handle(self, message: InboundMessage) -> Optional[LogRecord]:
        """
        Classify a message, persist any media, and append one record.

        Args:
            message: Inbound message from the chat client

        Returns:
            The appended record, or None if its media could not be
            downloaded or saved. Such messages are dropped, not retried.
        """
        kind = classify(message)
        logger.info(f"Received {kind.value} message from {message.sender}")

        if kind in MEDIA_KINDS:
            summary = self._store_media(kind, message)
            if summary is None:
                record_inbound_message("dropped")
                return None
        else:
            summary = self._summarize(kind, message)

        record = LogRecord.create(message.sender, kind, summary, message.timestamp)
        self.context.log.append(record)
        record_inbound_message(kind.value)
        return record

    def _summarize(self, kind: MessageKind, message: InboundMessage) -> str:
        if kind == MessageKind.TEXT:
            return message.conversation
        if kind == MessageKind.EXTENDED_TEXT:
            return message.extended_text
        if kind == MessageKind.CONTACT:
            return message.contact
        if kind == MessageKind.LOCATION:
            return format_location(message.location.latitude, message.location.longitude)
        return UNKNOWN_SUMMARY

    def _store_media(self, kind: MessageKind, message: InboundMessage) -> Optional[str]:
        try:
            data = self.context.client.download(message)
        except Exception as e:
            logger.error(f"Failed to download {kind.value} from {message.sender}: {e}")
            return None

        try:
            path = self.context.media.save(kind, data)
        except OSError as e:
            logger.error(f"Failed to save {kind.value} from {message.sender}: {e}")
            return None

        label = message.media(kind).label
        return f"{label} [{path}]" if label else str(path)
