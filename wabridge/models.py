"""
Domain models for the bridge.

This module contains the protocol-neutral view of inbound chat messages
and the row written to the append log.
For HTTP request/response schemas, see schemas.py.
"""

import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from wabridge.utils import format_rfc3339


# Header row of the append log
LOG_HEADER = ["id", "phone", "type", "text", "datetime"]

# Sender recorded for messages sent through /send
OUTBOUND_SENDER = "me"


class MessageKind(str, Enum):
    """Content kind of a logged message."""
    TEXT = "text"
    EXTENDED_TEXT = "extended_text"
    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"
    AUDIO = "audio"
    CONTACT = "contact"
    LOCATION = "location"
    UNKNOWN = "unknown"
    SENT = "sent"


MEDIA_KINDS = (MessageKind.IMAGE, MessageKind.VIDEO, MessageKind.DOCUMENT, MessageKind.AUDIO)


@dataclass(frozen=True)
class MediaContent:
    """Metadata of an attached media payload. The bytes are fetched on demand."""
    caption: str = ""
    file_name: str = ""
    mimetype: str = ""

    @property
    def label(self) -> str:
        return self.caption or self.file_name


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class InboundMessage:
    """
    One inbound chat message, decoupled from the client library's wire types.

    At most one content part is normally set; when several are, the
    classifier's precedence decides which one is recorded.
    `raw` is whatever the chat client needs to download attached media.
    """
    sender: str
    timestamp: datetime
    conversation: str = ""
    extended_text: Optional[str] = None
    image: Optional[MediaContent] = None
    video: Optional[MediaContent] = None
    document: Optional[MediaContent] = None
    audio: Optional[MediaContent] = None
    contact: Optional[str] = None
    location: Optional[Location] = None
    raw: Any = None

    def media(self, kind: MessageKind) -> Optional[MediaContent]:
        return {
            MessageKind.IMAGE: self.image,
            MessageKind.VIDEO: self.video,
            MessageKind.DOCUMENT: self.document,
            MessageKind.AUDIO: self.audio,
        }.get(kind)


class LogRecord(BaseModel):
    """
    A single row of the append log.

    Columns: id, phone, type, text, datetime
    - id: nanosecond wall clock at record creation
    - phone: sender identifier (never empty)
    - type: MessageKind value
    - text: payload summary
    - datetime: RFC3339 UTC timestamp (never empty), held in `timestamp`
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(time.time_ns()))
    phone: str = Field(..., min_length=1)
    type: MessageKind
    text: str = ""
    timestamp: str = Field(..., min_length=1)

    @classmethod
    def create(cls, sender: str, kind: MessageKind, text: str, when: datetime) -> "LogRecord":
        return cls(phone=sender, type=kind, text=text, timestamp=format_rfc3339(when))

    def to_row(self) -> list[str]:
        return [self.id, self.phone, self.type.value, self.text, self.timestamp]
