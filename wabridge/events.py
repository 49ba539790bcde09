"""
Protocol events delivered by the chat client.

The set is closed: every event the client produces is mapped onto one
of these classes, with UnhandledEvent catching the rest.
"""

from dataclasses import dataclass
from typing import Union

from wabridge.models import InboundMessage


@dataclass(frozen=True)
class MessageEvent:
    message: InboundMessage


@dataclass(frozen=True)
class ConnectedEvent:
    pass


@dataclass(frozen=True)
class OfflineSyncCompletedEvent:
    pass


@dataclass(frozen=True)
class LoggedOutEvent:
    reason: str = ""


@dataclass(frozen=True)
class DisconnectedEvent:
    pass


@dataclass(frozen=True)
class UnhandledEvent:
    name: str


Event = Union[
    MessageEvent,
    ConnectedEvent,
    OfflineSyncCompletedEvent,
    LoggedOutEvent,
    DisconnectedEvent,
    UnhandledEvent,
]
