"""
Interface the bridge expects from a chat client.

The concrete WhatsApp implementation lives in whatsapp.py; tests use a fake.
"""

from typing import Callable, Protocol

from wabridge.events import Event
from wabridge.models import InboundMessage


LoginCodeCallback = Callable[[str], None]
EventCallback = Callable[[Event], None]


class ChatClient(Protocol):
    """Handle on a chat session. Session state is owned by the implementation."""

    def on_login_code(self, callback: LoginCodeCallback) -> None:
        """Register the callback invoked with each newly issued login code."""

    def on_event(self, callback: EventCallback) -> None:
        """Register the callback invoked with every protocol event."""

    def connect(self) -> None:
        """Open the connection. Raises on failure."""

    def is_connected(self) -> bool:
        ...

    def download(self, message: InboundMessage) -> bytes:
        """Fetch the media attached to an inbound message. Raises on failure."""

    def send_text(self, target: str, text: str) -> str:
        """Send a plain text message to a user id and return the message id."""
