"""
Pytest configuration and shared fixtures.

Every test gets its own temporary files through the `settings` fixture and
a fake chat client, so nothing here talks to WhatsApp.
"""

import time
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

# Clear settings cache before any app imports so env changes are picked up
from wabridge.config import Settings, get_settings
get_settings.cache_clear()

from wabridge.context import build_context
from wabridge.main import create_app
from wabridge.models import InboundMessage


class FakeChatClient:
    """In-memory stand-in for the WhatsApp client."""

    def __init__(self):
        self.connected = True
        self.media = b"\xff\xd8\xff\xe0fake-jpeg"
        self.download_error = None
        self.send_error = None
        self.send_delay = 0.0
        self.connect_error = None
        self.connect_calls = 0
        self.sent = []
        self.downloads = []
        self.code_callback = None
        self.event_callback = None

    def on_login_code(self, callback):
        self.code_callback = callback

    def on_event(self, callback):
        self.event_callback = callback

    def connect(self):
        self.connect_calls += 1
        if self.connect_error is not None:
            raise self.connect_error

    def is_connected(self):
        return self.connected

    def download(self, message):
        self.downloads.append(message)
        if self.download_error is not None:
            raise self.download_error
        return self.media

    def send_text(self, target, text):
        if self.send_delay:
            time.sleep(self.send_delay)
        if self.send_error is not None:
            raise self.send_error
        self.sent.append((target, text))
        return "3EB0C767D26A1D0A"


def make_message(**parts) -> InboundMessage:
    """Build an inbound message from a fixed sender at a fixed time."""
    parts.setdefault("sender", "919876543210@s.whatsapp.net")
    parts.setdefault("timestamp", datetime(2025, 1, 15, 10, 0, 0, tzinfo=timezone.utc))
    return InboundMessage(**parts)


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing every file at a fresh temporary directory."""
    return Settings(
        LOG_LEVEL="DEBUG",
        SESSION_DB_PATH=str(tmp_path / "whatsmeow.db"),
        CSV_PATH=str(tmp_path / "messages.csv"),
        QR_CODE_PATH=str(tmp_path / "qrcode.txt"),
        MEDIA_DIR=str(tmp_path / "media"),
        QR_FORWARD_URL="",
        SEND_TIMEOUT_SECONDS=60.0,
        QR_IMAGE_SIZE=256,
    )


@pytest.fixture
def chat_client() -> FakeChatClient:
    return FakeChatClient()


@pytest.fixture
def bridge(settings, chat_client):
    return build_context(settings, chat_client)


@pytest.fixture
def client(bridge):
    """Create test client around the fake bridge."""
    with TestClient(create_app(bridge)) as test_client:
        yield test_client
