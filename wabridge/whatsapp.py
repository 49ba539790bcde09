"""
WhatsApp implementation of the chat client, backed by neonize.

neonize owns the session database, the handshake and the transport. This
module only translates its events and protobuf messages into the bridge's
own types.
"""

import logging
import threading
from typing import Optional

from neonize.client import NewClient
from neonize.events import (
    ConnectedEv,
    DisconnectedEv,
    LoggedOutEv,
    MessageEv,
    OfflineSyncCompletedEv,
    PairStatusEv,
)
from neonize.utils import build_jid

from wabridge.client import EventCallback, LoginCodeCallback
from wabridge.events import (
    ConnectedEvent,
    DisconnectedEvent,
    LoggedOutEvent,
    MessageEvent,
    OfflineSyncCompletedEvent,
    UnhandledEvent,
)
from wabridge.inbound import to_inbound_message
from wabridge.models import InboundMessage

logger = logging.getLogger(__name__)

# Seconds connect() waits for the session to produce a code or connect
CONNECT_SETTLE_SECONDS = 30.0


class WhatsAppClient:
    """
    Chat client over a neonize session.

    neonize runs its own event loop; connect() starts it on a daemon
    thread and returns once a login code was issued, the session
    connected, or the loop failed.
    """

    def __init__(self, session_db_path: str):
        self._client = NewClient(session_db_path)
        self._event_callback: Optional[EventCallback] = None
        self._code_callback: Optional[LoginCodeCallback] = None
        self._connected = threading.Event()
        self._settled = threading.Event()
        self._error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None
        self._register_handlers()

    def _register_handlers(self) -> None:
        client = self._client

        @client.qr
        def on_qr(_: NewClient, data_qr: bytes):
            self._settled.set()
            if self._code_callback is not None:
                self._code_callback(data_qr.decode("utf-8"))

        @client.event(MessageEv)
        def on_message(_: NewClient, event: MessageEv):
            try:
                message = to_inbound_message(event)
            except Exception as e:
                logger.error(f"Failed to decode inbound message: {e}")
                return
            self._emit(MessageEvent(message))

        @client.event(ConnectedEv)
        def on_connected(_: NewClient, __: ConnectedEv):
            self._connected.set()
            self._settled.set()
            self._emit(ConnectedEvent())

        @client.event(OfflineSyncCompletedEv)
        def on_offline_sync(_: NewClient, __: OfflineSyncCompletedEv):
            self._emit(OfflineSyncCompletedEvent())

        @client.event(LoggedOutEv)
        def on_logged_out(_: NewClient, event: LoggedOutEv):
            self._connected.clear()
            self._emit(LoggedOutEvent(reason=str(event.Reason)))

        @client.event(DisconnectedEv)
        def on_disconnected(_: NewClient, __: DisconnectedEv):
            self._connected.clear()
            self._emit(DisconnectedEvent())

        @client.event(PairStatusEv)
        def on_pair_status(_: NewClient, __: PairStatusEv):
            self._emit(UnhandledEvent(name="PairStatusEv"))

    def _emit(self, event) -> None:
        if self._event_callback is not None:
            self._event_callback(event)

    def on_login_code(self, callback: LoginCodeCallback) -> None:
        self._code_callback = callback

    def on_event(self, callback: EventCallback) -> None:
        self._event_callback = callback

    def _run(self) -> None:
        try:
            self._client.connect()
        except Exception as e:
            self._error = e
            self._settled.set()

    def connect(self) -> None:
        """
        Raises:
            ConnectionError: If the neonize event loop fails to start
        """
        self._thread = threading.Thread(target=self._run, name="whatsapp-client", daemon=True)
        self._thread.start()
        if not self._settled.wait(CONNECT_SETTLE_SECONDS):
            logger.warning(f"No login code or connection after {CONNECT_SETTLE_SECONDS}s, continuing")
        if self._error is not None:
            raise ConnectionError(f"WhatsApp connection failed: {self._error}") from self._error

    def is_connected(self) -> bool:
        return self._connected.is_set()

    def download(self, message: InboundMessage) -> bytes:
        return self._client.download_any(message.raw)

    def send_text(self, target: str, text: str) -> str:
        response = self._client.send_message(build_jid(target), text)
        logger.info(f"Message sent, ID: {response.ID}")
        return response.ID
