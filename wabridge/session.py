"""
Session bootstrap and inbound event dispatch.

On a first run (no session database yet) the chat client issues login
codes until the phone pairs. Each code is printed to the terminal, saved
for the /qr endpoints and forwarded to a remote endpoint. A resumed run
connects straight away, unless its stored session was never paired, in
which case codes arrive just as on a first run.

States:
    UNAUTHENTICATED -> AWAITING_CODE -> AUTHENTICATED
"""

import logging
import queue
import threading
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

import httpx

from wabridge.classifier import MessageClassifier
from wabridge.context import BridgeContext
from wabridge.events import (
    ConnectedEvent,
    DisconnectedEvent,
    Event,
    LoggedOutEvent,
    MessageEvent,
    OfflineSyncCompletedEvent,
    UnhandledEvent,
)
from wabridge.utils import print_qr_terminal

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AWAITING_CODE = "awaiting_code"
    AUTHENTICATED = "authenticated"


def forward_login_code(url: str, code: str, timeout: float = 10.0) -> bool:
    """
    POST a login code to a remote endpoint as {"qr_code": code}.

    Failures are logged and reported through the return value only.

    Returns:
        True if the endpoint answered 200 OK
    """
    if not url:
        logger.debug("Login code forwarding disabled")
        return False

    try:
        response = httpx.post(url, json={"qr_code": code}, timeout=timeout)
    except httpx.HTTPError as e:
        logger.error(f"Failed to forward login code to {url}: {e}")
        return False

    if response.status_code != httpx.codes.OK:
        logger.error(f"Login code endpoint answered {response.status_code} {response.reason_phrase}")
        return False

    logger.info("Login code forwarded successfully")
    return True


_CLOSED = object()


class LoginCodeWorker(threading.Thread):
    """
    Consumes issued login codes until the code channel is closed.

    `finished` is set once the worker has stopped.
    """

    def __init__(self, handler: Callable[[str], None]):
        super().__init__(name="login-code-worker", daemon=True)
        self._handler = handler
        self._codes: queue.Queue = queue.Queue()
        self.finished = threading.Event()

    def submit(self, code: str) -> None:
        self._codes.put(code)

    def close(self) -> None:
        self._codes.put(_CLOSED)

    def run(self) -> None:
        try:
            while True:
                code = self._codes.get()
                if code is _CLOSED:
                    logger.info("Login code channel closed")
                    break
                self._handler(code)
        finally:
            self.finished.set()


class EventDispatcher:
    """Routes protocol events: messages to the classifier, the rest to the log."""

    def __init__(self, classifier: MessageClassifier, on_connected: Optional[Callable[[], None]] = None):
        self.classifier = classifier
        self.on_connected = on_connected

    def dispatch(self, event: Event) -> None:
        if isinstance(event, MessageEvent):
            try:
                self.classifier.handle(event.message)
            except Exception as e:
                logger.error(f"Failed to record message from {event.message.sender}: {e}")
        elif isinstance(event, ConnectedEvent):
            logger.info("Connected to WhatsApp")
            if self.on_connected is not None:
                self.on_connected()
        elif isinstance(event, OfflineSyncCompletedEvent):
            logger.info("Offline sync completed")
        elif isinstance(event, LoggedOutEvent):
            logger.warning(f"Logged out: {event.reason or 'no reason given'}")
        elif isinstance(event, DisconnectedEvent):
            logger.warning("Disconnected")
        elif isinstance(event, UnhandledEvent):
            logger.debug(f"Unhandled event: {event.name}")
        else:
            logger.debug(f"Unhandled event: {type(event).__name__}")


class SessionBootstrap:
    """
    Brings the chat session up once per process.

    Connection failures are fatal and propagate to the caller.
    """

    def __init__(self, context: BridgeContext):
        self.context = context
        self.state = SessionState.UNAUTHENTICATED
        self.authenticated = threading.Event()
        self.worker: Optional[LoginCodeWorker] = None
        self.dispatcher = EventDispatcher(MessageClassifier(context), on_connected=self.mark_authenticated)

    @property
    def first_run(self) -> bool:
        return not Path(self.context.settings.SESSION_DB_PATH).exists()

    def start(self) -> None:
        """
        Register callbacks and connect.

        The login code worker always runs. The client issues codes whenever
        no device is paired, with or without a session database.

        Raises:
            Exception: Whatever the chat client raises when connecting
        """
        client = self.context.client
        client.on_event(self.dispatcher.dispatch)

        if self.first_run:
            logger.info("No stored session, waiting for a login code")
            self.state = SessionState.AWAITING_CODE
        else:
            logger.info(f"Resuming session from {self.context.settings.SESSION_DB_PATH}")

        self.worker = LoginCodeWorker(self.issue_code)
        self.worker.start()
        client.on_login_code(self.receive_code)

        try:
            client.connect()
        except Exception as e:
            logger.critical(f"Failed to connect: {e}")
            raise

    def receive_code(self, code: str) -> None:
        """Queue a code issued by the client for the worker."""
        if self.state == SessionState.UNAUTHENTICATED:
            logger.info("Stored session is not paired, waiting for a login code")
            self.state = SessionState.AWAITING_CODE
        self.worker.submit(code)

    def issue_code(self, code: str) -> None:
        """Render, persist and forward one login code. Never raises."""
        settings = self.context.settings

        try:
            print_qr_terminal(code)
        except Exception as e:
            logger.warning(f"Failed to render login code to terminal: {e}")

        try:
            self.context.codes.save(code)
        except OSError as e:
            logger.error(f"Failed to write login code file: {e}")

        forward_login_code(settings.QR_FORWARD_URL, code, settings.QR_FORWARD_TIMEOUT_SECONDS)

    def mark_authenticated(self) -> None:
        if self.state != SessionState.AUTHENTICATED:
            logger.info("Session authenticated")
        self.state = SessionState.AUTHENTICATED
        self.authenticated.set()
        if self.worker is not None:
            self.worker.close()
