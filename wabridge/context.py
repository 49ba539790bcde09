import logging
import threading
from dataclasses import dataclass

from wabridge.client import ChatClient
from wabridge.config import Settings
from wabridge.media import MediaStore
from wabridge.storage import AppendLog, LoginCodeStore

logger = logging.getLogger(__name__)


@dataclass
class BridgeContext:
    """
    Everything the bridge components share, built once per process.

    Holds the chat client handle, the append log together with the lock
    guarding it, the media store and the login code store.
    """
    settings: Settings
    client: ChatClient
    log: AppendLog
    media: MediaStore
    codes: LoginCodeStore


def build_context(settings: Settings, client: ChatClient) -> BridgeContext:
    """Create the shared context from settings around an existing client."""
    logger.debug(
        f"Building bridge context: csv={settings.CSV_PATH}, "
        f"qr={settings.QR_CODE_PATH}, media={settings.MEDIA_DIR}"
    )
    return BridgeContext(
        settings=settings,
        client=client,
        log=AppendLog(settings.CSV_PATH, threading.Lock()),
        media=MediaStore(settings.MEDIA_DIR),
        codes=LoginCodeStore(settings.QR_CODE_PATH),
    )
