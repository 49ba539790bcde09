import logging
import os
import time
from pathlib import Path
from typing import Union

from wabridge.models import MessageKind

logger = logging.getLogger(__name__)

# Extension is guessed from the kind, never sniffed from the payload
MEDIA_EXTENSIONS = {
    MessageKind.IMAGE: ".jpg",
    MessageKind.VIDEO: ".mp4",
    MessageKind.AUDIO: ".ogg",
    MessageKind.DOCUMENT: ".pdf",
}


class MediaStore:
    """
    Writes media payloads to <root>/<kind>/<unix-nanoseconds><ext>.

    No deduplication and no collision check beyond the nanosecond clock.
    """

    def __init__(self, root: Union[str, os.PathLike]):
        self.root = Path(root)

    def save(self, kind: MessageKind, data: bytes) -> Path:
        """
        Save a media payload.

        Args:
            kind: Content kind, selects the directory and extension
            data: Raw payload bytes

        Returns:
            Path of the written file

        Raises:
            OSError: If the directory cannot be created or the file written
        """
        directory = self.root / kind.value
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{time.time_ns()}{MEDIA_EXTENSIONS.get(kind, '')}"
        path.write_bytes(data)
        logger.info(f"Saved {kind.value} media: {path} ({len(data)} bytes)")
        return path
