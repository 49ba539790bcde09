import csv
import logging
import os
import threading
from pathlib import Path
from typing import Optional, Union

from wabridge.models import LOG_HEADER, LogRecord

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


# =============================================================================
# Append Log
# =============================================================================

class AppendLog:
    """
    Append-only CSV log of inbound and outbound messages.

    All writers serialize on one lock held for a single append. Readers
    take no lock; a read racing a write may see a partially flushed row.
    The file is never rotated or truncated here.
    """

    def __init__(self, path: PathLike, lock: Optional[threading.Lock] = None):
        self.path = Path(path)
        self.lock = lock or threading.Lock()

    def append(self, record: LogRecord) -> None:
        """
        Append one record, writing the header first if the file is empty.

        Args:
            record: Row to write

        Raises:
            OSError: If the file cannot be opened or written
        """
        with self.lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", newline="", encoding="utf-8") as fh:
                writer = csv.writer(fh)
                if os.fstat(fh.fileno()).st_size == 0:
                    logger.debug(f"Writing header to {self.path}")
                    writer.writerow(LOG_HEADER)
                writer.writerow(record.to_row())
                fh.flush()
        logger.debug(f"Appended record: id={record.id}, type={record.type.value}, phone={record.phone}")

    def read_all(self) -> list[list[str]]:
        """
        Read and parse the entire log, header row included.

        Returns:
            Rows in file order, each a list of fields

        Raises:
            FileNotFoundError: If nothing has been logged yet
            csv.Error: If the file is not valid CSV
        """
        with open(self.path, newline="", encoding="utf-8") as fh:
            rows = [row for row in csv.reader(fh)]
        logger.debug(f"Read {len(rows)} rows from {self.path}")
        return rows


# =============================================================================
# Login Code Store
# =============================================================================

class LoginCodeStore:
    """
    Holds the most recently issued login code in a plain text file.

    Writes replace the whole file. There is no locking: a read racing a
    write can observe a stale or torn value.
    """

    def __init__(self, path: PathLike):
        self.path = Path(path)

    def save(self, code: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(code, encoding="utf-8")
        logger.info(f"Login code saved to {self.path}")

    def load(self) -> str:
        """
        Raises:
            FileNotFoundError: If no code has been issued (or it was removed)
        """
        return self.path.read_text(encoding="utf-8")
