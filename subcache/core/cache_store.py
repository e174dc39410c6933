import os
import logging

from subcache.core.config import Settings

logger = logging.getLogger(__name__)


class CacheStore:
    """
    Single-slot on-disk copy of the last subscription document that passed validation.

    There is no locking: concurrent requests may read while another writes,
    so a reader can see a torn file, and concurrent writers race with the
    last one winning.
    """

    def __init__(self, path: str, mode: int = Settings.CACHE_FILE_MODE):
        self.path = path
        self.mode = mode

    def get(self) -> bytes:
        """Returns the cached bytes, or b"" when nothing can be read."""
        try:
            with open(self.path, 'rb') as f:
                return f.read()
        except OSError as e:
            logger.debug(f"No usable cache at {self.path}: {e}")
            return b""

    def set(self, data: bytes) -> None:
        # O_TRUNC overwrites in place, mode only applies when the file is created
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, self.mode)
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
