import logging
import os
from pathlib import Path
from typing import Protocol

from .config import default_storage_dir

logger = logging.getLogger(__name__)


class PermissionGate(Protocol):
    def check_permission(self) -> bool:
        ...


class StaticPermissionGate:
    """Gate with a fixed answer; stands in for a platform permission bridge."""

    def __init__(self, granted: bool = True):
        self.granted = granted

    def check_permission(self) -> bool:
        return self.granted


class DirectoryPermissionGate:
    """Grants access when the storage folder is readable and writable."""

    def __init__(self, directory: str | Path | None = None):
        self.directory = Path(directory) if directory is not None else default_storage_dir()

    def check_permission(self) -> bool:
        if not self.directory.is_dir():
            logger.warning("Storage folder missing: %s", self.directory)
            return False
        allowed = os.access(self.directory, os.R_OK | os.W_OK)
        if not allowed:
            logger.warning("No read/write access to %s", self.directory)
        return allowed
