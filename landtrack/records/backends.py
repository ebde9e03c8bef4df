"""Mini README: Durable key-value backends for the record store.

Structure:
    * KeyValueBackend - abstract slot storage (read/write whole text values).
    * MemoryBackend - process-local dictionary, used by tests and demos.
    * JsonDirectoryBackend - one ``<key>.json`` file per slot on disk.

Backends know nothing about records. They store and return the serialised
text of a whole slot; a key that was never written reads back as ``None``.
"""

from __future__ import annotations

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, Optional

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


class KeyValueBackend(ABC):
    """Base interface for slot storage."""

    def open(self) -> None:
        """Prepare the backend for use."""

    def close(self) -> None:
        """Flush and release any held resources."""

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """Return the stored text for ``key`` or ``None`` when absent."""

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """Replace the stored text for ``key``."""

    @abstractmethod
    def keys(self) -> Iterable[str]:
        """Return the keys currently holding a value."""


class MemoryBackend(KeyValueBackend):
    """Keep slots in a plain dictionary."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._slots: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def write(self, key: str, value: str) -> None:
        self._slots[key] = value

    def keys(self) -> Iterable[str]:
        return sorted(self._slots)


class JsonDirectoryBackend(KeyValueBackend):
    """Persist each slot as a JSON file inside ``directory``."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def open(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        LOGGER.debug("JSON slot directory set to %s", self.directory)

    def read(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, value: str) -> None:
        # Write to a sibling temp file first so a crash never leaves half a slot.
        path = self._path_for(key)
        descriptor, temp_name = tempfile.mkstemp(
            dir=str(self.directory), prefix=f".{key}.", suffix=".tmp"
        )
        try:
            with os.fdopen(descriptor, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(temp_name, path)
        except BaseException:
            if os.path.exists(temp_name):
                os.unlink(temp_name)
            raise
        LOGGER.debug("Wrote slot %s (%s bytes)", path.name, len(value))

    def keys(self) -> Iterable[str]:
        return sorted(path.stem for path in self.directory.glob("*.json"))
