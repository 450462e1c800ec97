"""
Locked JSON Document Module.

A JSON file holding a mapping of records, read and rewritten under an
exclusive lock so that read-modify-write cycles from several threads or
processes never interleave.
"""

import fcntl
import json
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator

from balancer.errors import TransportError
from config import logger


class JsonDocument:
    """
    A single JSON object stored on disk.

    Attributes:
        path (Path): Location of the JSON file.
        lock_path (Path): Sidecar file used for the inter-process lock.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self._thread_lock = threading.Lock()

    @contextmanager
    def _locked(self, exclusive: bool) -> Iterator[None]:
        with self._thread_lock:
            with open(self.lock_path, "a") as lock_file:
                fcntl.flock(lock_file, fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
                try:
                    yield
                finally:
                    fcntl.flock(lock_file, fcntl.LOCK_UN)

    def _load(self) -> Dict[str, dict]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(
                {
                    "message": "Failed to read store document",
                    "file": str(self.path),
                    "error": str(e),
                }
            )
            raise TransportError(f"failed to read {self.path}") from e

        if not isinstance(data, dict):
            raise TransportError(f"store document {self.path} is not a JSON object")
        return data

    def _dump(self, data: Dict[str, dict]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, default=str)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(
                {
                    "message": "Failed to write store document",
                    "file": str(self.path),
                    "error": str(e),
                }
            )
            raise TransportError(f"failed to write {self.path}") from e

    def read(self) -> Dict[str, dict]:
        """Return a snapshot of the document."""
        with self._locked(exclusive=False):
            return self._load()

    @contextmanager
    def transaction(self) -> Iterator[Dict[str, dict]]:
        """
        Yield the document for modification and persist it on success.

        The exclusive lock is held for the whole block, so the block is
        serialized against every other reader and writer of the file.
        Nothing is written if the block raises.
        """
        with self._locked(exclusive=True):
            data = self._load()
            yield data
            self._dump(data)
