"""
Local JSON File Storage Implementation

DESIGN DECISION: A single JSON object file is the durable engine because:
1. It survives process restarts, which is all the session needs
2. No database setup required
3. Users can inspect or back up one file

TRADEOFFS:
- Whole-file rewrite on every set (ledgers are small, entered by hand)
- No cross-process locking (single writer by design)

Writes go to a temp file that replaces the original, so a crash mid-write
leaves the previous content intact.
"""

import asyncio
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional, Union

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from myfinances.services.storage.interface import (
    KeyValueStorageInterface,
    StorageUnavailableError,
)


logger = structlog.get_logger(__name__)

_io_retry = retry(
    retry=retry_if_exception_type(OSError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
    reraise=True,
)


class JSONFileKeyValueStorage(KeyValueStorageInterface):
    """
    Key-value storage kept in one JSON file.

    The file holds a flat object of {key: text}. A missing file is an
    empty store.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    @_io_retry
    def _read_all(self) -> dict[str, str]:
        """Load the whole store. Raises OSError or ValueError."""
        if not self._path.exists():
            return {}
        text = self._path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("storage file does not contain a JSON object")
        return data

    @_io_retry
    def _write_all(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _get_sync(self, key: str) -> Optional[str]:
        with self._lock:
            try:
                return self._read_all().get(key)
            except (OSError, ValueError) as e:
                logger.error("storage_read_failed", path=str(self._path), key=key, error=str(e))
                raise StorageUnavailableError("read", key, str(e)) from e

    def _update_sync(self, key: str, value: Optional[str]) -> None:
        operation = "remove" if value is None else "write"
        with self._lock:
            try:
                data = self._read_all()
                if value is None:
                    if key not in data:
                        return
                    del data[key]
                else:
                    data[key] = value
                self._write_all(data)
            except (OSError, ValueError) as e:
                logger.error(
                    "storage_write_failed",
                    path=str(self._path),
                    key=key,
                    operation=operation,
                    error=str(e),
                )
                raise StorageUnavailableError(operation, key, str(e)) from e

    async def get_item(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._get_sync, key)

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._update_sync, key, value)

    async def remove_item(self, key: str) -> None:
        await asyncio.to_thread(self._update_sync, key, None)
