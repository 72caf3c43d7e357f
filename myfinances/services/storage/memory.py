"""In-memory key-value storage, for tests and ephemeral sessions."""

from typing import Optional

from myfinances.services.storage.interface import (
    KeyValueStorageInterface,
    StorageUnavailableError,
)


class InMemoryKeyValueStorage(KeyValueStorageInterface):
    """
    Dict-backed storage.

    `fail_reads` / `fail_writes` make the engine behave as unavailable,
    which is how tests exercise the StorageUnavailable paths.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})
        self.fail_reads = False
        self.fail_writes = False

    async def get_item(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise StorageUnavailableError("read", key, "engine unavailable")
        return self._data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageUnavailableError("write", key, "engine unavailable")
        self._data[key] = value

    async def remove_item(self, key: str) -> None:
        if self.fail_writes:
            raise StorageUnavailableError("remove", key, "engine unavailable")
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)
