"""
Key-value store implementations for the account directory.

Two backends are provided:
- MemoryKeyValueStore: process-local dictionary, used for tests and
  ephemeral deployments.
- LocalDirectoryKeyValueStore: a single JSON document on disk, rewritten
  atomically on every change.

Both satisfy BaseKeyValueStore and support key iteration.
"""

import asyncio
import copy
import json
import logging
import os
import tempfile
from collections.abc import AsyncIterator
from threading import RLock
from typing import Any

from auth.interfaces import BaseKeyValueStore
from core.errors import StoreError

logger = logging.getLogger(__name__)

STORE_FILENAME = "store.json"


class MemoryKeyValueStore(BaseKeyValueStore):
    """Key-value store that keeps everything in a dictionary.

    Values are deep-copied on the way in and out so callers never share
    mutable state with the store.
    """

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str) -> Any | None:
        return copy.deepcopy(self._data.get(key))

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> bool:
        if key not in self._data:
            return False
        del self._data[key]
        return True

    async def iterate(self) -> AsyncIterator[str]:
        for key in list(self._data):
            yield key

    def __len__(self) -> int:
        return len(self._data)


class LocalDirectoryKeyValueStore(BaseKeyValueStore):
    """Key-value store persisted as one JSON file in a local directory.

    Blocking file IO runs in a worker thread. A lock serializes writers within
    the process; each write replaces the file atomically.
    """

    def __init__(self, base_dir: str | None = None):
        if base_dir is None:
            env_dir = os.getenv("ACCOUNTS_MCP_STORE_DIR")
            if env_dir:
                base_dir = env_dir
            else:
                home_dir = os.path.expanduser("~")
                if home_dir and home_dir != "~":
                    base_dir = os.path.join(home_dir, ".config", "accounts-mcp")
                else:
                    base_dir = os.path.join(os.getcwd(), ".accounts-mcp")

        self.base_dir: str = os.path.expanduser(base_dir)
        self.path: str = os.path.join(self.base_dir, STORE_FILENAME)
        self._lock = RLock()
        logger.info(f"LocalDirectoryKeyValueStore initialized with base_dir: {self.base_dir}")

    def _read_locked(self) -> dict[str, Any]:
        """Load the whole document. Caller must hold lock."""
        if not os.path.exists(self.path):
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StoreError(f"Store file {self.path} is not valid JSON: {e}", path=self.path) from e

        if not isinstance(data, dict):
            raise StoreError(f"Store file {self.path} must contain a JSON object", path=self.path)
        return data

    def _write_locked(self, data: dict[str, Any]) -> None:
        """Atomically replace the document. Caller must hold lock."""
        if not os.path.exists(self.base_dir):
            os.makedirs(self.base_dir, exist_ok=True)
            logger.info(f"Created store directory: {self.base_dir}")

        fd, tmp_path = tempfile.mkstemp(prefix=".store-", suffix=".json", dir=self.base_dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _get_sync(self, key: str) -> Any | None:
        with self._lock:
            return self._read_locked().get(key)

    def _set_sync(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._read_locked()
            data[key] = value
            self._write_locked(data)
        logger.debug(f"Stored key {key} in {self.path}")

    def _delete_sync(self, key: str) -> bool:
        with self._lock:
            data = self._read_locked()
            if key not in data:
                return False
            del data[key]
            self._write_locked(data)
        logger.debug(f"Deleted key {key} from {self.path}")
        return True

    def _keys_sync(self) -> list[str]:
        with self._lock:
            return list(self._read_locked())

    async def get(self, key: str) -> Any | None:
        return await asyncio.to_thread(self._get_sync, key)

    async def set(self, key: str, value: Any) -> None:
        await asyncio.to_thread(self._set_sync, key, value)

    async def delete(self, key: str) -> bool:
        return await asyncio.to_thread(self._delete_sync, key)

    async def iterate(self) -> AsyncIterator[str]:
        keys = await asyncio.to_thread(self._keys_sync)
        for key in keys:
            yield key
