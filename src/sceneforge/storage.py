"""Durable key-value persistence for script documents."""

import asyncio
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import yaml
from pydantic import ValidationError

from .models import ScriptDocument

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Minimal async get/set store."""

    async def get(self, key: str) -> Optional[Any]:
        ...

    async def set(self, key: str, value: Any) -> None:
        ...


class MemoryStore:
    """In-process store; values are kept as given."""

    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}

    async def get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def keys(self) -> list[str]:
        return list(self._data)


class FileStore:
    """One YAML file per key inside a directory.

    Writes go to a temporary file that is renamed over the target, so a
    crash mid-write leaves the previous value intact.
    """

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        safe = "".join(c if c.isalnum() or c in "-_." else "_" for c in key)
        return self._directory / f"{safe}.yaml"

    def _read(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)

    def _write(self, key: str, value: Any) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(value, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
            os.replace(tmp_name, self._path(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def get(self, key: str) -> Optional[Any]:
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, value: Any) -> None:
        await asyncio.to_thread(self._write, key, value)


class PersistenceGateway:
    """Saves and loads the whole script document under a single key."""

    def __init__(self, store: KeyValueStore, key: str = "current_project") -> None:
        self._store = store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    async def save(self, document: ScriptDocument) -> ScriptDocument:
        """Persist ``document`` stamped with the current time.

        Returns:
            The stamped copy, or the unstamped input if the write failed.
        """
        stamped = document.model_copy(deep=True)
        stamped.meta.last_modified = datetime.now(timezone.utc)
        try:
            await self._store.set(self._key, stamped.model_dump(mode="json"))
        except Exception as e:
            logger.error(f"Save failed for '{self._key}': {e}")
            return document
        logger.debug(f"Saved '{self._key}' with {len(stamped.scenes)} scenes")
        return stamped

    async def load(self) -> Optional[ScriptDocument]:
        """Load the stored document, or None if absent or unreadable."""
        try:
            data = await self._store.get(self._key)
        except Exception as e:
            logger.error(f"Load failed for '{self._key}': {e}")
            return None
        if data is None:
            return None
        try:
            return ScriptDocument.model_validate(data)
        except ValidationError as e:
            logger.error(f"Stored project '{self._key}' is invalid: {e}")
            return None
