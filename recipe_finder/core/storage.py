import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol

from recipe_finder.core.errors import PersistenceError
from recipe_finder.settings import Settings

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """String values under string keys, like a browser's localStorage"""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value or ``None`` when the key is absent."""

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""


class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStorage:
    """All keys in one JSON object on disk, rewritten on every set"""

    def __init__(self, path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Could not read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceError(f"Unexpected content in {self.path}")
        return data

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except PersistenceError:
            logger.warning(f"Overwriting unreadable storage file {self.path}")
            data = {}
        data[key] = value

        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_path is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_path)
            raise PersistenceError(f"Could not write {self.path}: {e}") from e


class SupabaseStorage:
    """Key-value rows in a Supabase table with ``key`` and ``value`` columns"""

    def __init__(self, client, table: str = "kv_store"):
        self.client = client
        self.table = table

    def get(self, key: str) -> Optional[str]:
        try:
            res = (
                self.client.table(self.table)
                .select("value")
                .eq("key", key)
                .maybe_single()
                .execute()
            )
        except Exception as e:
            raise PersistenceError(f"Supabase read failed for {key}: {e}") from e

        if not res or not res.data:
            return None
        return res.data.get("value")

    def set(self, key: str, value: str) -> None:
        try:
            self.client.table(self.table).upsert(
                {"key": key, "value": value}, on_conflict="key"
            ).execute()
        except Exception as e:
            raise PersistenceError(f"Supabase write failed for {key}: {e}") from e


def get_storage(settings: Optional[Settings] = None) -> KeyValueStorage:
    settings = settings or Settings()

    if settings.STORAGE_BACKEND == "memory":
        return MemoryStorage()

    if settings.STORAGE_BACKEND == "supabase":
        from recipe_finder.core.database import get_supabase

        return SupabaseStorage(get_supabase(settings), settings.SUPABASE_KV_TABLE)

    return JsonFileStorage(settings.STORAGE_PATH)
