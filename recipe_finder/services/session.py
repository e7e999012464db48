import json
import logging
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from recipe_finder.core.errors import PersistenceError
from recipe_finder.core.storage import KeyValueStorage
from recipe_finder.models.schemas import RecipeRecord
from recipe_finder.models.sessions import SessionData

logger = logging.getLogger(__name__)

FAVORITES_KEY = "recipeFavorites"
HISTORY_KEY = "searchHistory"
HISTORY_LIMIT = 8

_history_adapter = TypeAdapter(List[str])
_favorites_adapter = TypeAdapter(List[RecipeRecord])


def record_search(history: List[str], query: str, limit: int = HISTORY_LIMIT) -> List[str]:
    """Newest first, no duplicates, at most ``limit`` entries"""
    query = query.strip()
    if not query:
        return list(history)
    return [query, *[item for item in history if item != query]][:limit]


def toggle_favorite(favorites: List[RecipeRecord], recipe: RecipeRecord) -> List[RecipeRecord]:
    if any(fav.id == recipe.id for fav in favorites):
        return [fav for fav in favorites if fav.id != recipe.id]
    return [*favorites, recipe]


class SessionStore:
    """Search history and favorites, written through to key-value storage"""

    def __init__(self, storage: KeyValueStorage, history_limit: int = HISTORY_LIMIT):
        self.storage = storage
        self.history_limit = history_limit
        self.data = SessionData()

    @property
    def history(self) -> List[str]:
        return self.data.history

    @property
    def favorites(self) -> List[RecipeRecord]:
        return self.data.favorites

    def load(self) -> SessionData:
        favorites = self._load_key(FAVORITES_KEY, _favorites_adapter, "favorites")
        history = self._load_key(HISTORY_KEY, _history_adapter, "history")
        self.data = SessionData(
            history=history[: self.history_limit],
            favorites=favorites,
        )
        logger.debug(
            f"Loaded {len(self.data.favorites)} favorites and {len(self.data.history)} history entries"
        )
        return self.data

    def record_search(self, query: str) -> List[str]:
        self.data.history = record_search(self.data.history, query, self.history_limit)
        self._save_history()
        return self.data.history

    def clear_history(self) -> None:
        self.data.history = []
        self._save_history()

    def toggle_favorite(self, recipe: RecipeRecord) -> bool:
        """Returns True when the recipe is a favorite after the toggle"""
        self.data.favorites = toggle_favorite(self.data.favorites, recipe)
        self._save_favorites()
        return self.is_favorite(recipe.id)

    def is_favorite(self, recipe_id: str) -> bool:
        return any(fav.id == recipe_id for fav in self.data.favorites)

    def _load_key(self, key: str, adapter: TypeAdapter, label: str) -> list:
        try:
            raw: Optional[str] = self.storage.get(key)
        except PersistenceError as e:
            logger.error(f"Error loading {label}: {e}")
            return []

        if raw is None:
            return []

        try:
            return adapter.validate_python(json.loads(raw))
        except (ValueError, ValidationError) as e:
            logger.warning(f"Error loading {label}, starting empty: {e}")
            return []

    def _save_history(self) -> None:
        self._write(HISTORY_KEY, json.dumps(self.data.history), "history")

    def _save_favorites(self) -> None:
        payload = json.dumps([fav.to_wire() for fav in self.data.favorites])
        self._write(FAVORITES_KEY, payload, "favorites")

    def _write(self, key: str, value: str, label: str) -> None:
        try:
            self.storage.set(key, value)
        except PersistenceError as e:
            logger.error(f"Error saving {label}: {e}")
