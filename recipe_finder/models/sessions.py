from typing import List, Optional
from pydantic import BaseModel

from recipe_finder.core.errors import SearchErrorKind, SearchSignal
from recipe_finder.models.schemas import RecipeRecord


class SessionData(BaseModel):
    history: List[str] = []
    favorites: List[RecipeRecord] = []


class SearchResult(BaseModel):
    query: str = ""
    recipes: List[RecipeRecord] = []
    filtered: List[RecipeRecord] = []
    error: Optional[SearchErrorKind] = None
    signal: Optional[SearchSignal] = None
    message: Optional[str] = None
    loading: bool = False
    has_searched: bool = False
    generation: int = 0

    @property
    def is_narrowed(self) -> bool:
        """True when filters hide part of the fetched recipes"""
        return len(self.filtered) < len(self.recipes)
