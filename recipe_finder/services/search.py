import logging
from typing import Optional

from recipe_finder.core.errors import (
    DetailsUnavailableError,
    EmptyQueryError,
    SearchError,
    SearchSignal,
)
from recipe_finder.core.filters import apply_filters
from recipe_finder.models.schemas import FilterConfig, RecipeRecord
from recipe_finder.models.sessions import SearchResult
from recipe_finder.services.catalog import CatalogClient
from recipe_finder.services.session import SessionStore

logger = logging.getLogger(__name__)

QUICK_SEARCH_TERMS = ["chicken", "beef", "rice", "vegetables", "fish", "eggs", "cheese"]
DETAIL_ERROR_MESSAGE = "Failed to load recipe details. Please try again."


class SearchController:
    """
    Owns the state a recipe search screen renders from: the current
    SearchResult, the filter settings and the search box text.

    Every change to recipes, filters or text goes through ``refresh`` so the
    filtered view always matches its inputs. Each search takes a new
    generation number and its result is only applied while that number is
    still the latest, so a slow earlier search can't overwrite a newer one.
    """

    def __init__(self, catalog: CatalogClient, session: SessionStore):
        self.catalog = catalog
        self.session = session
        self.filters = FilterConfig()
        self.search_text = ""
        self.result = SearchResult()
        self.selected: Optional[RecipeRecord] = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def search(self, query: Optional[str] = None) -> SearchResult:
        """Search for ``query``, or for the current search text when omitted"""
        if query is not None:
            self.search_text = query

        self._generation += 1
        generation = self._generation
        clean = self.search_text.strip()

        self.result = self.result.model_copy(
            update={"loading": True, "error": None, "message": None, "generation": generation}
        )

        try:
            outcome = await self.catalog.search(clean)
        except EmptyQueryError as e:
            if self._is_current(generation):
                self.result = self.result.model_copy(
                    update={"loading": False, "error": e.kind, "message": e.message}
                )
            return self.result
        except DetailsUnavailableError as e:
            logger.warning(f"Search '{clean}' found candidates but no details: {e}")
            if self._is_current(generation):
                self.session.record_search(clean)
                self._apply(self._failed(clean, generation, e))
            return self.result
        except SearchError as e:
            logger.error(f"Error fetching recipes for '{clean}': {e}")
            if self._is_current(generation):
                self._apply(self._failed(clean, generation, e))
            return self.result
        finally:
            # an unexpected error must not leave the spinner on
            if self._is_current(generation) and self.result.loading:
                self.result = self.result.model_copy(update={"loading": False})

        if not self._is_current(generation):
            logger.debug(f"Discarding stale search '{clean}' (generation {generation})")
            return self.result

        if outcome.signal == SearchSignal.NO_MATCHES:
            result = SearchResult(
                query=clean,
                signal=SearchSignal.NO_MATCHES,
                message=(
                    f'No recipes found with "{clean}". '
                    "Try different ingredients like chicken, beef, or vegetables."
                ),
                has_searched=True,
                generation=generation,
            )
        else:
            self.session.record_search(clean)
            result = SearchResult(
                query=clean,
                recipes=outcome.recipes,
                signal=outcome.signal,
                has_searched=True,
                generation=generation,
            )

        self._apply(result)
        return self.result

    async def quick_search(self, ingredient: str) -> SearchResult:
        return await self.search(ingredient)

    async def open_recipe(self, recipe_id: str) -> Optional[RecipeRecord]:
        """Load one recipe for the detail view; errors land in ``result``"""
        try:
            self.selected = await self.catalog.lookup_by_id(recipe_id)
        except SearchError as e:
            logger.error(f"Error fetching recipe details for {recipe_id}: {e}")
            self.selected = None
            self.result = self.result.model_copy(
                update={"error": e.kind, "message": DETAIL_ERROR_MESSAGE}
            )
        return self.selected

    def close_recipe(self) -> None:
        self.selected = None

    def toggle_favorite(self, recipe: RecipeRecord) -> bool:
        return self.session.toggle_favorite(recipe)

    def set_search_text(self, text: str) -> None:
        self.search_text = text
        self.refresh()

    def update_filters(self, **changes) -> FilterConfig:
        """Assign filter fields by name; invalid values raise ValidationError"""
        updated = self.filters.model_copy()
        for name, value in changes.items():
            if name not in FilterConfig.model_fields:
                raise AttributeError(f"Unknown filter: {name}")
            setattr(updated, name, value)
        self.filters = updated
        self.refresh()
        return self.filters

    def reset_filters(self) -> FilterConfig:
        self.filters = FilterConfig()
        self.refresh()
        return self.filters

    def clear(self) -> None:
        """Forget the current search without touching history or favorites"""
        self._generation += 1
        self.search_text = ""
        self.result = SearchResult(generation=self._generation)

    def refresh(self) -> SearchResult:
        self.result.filtered = apply_filters(self.result.recipes, self.filters, self.search_text)
        return self.result

    def _apply(self, result: SearchResult) -> None:
        self.result = result
        self.refresh()

    @staticmethod
    def _failed(query: str, generation: int, error: SearchError) -> SearchResult:
        return SearchResult(
            query=query,
            error=error.kind,
            message=error.message,
            has_searched=True,
            generation=generation,
        )
