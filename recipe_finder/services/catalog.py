import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from recipe_finder.core.errors import (
    CatalogTimeoutError,
    DetailsUnavailableError,
    EmptyQueryError,
    NetworkError,
    SearchSignal,
)
from recipe_finder.models.schemas import RecipeRecord, SearchOutcome
from recipe_finder.settings import Settings
from recipe_finder.utils import primary_ingredient

logger = logging.getLogger(__name__)


class CatalogClient:
    """
    Client for the meal catalog's ``filter`` and ``lookup`` endpoints.

    One search is a candidate lookup for the first ingredient of the query
    followed by one detail lookup per candidate id, issued together. A
    detail lookup that fails is logged and dropped; only when all of them
    fail does the search as a whole fail.
    """

    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or Settings()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient()

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def search(self, raw_query: str) -> SearchOutcome:
        """
        Find recipes for a comma separated ingredient query.

        Args:
            raw_query: Text as typed by the user, e.g. "chicken, rice"

        Returns:
            SearchOutcome with the fetched recipes in candidate order, or an
            empty list with the NO_MATCHES signal when nothing matched

        Raises:
            EmptyQueryError: query is blank
            CatalogTimeoutError: candidate lookup timed out
            NetworkError: candidate lookup failed in transport or with a bad status
            DetailsUnavailableError: candidates found but every detail lookup failed
        """
        query = raw_query.strip()
        if not query:
            raise EmptyQueryError("blank query")

        ingredient = primary_ingredient(query)
        candidate_ids = await self._fetch_candidate_ids(ingredient)

        if not candidate_ids:
            logger.info(f"No candidates for ingredient: {ingredient}")
            return SearchOutcome(recipes=[], signal=SearchSignal.NO_MATCHES)

        candidate_ids = candidate_ids[: self.settings.MAX_CANDIDATES]
        recipes = await self._fetch_all_details(candidate_ids)

        if not recipes:
            raise DetailsUnavailableError(
                f"All {len(candidate_ids)} detail lookups failed for {ingredient}"
            )

        logger.info(f"Loaded {len(recipes)} of {len(candidate_ids)} recipes for query: {query}")
        return SearchOutcome(
            recipes=recipes,
            signal=SearchSignal.FOUND,
            candidate_count=len(candidate_ids),
        )

    async def lookup_by_id(self, recipe_id: str) -> RecipeRecord:
        """Fetch one recipe; unlike a batch search, any failure is raised"""
        return await self._fetch_detail(recipe_id)

    async def _fetch_candidate_ids(self, ingredient: str) -> List[str]:
        data = await self._get_json(
            "filter.php", {"i": ingredient}, self.settings.CANDIDATE_TIMEOUT
        )
        meals = data.get("meals")
        if not isinstance(meals, list):
            return []
        return [str(meal["idMeal"]) for meal in meals if isinstance(meal, dict) and meal.get("idMeal")]

    async def _fetch_all_details(self, recipe_ids: List[str]) -> List[RecipeRecord]:
        tasks = [self._fetch_detail(recipe_id) for recipe_id in recipe_ids]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        recipes = []
        for recipe_id, result in zip(recipe_ids, results):
            if isinstance(result, RecipeRecord):
                recipes.append(result)
            else:
                logger.warning(f"Failed to fetch details for meal {recipe_id}: {result!r}")
        return recipes

    async def _fetch_detail(self, recipe_id: str) -> RecipeRecord:
        data = await self._get_json(
            "lookup.php", {"i": recipe_id}, self.settings.DETAIL_TIMEOUT
        )
        meals = data.get("meals")
        if not isinstance(meals, list) or not meals:
            raise DetailsUnavailableError(
                f"No record for meal {recipe_id}",
                message="Failed to load recipe details. Please try again.",
            )

        try:
            return RecipeRecord.model_validate(meals[0])
        except ValidationError as e:
            raise DetailsUnavailableError(
                f"Invalid record for meal {recipe_id}: {e}",
                message="Failed to load recipe details. Please try again.",
            ) from e

    async def _get_json(self, endpoint: str, params: Dict[str, str], timeout: float) -> Dict[str, Any]:
        url = f"{self.settings.CATALOG_BASE_URL}/{endpoint}"
        try:
            response = await asyncio.wait_for(self._request(url, params, timeout), timeout)
            response.raise_for_status()
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise CatalogTimeoutError(f"Timed out after {timeout}s: {url}") from e
        except httpx.HTTPStatusError as e:
            raise NetworkError(
                f"{url} returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Request to {url} failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise NetworkError(f"Invalid JSON from {url}") from e

        return data if isinstance(data, dict) else {}

    @retry(
        retry=retry_if_exception_type(httpx.ConnectError),
        stop=stop_after_attempt(2),
        wait=wait_fixed(0.5),
        reraise=True,
    )
    async def _request(self, url: str, params: Dict[str, str], timeout: float) -> httpx.Response:
        return await self.client.get(url, params=params, timeout=timeout)
