from typing import Callable, Dict, Optional

import httpx
import pytest

from recipe_finder.core.storage import MemoryStorage
from recipe_finder.models.schemas import RecipeRecord
from recipe_finder.services.catalog import CatalogClient
from recipe_finder.services.session import SessionStore
from recipe_finder.settings import Settings

BASE_URL = "https://catalog.test/api/json/v1/1"


def make_recipe(
    recipe_id: str = "1",
    title: str = "Test Meal",
    ingredients=(),
    instructions: Optional[str] = None,
    category: Optional[str] = "Chicken",
    area: Optional[str] = "British",
) -> RecipeRecord:
    wire = {
        "idMeal": recipe_id,
        "strMeal": title,
        "strCategory": category,
        "strArea": area,
        "strInstructions": instructions,
        "strMealThumb": f"https://img.test/{recipe_id}.jpg",
        "strYoutube": None,
    }
    for i, name in enumerate(ingredients, start=1):
        wire[f"strIngredient{i}"] = name
        wire[f"strMeasure{i}"] = "1 cup"
    return RecipeRecord.model_validate(wire)


def ingredient_names(count: int):
    return [f"ingredient {i}" for i in range(count)]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        CATALOG_BASE_URL=BASE_URL,
        CANDIDATE_TIMEOUT=1.0,
        DETAIL_TIMEOUT=1.0,
        STORAGE_BACKEND="memory",
    )


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def session(storage) -> SessionStore:
    store = SessionStore(storage)
    store.load()
    return store


@pytest.fixture
def catalog_factory(settings) -> Callable:
    """Build a CatalogClient whose HTTP calls go to ``handler``"""

    def build(handler) -> CatalogClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return CatalogClient(settings, client=http)

    return build


def meal_wire(recipe_id: str, title: str, ingredients=()) -> Dict:
    return make_recipe(recipe_id, title, ingredients).to_wire()
