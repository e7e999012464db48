import asyncio

import httpx
import pytest
from conftest import ingredient_names, meal_wire

from recipe_finder.core.errors import SearchErrorKind, SearchSignal
from recipe_finder.services.search import DETAIL_ERROR_MESSAGE, SearchController

MEALS = {
    "1": meal_wire("1", "Chicken Rice Bowl", ["Chicken", "Rice"]),
    "2": meal_wire("2", "Egg Fried Rice", ["Eggs", "Rice", "Soy Sauce"]),
    "3": meal_wire("3", "Beef Wellington", ingredient_names(11)),
    "10": meal_wire("10", "Beef Stroganoff", ["Beef", "Cream"]),
}

CANDIDATES = {
    "chicken": ["1", "2", "3"],
    "beef": ["10"],
    "broken": ["404"],
}


def fake_catalog(failing=(), gate=None):
    async def handler(request: httpx.Request) -> httpx.Response:
        key = request.url.params["i"]
        if request.url.path.endswith("/filter.php"):
            if gate is not None and key in gate:
                started, release = gate[key]
                started.set()
                await release.wait()
            ids = CANDIDATES.get(key)
            return httpx.Response(200, json={"meals": [{"idMeal": i} for i in ids] if ids else None})

        if key in failing:
            raise httpx.ReadTimeout("slow", request=request)
        meal = MEALS.get(key)
        return httpx.Response(200, json={"meals": [meal] if meal else None})

    return handler


@pytest.fixture
def controller_factory(catalog_factory, session):
    def build(**kwargs) -> SearchController:
        return SearchController(catalog_factory(fake_catalog(**kwargs)), session)

    return build


@pytest.mark.asyncio
async def test_partial_failure_records_full_query(controller_factory, session):
    controller = controller_factory(failing={"3"})
    result = await controller.search("chicken, rice")

    assert result.error is None
    assert result.signal == SearchSignal.FOUND
    assert [r.id for r in result.recipes] == ["1", "2"]
    assert result.filtered == result.recipes
    assert not result.loading
    assert session.history == ["chicken, rice"]


@pytest.mark.asyncio
async def test_no_matches_is_not_an_error(controller_factory, session):
    controller = controller_factory()
    result = await controller.search("xyzinvalid")

    assert result.error is None
    assert result.signal == SearchSignal.NO_MATCHES
    assert result.recipes == []
    assert '"xyzinvalid"' in result.message
    assert session.history == []


@pytest.mark.asyncio
async def test_details_unavailable_still_records_history(controller_factory, session):
    controller = controller_factory()
    result = await controller.search("broken")

    assert result.error == SearchErrorKind.DETAILS_UNAVAILABLE
    assert result.message == "Found recipes but failed to load details. Please try again."
    assert result.recipes == []
    assert session.history == ["broken"]


@pytest.mark.asyncio
async def test_empty_query_sets_guidance(controller_factory, session):
    controller = controller_factory()
    result = await controller.search("   ")

    assert result.error == SearchErrorKind.EMPTY_QUERY
    assert result.message == "Please enter at least one ingredient"
    assert not result.loading
    assert session.history == []


@pytest.mark.asyncio
async def test_stale_search_does_not_overwrite_newer(controller_factory, session):
    started, release = asyncio.Event(), asyncio.Event()
    controller = controller_factory(gate={"beef": (started, release)})

    slow = asyncio.create_task(controller.search("beef"))
    await started.wait()
    await controller.search("chicken")
    release.set()
    await slow

    assert controller.result.query == "chicken"
    assert [r.id for r in controller.result.recipes] == ["1", "2", "3"]
    assert session.history == ["chicken"]


@pytest.mark.asyncio
async def test_filter_changes_recompute_view(controller_factory):
    controller = controller_factory()
    await controller.search("chicken")

    controller.update_filters(difficulty="hard")
    assert [r.id for r in controller.result.filtered] == ["3"]
    assert controller.result.is_narrowed

    controller.update_filters(difficulty="", ingredients_only=True)
    controller.set_search_text("egg, milk")
    assert [r.id for r in controller.result.filtered] == ["2"]

    controller.reset_filters()
    assert [r.id for r in controller.result.filtered] == ["1", "2", "3"]


@pytest.mark.asyncio
async def test_invalid_filter_leaves_config_untouched(controller_factory):
    controller = controller_factory()
    with pytest.raises(ValueError):
        controller.update_filters(category="beef", max_minutes=500)
    assert controller.filters.category == ""
    assert controller.filters.max_minutes == 60


@pytest.mark.asyncio
async def test_clear_resets_result_but_keeps_history(controller_factory, session):
    controller = controller_factory()
    await controller.search("beef")
    controller.clear()

    assert controller.result.recipes == []
    assert not controller.result.has_searched
    assert controller.search_text == ""
    assert session.history == ["beef"]


@pytest.mark.asyncio
async def test_open_recipe(controller_factory):
    controller = controller_factory(failing={"2"})
    recipe = await controller.open_recipe("1")
    assert recipe.title == "Chicken Rice Bowl"
    assert controller.selected == recipe

    assert await controller.open_recipe("2") is None
    assert controller.result.error == SearchErrorKind.TIMEOUT
    assert controller.result.message == DETAIL_ERROR_MESSAGE


@pytest.mark.asyncio
async def test_toggle_favorite_through_controller(controller_factory, session):
    controller = controller_factory()
    result = await controller.search("beef")
    recipe = result.recipes[0]

    assert controller.toggle_favorite(recipe) is True
    assert session.is_favorite("10")
    assert controller.toggle_favorite(recipe) is False
    assert session.favorites == []


class ExplodingCatalog:
    async def search(self, query):
        raise RuntimeError("catalog bug")


@pytest.mark.asyncio
async def test_unexpected_error_clears_loading(session):
    controller = SearchController(ExplodingCatalog(), session)
    with pytest.raises(RuntimeError):
        await controller.search("beef")

    assert controller.result.loading is False
    assert session.history == []
