from typing import Iterable, List

from recipe_finder.core.estimator import classify_difficulty, estimate_cooking_time
from recipe_finder.core.matcher import matches
from recipe_finder.models.schemas import FilterConfig, RecipeRecord
from recipe_finder.utils import split_ingredients


def apply_filters(
    records: Iterable[RecipeRecord],
    config: FilterConfig,
    active_query_text: str = "",
) -> List[RecipeRecord]:
    """
    Narrow fetched recipes down to the ones the current filters allow.

    Predicates are AND-combined in a fixed order: time ceiling, category
    substring, difficulty level, then the ingredients-only check against the
    text currently in the search box. A default config only drops recipes
    estimated above 60 minutes. Input order is preserved.

    Args:
        records: Recipes from the last search
        config: Current filter settings
        active_query_text: Raw search box text, comma separated ingredients

    Returns:
        New list with the recipes that pass every predicate
    """
    filtered = list(records)

    filtered = [r for r in filtered if estimate_cooking_time(r) <= config.max_minutes]

    if config.category:
        category = config.category.lower()
        filtered = [
            r for r in filtered if r.category and category in r.category.lower()
        ]

    if config.difficulty is not None:
        filtered = [
            r for r in filtered if classify_difficulty(r).level == config.difficulty
        ]

    if config.ingredients_only and active_query_text.strip():
        tokens = split_ingredients(active_query_text)
        filtered = [r for r in filtered if any(matches(r, token) for token in tokens)]

    return filtered
