from typing import Optional

from recipe_finder.models.schemas import (
    DerivedMetrics,
    Difficulty,
    DifficultyRating,
    RecipeRecord,
)

BASE_MINUTES = 30
MIN_MINUTES = 15
MAX_MINUTES = 120


def estimate_cooking_time(recipe: Optional[RecipeRecord]) -> int:
    """
    Estimate how long a recipe takes from how much text and how many
    ingredients it has. The catalog carries no timing data of its own.

    Returns:
        Minutes, always within [15, 120]
    """
    if recipe is None:
        return BASE_MINUTES

    minutes = BASE_MINUTES

    if recipe.instructions:
        word_count = len(recipe.instructions.split())
        if word_count > 300:
            minutes += 30
        elif word_count > 150:
            minutes += 15

    ingredient_count = recipe.ingredient_count
    if ingredient_count > 10:
        minutes += 25
    elif ingredient_count > 6:
        minutes += 15

    return max(MIN_MINUTES, min(minutes, MAX_MINUTES))


def classify_difficulty(recipe: Optional[RecipeRecord]) -> DifficultyRating:
    """Score ingredients plus instruction length into Easy / Medium / Hard"""
    if recipe is None:
        return _rating(Difficulty.MEDIUM)

    score = recipe.ingredient_count
    instruction_length = len(recipe.instructions or "")

    if instruction_length > 1000:
        score += 3
    elif instruction_length > 500:
        score += 2

    if score > 10:
        return _rating(Difficulty.HARD)
    if score > 6:
        return _rating(Difficulty.MEDIUM)
    return _rating(Difficulty.EASY)


def derive_metrics(recipe: Optional[RecipeRecord]) -> DerivedMetrics:
    return DerivedMetrics(
        estimated_minutes=estimate_cooking_time(recipe),
        difficulty=classify_difficulty(recipe),
    )


def _rating(level: Difficulty) -> DifficultyRating:
    return DifficultyRating(level=level, tag=level.value.lower())
