from recipe_finder.models.schemas import RecipeRecord


def matches(recipe: RecipeRecord, ingredient: str) -> bool:
    """Check ingredient slots, then instructions, then the title"""
    token = ingredient.strip().lower()
    if not token:
        return False

    for slot in recipe.ingredients:
        if not slot.is_empty and token in slot.name.lower():
            return True

    if recipe.instructions and token in recipe.instructions.lower():
        return True

    if recipe.title and token in recipe.title.lower():
        return True

    return False
