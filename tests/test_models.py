from recipe_finder.models.schemas import RecipeRecord

WIRE = {
    "idMeal": 52772,
    "strMeal": "Teriyaki Chicken Casserole",
    "strCategory": "Chicken",
    "strArea": "Japanese",
    "strInstructions": "Preheat oven.\r\nCombine soy sauce.\r\n",
    "strMealThumb": "https://www.themealdb.com/images/media/meals/wvpsxx1468256321.jpg",
    "strYoutube": "https://www.youtube.com/watch?v=4aZr5hZXP_s",
    "strIngredient1": "soy sauce",
    "strMeasure1": "3/4 cup",
    "strIngredient2": "water",
    "strMeasure2": "1/2 cup",
    "strIngredient3": "",
    "strMeasure3": " ",
    "strIngredient4": None,
    "strMeasure4": None,
    "strSource": None,
    "dateModified": None,
}


def test_wire_record_is_parsed_into_slots():
    recipe = RecipeRecord.model_validate(WIRE)
    assert recipe.id == "52772"
    assert recipe.area == "Japanese"
    assert recipe.video.endswith("4aZr5hZXP_s")
    assert len(recipe.ingredients) == 20
    assert recipe.ingredient_count == 2
    assert recipe.ingredient_lines() == [("soy sauce", "3/4 cup"), ("water", "1/2 cup")]
    assert recipe.instruction_steps() == ["Preheat oven.", "Combine soy sauce."]


def test_to_wire_uses_catalog_field_names():
    wire = RecipeRecord.model_validate(WIRE).to_wire()
    assert wire["idMeal"] == "52772"
    assert wire["strMeal"] == "Teriyaki Chicken Casserole"
    assert wire["strIngredient2"] == "water"
    assert wire["strMeasure20"] is None
    assert RecipeRecord.model_validate(wire) == RecipeRecord.model_validate(WIRE)


def test_sparse_record_with_nulls():
    recipe = RecipeRecord.model_validate({"idMeal": "1", "strMeal": None, "strInstructions": None})
    assert recipe.title is None
    assert recipe.ingredient_count == 0
    assert recipe.instruction_steps() == []
