from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from recipe_finder.core.errors import SearchSignal

INGREDIENT_SLOTS = 20


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None


class IngredientSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    measure: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.name and self.name.strip())


class RecipeRecord(BaseModel):
    """A meal as returned by the catalog's lookup endpoint"""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(..., alias="idMeal")
    title: Optional[str] = Field(None, alias="strMeal")
    category: Optional[str] = Field(None, alias="strCategory")
    area: Optional[str] = Field(None, alias="strArea")
    instructions: Optional[str] = Field(None, alias="strInstructions")
    thumbnail: Optional[str] = Field(None, alias="strMealThumb")
    video: Optional[str] = Field(None, alias="strYoutube")
    ingredients: Tuple[IngredientSlot, ...] = Field(default_factory=tuple)

    @model_validator(mode="before")
    @classmethod
    def collect_ingredient_slots(cls, data: Any) -> Any:
        """Fold the wire's strIngredientN / strMeasureN columns into slots"""
        if not isinstance(data, dict) or "ingredients" in data:
            return data

        data = dict(data)
        slots = []
        for i in range(1, INGREDIENT_SLOTS + 1):
            slots.append(
                {
                    "name": data.pop(f"strIngredient{i}", None),
                    "measure": data.pop(f"strMeasure{i}", None),
                }
            )
        data["ingredients"] = slots
        return data

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        if isinstance(v, int):
            return str(v)
        return v

    @property
    def ingredient_count(self) -> int:
        return sum(1 for slot in self.ingredients if not slot.is_empty)

    def ingredient_lines(self) -> List[Tuple[str, str]]:
        return [
            (slot.name.strip(), (slot.measure or "").strip())
            for slot in self.ingredients
            if not slot.is_empty
        ]

    def instruction_steps(self) -> List[str]:
        if not self.instructions:
            return []
        return [step.strip() for step in self.instructions.split("\n") if step.strip()]

    def to_wire(self) -> Dict[str, Optional[str]]:
        wire = self.model_dump(by_alias=True, exclude={"ingredients"})
        for i in range(1, INGREDIENT_SLOTS + 1):
            slot = self.ingredients[i - 1] if i <= len(self.ingredients) else IngredientSlot()
            wire[f"strIngredient{i}"] = slot.name
            wire[f"strMeasure{i}"] = slot.measure
        return wire


class DifficultyRating(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: Difficulty
    tag: str


class DerivedMetrics(BaseModel):
    estimated_minutes: int = Field(..., ge=15, le=120)
    difficulty: DifficultyRating


class FilterConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    max_minutes: int = Field(60, ge=15, le=120)
    category: str = ""
    difficulty: Optional[Difficulty] = None
    ingredients_only: bool = False

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, v):
        return (v or "").strip()

    @field_validator("difficulty", mode="before")
    @classmethod
    def empty_difficulty_is_unset(cls, v):
        if isinstance(v, str):
            return Difficulty(v) if v.strip() else None
        return v


class SearchOutcome(BaseModel):
    """What the catalog client hands back for a search that did not fail"""

    recipes: List[RecipeRecord] = []
    signal: SearchSignal
    candidate_count: int = 0
