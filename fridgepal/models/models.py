"""Data models for the recipe pipeline.

Defines Pydantic models for inventory input, generation options, ingredient
entries, normalized recipes and meal plans. All models use Pydantic v2.
Recipes and meal plans serialize with camelCase aliases
(`model_dump(by_alias=True)`) to match the application's wire format, and
accept either spelling on input.
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


MealType = Literal["breakfast", "lunch", "dinner", "snack"]


class InventoryItem(BaseModel):
    """An item the user has at home. Immutable input to matching and prompts."""

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    name: str = Field(..., min_length=1, description="Display name of the item")
    quantity: Optional[float] = Field(None, ge=0, description="Amount on hand, if known")
    unit: Optional[str] = Field(None, description="Unit for quantity, e.g. 'g', 'l', 'pcs'")

    @field_validator("unit")
    @classmethod
    def blank_unit_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class GenerationOptions(BaseModel):
    """Caller options for AI recipe generation."""

    model_config = ConfigDict(str_strip_whitespace=True, alias_generator=to_camel, populate_by_name=True)

    number_of_recipes: int = Field(5, ge=1, description="Requested count; the prompt caps it")
    dietary_preferences: List[str] = Field(default_factory=list)
    meal_type: Optional[MealType] = None
    max_cook_time: Optional[int] = Field(None, ge=1, description="Upper bound in minutes")
    difficulty: Optional[str] = None
    cuisine: Optional[str] = None

    @field_validator("dietary_preferences")
    @classmethod
    def drop_blank_preferences(cls, v: List[str]) -> List[str]:
        return [p.strip() for p in v if p and p.strip()]


# ---------- Ingredient entries ----------


class TextEntry(BaseModel):
    """Free-text ingredient line, e.g. "2 cups flour"."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str
    optional: bool = False


class StructuredEntry(BaseModel):
    """Ingredient with separate name, amount and unit."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["structured"] = "structured"
    name: str
    amount: Optional[str] = None
    unit: Optional[str] = None
    optional: bool = False


IngredientEntry = Annotated[Union[TextEntry, StructuredEntry], Field(discriminator="kind")]


def ingredient_name(entry: Union[TextEntry, StructuredEntry]) -> str:
    """Name used for matching: the full text line or the structured name."""
    if isinstance(entry, TextEntry):
        return entry.text
    return entry.name


def ingredient_display(entry: Union[TextEntry, StructuredEntry]) -> str:
    """Human-readable "amount unit name" string for any entry."""
    if isinstance(entry, TextEntry):
        return entry.text
    return " ".join(part for part in (entry.amount, entry.unit, entry.name) if part)


# ---------- Recipes ----------


class Recipe(BaseModel):
    """Normalized recipe record.

    Every field has a type-correct default so a record built from partial
    model output is always complete. Matching annotates copies through
    `model_copy(update=...)`; instances are never mutated in place.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str = "Unnamed Recipe"
    description: str = ""
    image: str = ""
    prep_time: int = Field(15, ge=0)
    cook_time: int = Field(30, ge=0)
    servings: int = Field(4, ge=1)
    difficulty: str = "medium"
    calories: int = Field(0, ge=0)
    protein: int = Field(0, ge=0)
    carbs: int = Field(0, ge=0)
    fat: int = Field(0, ge=0)
    ingredients: List[IngredientEntry] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    uses_from_fridge: List[str] = Field(default_factory=list)
    need_to_buy: List[str] = Field(default_factory=list)
    match_percentage: int = Field(0, ge=0, le=100)
    matched_ingredients: List[str] = Field(default_factory=list)
    missing_ingredients: List[str] = Field(default_factory=list)
    is_ai_generated: bool = False

    @property
    def total_time(self) -> int:
        return self.prep_time + self.cook_time

    def ingredient_lines(self) -> List[str]:
        return [ingredient_display(entry) for entry in self.ingredients]


class MatchResult(BaseModel):
    """Coverage of one ingredient list by an inventory."""

    model_config = ConfigDict(frozen=True)

    match_percentage: int = Field(..., ge=0, le=100)
    matched_ingredients: List[str]
    missing_ingredients: List[str]


# ---------- Meal plans ----------


class MealPlanPreferences(BaseModel):
    """Options for weekly meal plan generation."""

    days: int = Field(7, ge=1, le=14)
    meals_per_day: int = Field(3, ge=1, le=6)


class PlannedMeal(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: str = "meal"
    name: str = "Unnamed Meal"
    description: str = ""
    prep_time: int = Field(15, ge=0)
    calories: int = Field(0, ge=0)
    main_ingredients: List[str] = Field(default_factory=list)


class MealPlanDay(BaseModel):
    day: int = Field(..., ge=1)
    meals: List[PlannedMeal] = Field(default_factory=list)


class MealPlan(BaseModel):
    """A multi-day plan plus the items the user still has to buy."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    meal_plan: List[MealPlanDay] = Field(default_factory=list)
    shopping_list: List[str] = Field(default_factory=list)
