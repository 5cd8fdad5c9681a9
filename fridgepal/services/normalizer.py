"""Parsing and normalization of model-generated recipes.

Turns raw model text into fully defaulted Recipe records. The model is asked
for a bare JSON array but often wraps it in markdown fences or prose, so
extraction is lenient:
1. Strip markdown code-fence markers
2. json.loads() on the remaining text
3. If that fails or is not an array, json.loads() on the slice from the first
   "[" to the last "]"
4. Otherwise raise RecipeParseError carrying the raw text

Field-level problems never raise: every field falls back to its default via
the helpers in fridgepal.utils.coerce. No network I/O; the same raw text and
batch id always produce the same records.
"""

import hashlib
import json
import re
from typing import Any, List, Optional
from urllib.parse import quote

from fridgepal.models.models import (
    IngredientEntry,
    MealPlan,
    MealPlanDay,
    PlannedMeal,
    Recipe,
    StructuredEntry,
    TextEntry,
)
from fridgepal.services.errors import RecipeParseError
from fridgepal.utils.coerce import coerce_int, coerce_list, coerce_name, coerce_str, coerce_str_or_none
from fridgepal.utils.logger import logger


DEFAULT_IMAGE_PLACEHOLDER = "https://source.unsplash.com/400x300/?food,{query}"

_FENCE = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)
_NOT_PARSED = object()

# Keys models use for the text of an instruction step, in preference order
_STEP_TEXT_KEYS = ("text", "instruction", "description", "step")


def strip_code_fences(text: str) -> str:
    """Remove ``` and ```json markers and surrounding whitespace."""
    return _FENCE.sub("", text).strip()


def _try_parse(text: str) -> Any:
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        # RecursionError: deeply nested input exhausts the decoder stack
        return _NOT_PARSED


def _extract_json(raw_text: Optional[str], open_char: str, close_char: str, expected: type, label: str) -> Any:
    if not isinstance(raw_text, str) or not raw_text.strip():
        raise RecipeParseError("Empty response from model", raw_text)

    cleaned = strip_code_fences(raw_text)

    parsed = _try_parse(cleaned)
    if isinstance(parsed, expected):
        return parsed

    start = cleaned.find(open_char)
    end = cleaned.rfind(close_char)
    if start != -1 and end > start:
        parsed = _try_parse(cleaned[start : end + 1])
        if isinstance(parsed, expected):
            return parsed

    logger.error(f"Failed to parse {label} from model response. Raw response: {raw_text!r}")
    raise RecipeParseError(f"No parseable JSON {label} in model response", raw_text)


def extract_json_array(raw_text: Optional[str]) -> list:
    """Extract the JSON array from raw model text.

    Raises:
        RecipeParseError: No parseable array was found. `raw_text` is attached.
    """
    return _extract_json(raw_text, "[", "]", list, "array")


def extract_json_object(raw_text: Optional[str]) -> dict:
    """Extract a JSON object from raw model text (meal plans).

    Raises:
        RecipeParseError: No parseable object was found. `raw_text` is attached.
    """
    return _extract_json(raw_text, "{", "}", dict, "object")


# ---------- Field converters ----------


def to_ingredient_entry(value: Any) -> Optional[IngredientEntry]:
    """Convert a raw ingredient (string, mapping or entry) to an IngredientEntry.

    Mappings need a usable name under "name", "ingredient" or "item". Returns
    None for anything that cannot name an ingredient.
    """
    if isinstance(value, (TextEntry, StructuredEntry)):
        return value
    if isinstance(value, str):
        text = value.strip()
        return TextEntry(text=text) if text else None
    if isinstance(value, dict):
        name = coerce_str(value.get("name")) or coerce_str(value.get("ingredient")) or coerce_str(value.get("item"))
        if not name:
            return None
        amount = value.get("amount", value.get("quantity"))
        return StructuredEntry(
            name=name,
            amount=coerce_str(amount) or None,
            unit=coerce_str(value.get("unit")) or None,
            optional=value.get("optional") is True,
        )
    return None


def to_instruction(value: Any) -> Optional[str]:
    """Convert a raw instruction step (string or mapping) to its text."""
    if isinstance(value, dict):
        for key in _STEP_TEXT_KEYS:
            text = value.get(key)
            if isinstance(text, str) and text.strip():
                return text.strip()
        return None
    if isinstance(value, str):
        return value.strip() or None
    return None


def default_batch_id(raw_text: str) -> str:
    """Stable batch id derived from the response text."""
    return hashlib.sha1(raw_text.encode("utf-8")).hexdigest()[:8]


class RecipeResponseNormalizer:
    """Parses raw model text into Recipe and MealPlan records.

    Stateless apart from the image placeholder template; safe to share
    between concurrent callers.
    """

    def __init__(self, image_placeholder_url: str = DEFAULT_IMAGE_PLACEHOLDER) -> None:
        self.image_placeholder_url = image_placeholder_url

    def placeholder_image(self, name: str) -> str:
        # Only {query} is substituted; other braces in the URL are left as they are
        return self.image_placeholder_url.replace("{query}", quote(name, safe=""))

    def normalize(self, data: Any, index: int, batch_id: str, ai_generated: bool = True) -> Recipe:
        """Build a complete Recipe from one parsed element.

        Args:
            data: Parsed JSON element; non-mappings are treated as {}.
            index: Position in the source array, used for the default id.
            batch_id: Batch component of the default id.
            ai_generated: Value for `is_ai_generated`.

        Returns:
            Recipe with every field set.
        """
        if not isinstance(data, dict):
            data = {}

        raw_name = coerce_str(data.get("name")) or coerce_str(data.get("title"))
        default_id = f"ai_{batch_id}_{index}" if ai_generated else f"local_{index}"

        return Recipe(
            id=coerce_str(data.get("id")) or default_id,
            name=raw_name or "Unnamed Recipe",
            description=coerce_str(data.get("description")),
            image=coerce_str(data.get("image")) or self.placeholder_image(raw_name or "dish"),
            prep_time=coerce_int(data.get("prepTime"), 15, minimum=0),
            cook_time=coerce_int(data.get("cookTime"), 30, minimum=0),
            servings=coerce_int(data.get("servings"), 4, minimum=1),
            difficulty=coerce_str(data.get("difficulty"), "medium"),
            calories=coerce_int(data.get("calories"), 0, minimum=0),
            protein=coerce_int(data.get("protein"), 0, minimum=0),
            carbs=coerce_int(data.get("carbs"), 0, minimum=0),
            fat=coerce_int(data.get("fat"), 0, minimum=0),
            ingredients=coerce_list(data.get("ingredients"), to_ingredient_entry),
            instructions=coerce_list(data.get("instructions"), to_instruction),
            tags=coerce_list(data.get("tags"), coerce_str_or_none),
            uses_from_fridge=coerce_list(data.get("usesFromFridge"), coerce_name),
            need_to_buy=coerce_list(data.get("needToBuy"), coerce_name),
            match_percentage=coerce_int(data.get("matchPercentage"), 0, minimum=0, maximum=100),
            is_ai_generated=ai_generated,
        )

    def parse(self, raw_text: Optional[str], batch_id: Optional[str] = None) -> List[Recipe]:
        """Parse raw model text into recipes, preserving source order.

        Args:
            raw_text: Model output expected to contain a JSON array.
            batch_id: Id component for records without an id. Defaults to a
                hash of `raw_text`.

        Returns:
            Normalized recipes with ids unique within the batch.

        Raises:
            RecipeParseError: No parseable JSON array in `raw_text`.
        """
        elements = extract_json_array(raw_text)
        batch_id = batch_id or default_batch_id(raw_text)

        recipes = []
        seen_ids = set()
        for index, element in enumerate(elements):
            recipe = self.normalize(element, index, batch_id)
            if recipe.id in seen_ids:
                unique_id = f"{recipe.id}_{index}"
                while unique_id in seen_ids:
                    unique_id += "_"
                recipe = recipe.model_copy(update={"id": unique_id})
            seen_ids.add(recipe.id)
            recipes.append(recipe)

        logger.debug(f"Normalized {len(recipes)} recipes (batch {batch_id})")
        return recipes

    def parse_meal_plan(self, raw_text: Optional[str]) -> MealPlan:
        """Parse raw model text into a MealPlan.

        Raises:
            RecipeParseError: No parseable JSON object in `raw_text`.
        """
        data = extract_json_object(raw_text)

        days = []
        for index, day in enumerate(coerce_list(data.get("mealPlan"))):
            if not isinstance(day, dict):
                continue
            meals = [
                PlannedMeal(
                    type=coerce_str(meal.get("type"), "meal"),
                    name=coerce_str(meal.get("name"), "Unnamed Meal"),
                    description=coerce_str(meal.get("description")),
                    prep_time=coerce_int(meal.get("prepTime"), 15, minimum=0),
                    calories=coerce_int(meal.get("calories"), 0, minimum=0),
                    main_ingredients=coerce_list(meal.get("mainIngredients"), coerce_name),
                )
                for meal in coerce_list(day.get("meals"))
                if isinstance(meal, dict)
            ]
            days.append(MealPlanDay(day=coerce_int(day.get("day"), index + 1, minimum=1), meals=meals))

        return MealPlan(
            meal_plan=days,
            shopping_list=coerce_list(data.get("shoppingList"), coerce_name),
        )


_default_normalizer = RecipeResponseNormalizer()


def parse_recipe_response(raw_text: Optional[str], batch_id: Optional[str] = None) -> List[Recipe]:
    """Parse with the default image placeholder. See RecipeResponseNormalizer.parse."""
    return _default_normalizer.parse(raw_text, batch_id=batch_id)


def recipe_from_record(record: Any, index: int = 0) -> Recipe:
    """Normalize a locally stored recipe record (not AI generated).

    Stored records use the same camelCase keys as generated ones; a missing
    id becomes "local_{index}".
    """
    return _default_normalizer.normalize(record, index, batch_id="local", ai_generated=False)
