"""Ingredient matching of recipes against the user's inventory.

Two names match when, case-folded, either one contains the other
("milk" matches "Whole milk", "chicken breast" matches "chicken"). No
tokenization, stemming or unit awareness.

Optional ingredients are left out entirely: they count neither toward the
percentage nor in the matched/missing lists. Blank inventory names never
match.

All functions are pure: inputs are not modified and annotated recipes are
new copies.
"""

from typing import Any, Iterable, List, Sequence

from fridgepal.models.models import InventoryItem, MatchResult, Recipe, ingredient_name
from fridgepal.services.normalizer import to_ingredient_entry


def _inventory_names(inventory_items: Iterable[Any]) -> List[str]:
    names = []
    for item in inventory_items:
        if isinstance(item, InventoryItem):
            name = item.name
        elif isinstance(item, dict):
            name = item.get("name")
        else:
            name = item
        if isinstance(name, str) and name.strip():
            names.append(name.strip().casefold())
    return names


def names_match(ingredient: str, inventory_name: str) -> bool:
    """Bidirectional case-insensitive containment."""
    a = ingredient.strip().casefold()
    b = inventory_name.strip().casefold()
    if not a or not b:
        return False
    return a in b or b in a


def _percentage(matched: int, total: int) -> int:
    if total == 0:
        return 0
    # Round half up; round() would send 0.5 to the even neighbour
    return (matched * 200 + total) // (total * 2)


def calculate_match(recipe_ingredients: Sequence[Any], inventory_items: Iterable[Any]) -> MatchResult:
    """Compute coverage of `recipe_ingredients` by `inventory_items`.

    Args:
        recipe_ingredients: Strings, ingredient mappings or IngredientEntry
            values. Entries that cannot name an ingredient are ignored.
        inventory_items: InventoryItem values, mappings with "name", or strings.

    Returns:
        MatchResult with the rounded percentage and the matched and missing
        ingredient names in recipe order. Zero required ingredients gives 0%.
    """
    fridge_names = _inventory_names(inventory_items)

    matched: List[str] = []
    missing: List[str] = []
    for raw in recipe_ingredients:
        entry = to_ingredient_entry(raw)
        if entry is None or entry.optional:
            continue
        name = ingredient_name(entry)
        if any(names_match(name, fridge_name) for fridge_name in fridge_names):
            matched.append(name)
        else:
            missing.append(name)

    required = len(matched) + len(missing)
    return MatchResult(
        match_percentage=_percentage(len(matched), required),
        matched_ingredients=matched,
        missing_ingredients=missing,
    )


def match_recipe(recipe: Recipe, inventory_items: Iterable[Any]) -> Recipe:
    """Return a copy of `recipe` annotated with its match against the inventory."""
    result = calculate_match(recipe.ingredients, inventory_items)
    return recipe.model_copy(
        update={
            "match_percentage": result.match_percentage,
            "matched_ingredients": result.matched_ingredients,
            "missing_ingredients": result.missing_ingredients,
        }
    )


def match_recipes_to_inventory(recipes: Iterable[Recipe], inventory_items: Iterable[Any]) -> List[Recipe]:
    """Annotate every recipe and sort by match percentage, highest first.

    The sort is stable: recipes with equal percentages keep their input order.
    """
    inventory = list(inventory_items)
    annotated = [match_recipe(recipe, inventory) for recipe in recipes]
    return sorted(annotated, key=lambda recipe: recipe.match_percentage, reverse=True)
