"""Prompt templates for AI recipe generation.

Every builder is a pure function of its arguments, so the same inventory and
options always produce the same prompt. All prompts ask for JSON only and
keep responses short (recipe cap, instruction-step cap) to bound latency and
token cost.
"""

from typing import Iterable, List, Optional, Sequence

from fridgepal.models.models import GenerationOptions, InventoryItem, MealPlanPreferences


# Schema example shown to the model; field names match the normalizer's input
RECIPE_SCHEMA_EXAMPLE = """[
  {
    "id": "ai_1",
    "name": "Recipe name",
    "description": "Short description",
    "prepTime": 10,
    "cookTime": 20,
    "servings": 2,
    "difficulty": "easy",
    "calories": 450,
    "protein": 20,
    "carbs": 50,
    "fat": 15,
    "ingredients": ["ingredient with amount"],
    "instructions": ["Step 1", "Step 2"],
    "tags": ["quick"],
    "usesFromFridge": ["ingredient"],
    "needToBuy": ["ingredient"]
  }
]"""

MEAL_PLAN_SCHEMA_EXAMPLE = """{
  "mealPlan": [
    {
      "day": 1,
      "meals": [
        {
          "type": "breakfast",
          "name": "Recipe Name",
          "description": "Brief description",
          "prepTime": 15,
          "calories": 300,
          "mainIngredients": ["ingredient1", "ingredient2"]
        }
      ]
    }
  ],
  "shoppingList": ["items you might need to buy"]
}"""


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def format_inventory_item(item: InventoryItem) -> str:
    """Render an item as "name" or "name (quantity unit)".

    A zero or missing quantity leaves the name bare.
    """
    if not item.quantity:
        return item.name
    amount = f"{_format_number(item.quantity)} {item.unit or ''}".strip()
    return f"{item.name} ({amount})"


def build_constraint_lines(options: GenerationOptions) -> List[str]:
    """Constraint lines for the non-empty options, in a fixed order."""
    constraints = []
    if options.dietary_preferences:
        constraints.append(f"Dietary preferences: {', '.join(options.dietary_preferences)}")
    if options.meal_type:
        constraints.append(f"Meal type: {options.meal_type}")
    if options.max_cook_time:
        constraints.append(f"Maximum cooking time: {options.max_cook_time} minutes")
    if options.difficulty:
        constraints.append(f"Difficulty level: {options.difficulty}")
    if options.cuisine:
        constraints.append(f"Cuisine: {options.cuisine}")
    return constraints


def _rules(max_steps: int) -> str:
    return f"""Rules:
- Max {max_steps} instruction steps
- Short strings only
- No extra text"""


def build_recipe_prompt(
    items: Sequence[InventoryItem],
    options: GenerationOptions,
    max_recipes: int = 2,
    max_steps: int = 5,
) -> str:
    """Build the recipe generation prompt.

    Args:
        items: Inventory to cook from.
        options: Caller options; `number_of_recipes` is capped at `max_recipes`.
        max_recipes: Upper bound on requested recipes per call.
        max_steps: Upper bound on instruction steps per recipe.

    Returns:
        Prompt text instructing the model to return only a JSON array.
    """
    ingredients = ", ".join(format_inventory_item(item) for item in items)
    count = min(options.number_of_recipes, max_recipes)
    constraints = build_constraint_lines(options)
    constraint_block = "\n".join(constraints)

    return f"""
I have these ingredients:
{ingredients}

Suggest {count} simple recipes using mostly these ingredients.
{constraint_block}

Return ONLY a JSON array in this format:
{RECIPE_SCHEMA_EXAMPLE}

{_rules(max_steps)}
"""


def build_variation_prompt(dish_name: str, available_ingredients: Iterable[str], max_steps: int = 5) -> str:
    """Prompt for one variation of a named dish using the given ingredients."""
    return f"""
I want to make "{dish_name}" using these ingredients:
{", ".join(available_ingredients)}

Suggest 1 simple variation of this dish that mostly uses my ingredients.

Return ONLY a JSON array in this format:
{RECIPE_SCHEMA_EXAMPLE}

{_rules(max_steps)}
"""


def build_meal_plan_prompt(ingredient_names: Iterable[str], preferences: Optional[MealPlanPreferences] = None) -> str:
    """Prompt for a multi-day meal plan returned as a single JSON object."""
    preferences = preferences or MealPlanPreferences()
    return f"""
Create a {preferences.days}-day meal plan using these ingredients I have:
{", ".join(ingredient_names)}

For each day, suggest {preferences.meals_per_day} meals (breakfast, lunch, dinner, snack as needed).
Prioritize using ingredients that might expire soon.

Return the response as a JSON object with this structure:
{MEAL_PLAN_SCHEMA_EXAMPLE}

Only return the JSON object, no other text.
"""
