#!/usr/bin/env python3
"""Ad hoc recipe generation for FridgePal.

Generate recipes from the command line without the mobile app.

Usage:
    python query.py chicken rice "milk:1:l"
    python query.py --recipes 2 --diet vegetarian --meal-type dinner tomato pasta
    python query.py --max-time 20 --difficulty easy eggs "cheese:200:g"
    python query.py --debug eggs spinach  # Show full JSON for each recipe

Ingredients use NAME[:QUANTITY[:UNIT]] syntax. The generated recipes are
matched against the given ingredients and shown best match first.

Requires GEMINI_API_KEY (environment or .env).
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table

from fridgepal.models.models import GenerationOptions, InventoryItem, Recipe, ingredient_name
from fridgepal.services.errors import ConfigurationError, RecipeServiceError
from fridgepal.services.gemini_client import GenerativeRecipeClient
from fridgepal.services.matcher import match_recipes_to_inventory
from fridgepal.utils.config import Config
from fridgepal.utils.logger import logger

console = Console()


def parse_inventory_arg(value: str) -> InventoryItem:
    """Parse "name[:quantity[:unit]]" into an InventoryItem.

    Raises:
        argparse.ArgumentTypeError: Blank name or non-numeric quantity.
    """
    name, _, rest = value.partition(":")
    quantity_text, _, unit = rest.partition(":")

    if not name.strip():
        raise argparse.ArgumentTypeError(f"ingredient name missing in {value!r}")

    quantity = None
    if quantity_text.strip():
        try:
            quantity = float(quantity_text)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid quantity {quantity_text!r} in {value!r}") from None
        if quantity < 0:
            raise argparse.ArgumentTypeError(f"quantity must not be negative in {value!r}")

    return InventoryItem(name=name, quantity=quantity, unit=unit or None)


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a whole number, got {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="query.py",
        description="Generate recipes from the ingredients you have.",
    )
    parser.add_argument(
        "ingredients",
        nargs="+",
        type=parse_inventory_arg,
        metavar="INGREDIENT",
        help="NAME[:QUANTITY[:UNIT]], e.g. eggs or milk:1:l",
    )
    parser.add_argument("--recipes", type=positive_int, default=2, help="number of recipes to request (default: 2)")
    parser.add_argument("--diet", action="append", default=[], help="dietary preference (repeatable)")
    parser.add_argument("--meal-type", choices=["breakfast", "lunch", "dinner", "snack"])
    parser.add_argument("--max-time", type=positive_int, help="maximum cooking time in minutes")
    parser.add_argument("--difficulty", choices=["easy", "medium", "hard"])
    parser.add_argument("--cuisine")
    parser.add_argument("--debug", action="store_true", help="print the full JSON of each recipe")
    return parser


def build_options(args: argparse.Namespace) -> GenerationOptions:
    """Translate parsed CLI arguments into GenerationOptions."""
    return GenerationOptions(
        number_of_recipes=args.recipes,
        dietary_preferences=args.diet,
        meal_type=args.meal_type,
        max_cook_time=args.max_time,
        difficulty=args.difficulty,
        cuisine=args.cuisine,
    )


def render_recipe(recipe: Recipe) -> Panel:
    """Render one recipe as a rich Panel with facts, ingredients and steps."""
    facts = Table.grid(padding=(0, 2))
    facts.add_row(
        f"[bold]{recipe.match_percentage}%[/bold] match",
        f"{recipe.total_time} min",
        f"serves {recipe.servings}",
        recipe.difficulty,
        f"{recipe.calories} kcal",
    )

    ingredients = Table(show_header=False, box=None, padding=(0, 1))
    matched = set(recipe.matched_ingredients)
    for line, entry in zip(recipe.ingredient_lines(), recipe.ingredients):
        if entry.optional:
            marker = "[dim]~[/dim]"
        elif ingredient_name(entry) in matched:
            marker = "[green]✓[/green]"
        else:
            marker = "[red]✗[/red]"
        ingredients.add_row(marker, line)

    steps = "\n".join(f"{i}. {step}" for i, step in enumerate(recipe.instructions, start=1))

    parts = [facts]
    if recipe.description:
        parts.append(f"[italic]{recipe.description}[/italic]")
    parts.append(ingredients)
    if steps:
        parts.append(steps)
    if recipe.tags:
        parts.append(f"[dim]{', '.join(recipe.tags)}[/dim]")

    return Panel(Group(*parts), title=f"[bold cyan]{recipe.name}[/bold cyan]", subtitle=recipe.id)


def run_query(items: List[InventoryItem], options: GenerationOptions, debug: bool = False) -> List[Recipe]:
    """Generate, match and print recipes for `items`.

    Returns:
        The matched recipes, best match first.
    """
    client = GenerativeRecipeClient(Config())

    logger.info(f"Requesting recipes for: {', '.join(item.name for item in items)}")
    recipes = asyncio.run(client.generate_recipes(items, options))
    recipes = match_recipes_to_inventory(recipes, items)

    console.print()
    if not recipes:
        console.print("[yellow]No recipes returned[/yellow]")
        return recipes

    for recipe in recipes:
        console.print(render_recipe(recipe))
        if debug:
            console.print_json(data=recipe.model_dump(mode="json", by_alias=True))
    return recipes


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        run_query(args.ingredients, build_options(args), debug=args.debug)
    except KeyboardInterrupt:
        logger.info("Query interrupted by user.")
        return 0
    except ConfigurationError as e:
        console.print(f"[red]✗ Configuration error: {e}[/red]")
        return 1
    except RecipeServiceError as e:
        logger.error(f"Recipe generation failed: {e}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
