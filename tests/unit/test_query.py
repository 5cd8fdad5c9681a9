"""Unit tests for the ad hoc query runner."""

import argparse
from unittest.mock import AsyncMock, patch

import pytest
from rich.console import Console

from fridgepal.models.models import InventoryItem, Recipe, StructuredEntry, TextEntry
from fridgepal.services.errors import ConfigurationError, TransientApiError
from query import build_options, build_parser, main, parse_inventory_arg, render_recipe, run_query


def render_to_text(renderable) -> str:
    console = Console(record=True, width=100)
    console.print(renderable)
    return console.export_text()


class TestParseInventoryArg:
    """Test NAME[:QUANTITY[:UNIT]] parsing."""

    def test_name_only(self):
        """Test a bare ingredient name."""
        assert parse_inventory_arg("eggs") == InventoryItem(name="eggs")

    def test_quantity_and_unit(self):
        """Test name, quantity and unit."""
        assert parse_inventory_arg("milk:1:l") == InventoryItem(name="milk", quantity=1.0, unit="l")

    def test_quantity_without_unit(self):
        """Test name and quantity only."""
        item = parse_inventory_arg("lemons:2.5")

        assert item.quantity == 2.5
        assert item.unit is None

    @pytest.mark.parametrize("value", [":1:l", "  ", "milk:lots", "milk:-1:l"])
    def test_invalid_values(self, value):
        """Test that bad input raises ArgumentTypeError."""
        with pytest.raises(argparse.ArgumentTypeError):
            parse_inventory_arg(value)


class TestBuildOptions:
    """Test CLI argument handling."""

    def test_defaults(self):
        """Test options for ingredients only."""
        args = build_parser().parse_args(["eggs", "milk:1:l"])

        options = build_options(args)

        assert [item.name for item in args.ingredients] == ["eggs", "milk"]
        assert options.number_of_recipes == 2
        assert options.dietary_preferences == []
        assert options.meal_type is None

    def test_all_flags(self):
        """Test repeatable diets and every constraint flag."""
        args = build_parser().parse_args(
            [
                "--recipes", "1",
                "--diet", "vegan",
                "--diet", "nut-free",
                "--meal-type", "lunch",
                "--max-time", "25",
                "--difficulty", "easy",
                "--cuisine", "Thai",
                "--debug",
                "tofu",
            ]
        )

        options = build_options(args)

        assert options.number_of_recipes == 1
        assert options.dietary_preferences == ["vegan", "nut-free"]
        assert options.meal_type == "lunch"
        assert options.max_cook_time == 25
        assert options.difficulty == "easy"
        assert options.cuisine == "Thai"
        assert args.debug is True

    @pytest.mark.parametrize("argv", [[], ["--recipes", "0", "eggs"], ["--meal-type", "brunch", "eggs"]])
    def test_invalid_arguments_exit(self, argv):
        """Test that argparse rejects missing ingredients and bad values."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(argv)


class TestRenderRecipe:
    """Test rich rendering of a recipe."""

    def test_render_includes_facts_ingredients_and_steps(self):
        """Test that the panel shows the key recipe details."""
        recipe = Recipe(
            id="ai_1_0",
            name="Omelette",
            description="Fluffy eggs",
            prep_time=5,
            cook_time=10,
            calories=300,
            ingredients=[TextEntry(text="2 eggs"), StructuredEntry(name="chives", optional=True)],
            instructions=["Whisk", "Cook"],
            tags=["quick"],
            match_percentage=100,
            matched_ingredients=["2 eggs"],
        )

        text = render_to_text(render_recipe(recipe))

        assert "Omelette" in text
        assert "100% match" in text
        assert "15 min" in text
        assert "2 eggs" in text
        assert "chives" in text
        assert "1. Whisk" in text
        assert "2. Cook" in text
        assert "quick" in text


class TestRunQuery:
    """Test the end-to-end CLI flow with a mocked client."""

    @patch("query.GenerativeRecipeClient")
    def test_recipes_are_matched_and_sorted(self, mock_client_cls, config):
        """Test that generated recipes are matched against the inventory."""
        mock_client_cls.return_value.generate_recipes = AsyncMock(
            return_value=[
                Recipe(id="a", name="Cake", ingredients=[TextEntry(text="flour"), TextEntry(text="eggs")]),
                Recipe(id="b", name="Eggs", ingredients=[TextEntry(text="eggs")]),
            ]
        )
        items = [InventoryItem(name="eggs")]

        recipes = run_query(items, build_options(build_parser().parse_args(["eggs"])))

        assert [r.id for r in recipes] == ["b", "a"]
        assert [r.match_percentage for r in recipes] == [100, 50]

    @patch("query.run_query")
    def test_main_success(self, mock_run_query):
        """Test exit code 0 on success."""
        assert main(["eggs"]) == 0
        mock_run_query.assert_called_once()

    @patch("query.run_query", side_effect=ConfigurationError("Gemini API key not configured"))
    def test_main_configuration_error(self, mock_run_query):
        """Test exit code 1 when the key is missing."""
        assert main(["eggs"]) == 1

    @patch("query.run_query", side_effect=TransientApiError("429"))
    def test_main_generation_error(self, mock_run_query):
        """Test exit code 1 when generation fails."""
        assert main(["eggs"]) == 1
