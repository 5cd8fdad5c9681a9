"""AI recipe generation with Gemini.

GenerativeRecipeClient builds prompts from the user's inventory, sends them
through a TextTransport with bounded retries, and normalizes the answer into
Recipe records.

**Retry Strategy:**
- Up to `MAX_RETRIES` attempts per request (default 5)
- Only retryable kinds are retried: RATE_LIMITED (429 / quota),
  EMPTY_RESPONSE and TIMEOUT
- TIMEOUT is retried deliberately, not only 429s: a per-attempt timeout is
  as transient as a rate limit
- Wait before attempt n+1 is 2**n * RETRY_BASE_DELAY seconds
  (10s, 20s, 40s, 80s with the default 5s base); never before the first
- Any other kind (invalid key, unknown model, server error, unknown) raises
  NonRetryableApiError at once
- When the budget is exhausted the last error is raised

Request lifecycle, logged at DEBUG:
CONFIGURED -> REQUESTING -> (RETRY_WAIT -> REQUESTING)* -> RAW_RECEIVED
-> PARSING -> NORMALIZED, or FAILED.

Each call keeps its retry state in local variables, so one client can serve
concurrent requests.
"""

import asyncio
import time
import uuid
from typing import Iterable, List, Optional, Sequence

from fridgepal.models.models import GenerationOptions, InventoryItem, MealPlan, MealPlanPreferences, Recipe
from fridgepal.prompts.prompts import build_meal_plan_prompt, build_recipe_prompt, build_variation_prompt
from fridgepal.services.errors import ConfigurationError, GenerationError, RecipeParseError
from fridgepal.services.normalizer import RecipeResponseNormalizer
from fridgepal.services.transport import GeminiTransport, TextTransport, as_generation_error
from fridgepal.utils.config import Config
from fridgepal.utils.logger import logger


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Seconds to wait after failed attempt `attempt` (1-based)."""
    return (2 ** attempt) * base_delay


class GenerativeRecipeClient:
    """Generates recipes and meal plans from an inventory.

    Args:
        config: Explicit configuration; `GEMINI_API_KEY` must be set.
        transport: Transport override, mainly for tests. Defaults to a
            GeminiTransport built from `config`.
        normalizer: Normalizer override. Defaults to one using the configured
            image placeholder.

    Raises:
        ConfigurationError: `config.GEMINI_API_KEY` is empty.
    """

    def __init__(
        self,
        config: Config,
        transport: Optional[TextTransport] = None,
        normalizer: Optional[RecipeResponseNormalizer] = None,
    ) -> None:
        if not config.GEMINI_API_KEY:
            raise ConfigurationError("Gemini API key not configured (set GEMINI_API_KEY)")
        config.validate()

        self.config = config
        self.transport = transport or GeminiTransport(config)
        self.normalizer = normalizer or RecipeResponseNormalizer(config.IMAGE_PLACEHOLDER_URL)

    async def generate_text(self, prompt: str, request_id: Optional[str] = None) -> str:
        """Send `prompt` with retry/backoff and return the raw generated text.

        Args:
            prompt: Complete prompt.
            request_id: Correlation id for log lines. Generated when omitted.

        Returns:
            Non-empty generated text.

        Raises:
            NonRetryableApiError: Permanent failure, raised on the attempt it occurred.
            TransientApiError: Last retryable failure once MAX_RETRIES is used up
                (EmptyResponseError when the last attempt returned no text).
        """
        request_id = request_id or uuid.uuid4().hex[:8]
        max_retries = self.config.MAX_RETRIES

        for attempt in range(1, max_retries + 1):
            log_context = {"request_id": request_id, "attempt": attempt}
            logger.debug(f"REQUESTING attempt {attempt}/{max_retries}", extra=log_context)
            try:
                text = await self.transport.generate_text(prompt)
            except Exception as e:
                error = as_generation_error(e)
                error.attempts = attempt

                if not error.kind.is_retryable:
                    logger.error(f"FAILED: non-retryable {error.kind.value} error: {error}", extra=log_context)
                    if error is e:
                        raise
                    raise error from e

                if attempt >= max_retries:
                    logger.error(
                        f"FAILED: {error.kind.value} after {attempt} attempts, giving up",
                        extra=log_context,
                    )
                    if error is e:
                        raise
                    raise error from e

                delay = backoff_delay(attempt, self.config.RETRY_BASE_DELAY)
                logger.warning(
                    f"RETRY_WAIT: {error.kind.value}, waiting {delay:g}s before retry {attempt}/{max_retries}",
                    extra=log_context,
                )
                await asyncio.sleep(delay)
                continue

            logger.debug(f"RAW_RECEIVED {len(text)} chars", extra=log_context)
            return text

        # MAX_RETRIES >= 1 is enforced by Config.validate
        raise GenerationError("Retry loop ended without a result")

    async def generate_recipes(
        self,
        inventory_items: Sequence[InventoryItem],
        options: Optional[GenerationOptions] = None,
    ) -> List[Recipe]:
        """Generate recipes that mostly use `inventory_items`.

        Args:
            inventory_items: What the user has.
            options: Generation options; defaults apply when omitted.

        Returns:
            Normalized recipes in model order, `is_ai_generated=True`.

        Raises:
            TransientApiError: Retries exhausted.
            EmptyResponseError: Retries exhausted on empty responses.
            NonRetryableApiError: Permanent API failure.
            RecipeParseError: The response held no JSON array.
        """
        options = options or GenerationOptions()
        prompt = build_recipe_prompt(
            inventory_items,
            options,
            max_recipes=self.config.MAX_RECIPES_PER_REQUEST,
            max_steps=self.config.MAX_INSTRUCTION_STEPS,
        )
        request_id = uuid.uuid4().hex[:8]
        logger.info(
            f"Generating recipes from {len(inventory_items)} inventory items",
            extra={"request_id": request_id},
        )

        text = await self.generate_text(prompt, request_id=request_id)
        return self._parse_recipes(text, request_id)

    async def get_single_recipe(
        self, ingredient_names: Iterable[str], cuisine: Optional[str] = None
    ) -> Optional[Recipe]:
        """Generate one recipe from bare ingredient names; None if the model returned none."""
        items = [InventoryItem(name=name) for name in ingredient_names]
        recipes = await self.generate_recipes(items, GenerationOptions(number_of_recipes=1, cuisine=cuisine))
        return recipes[0] if recipes else None

    async def get_recipe_variations(self, dish_name: str, available_ingredients: Iterable[str]) -> List[Recipe]:
        """Generate a variation of `dish_name` that mostly uses the given ingredients."""
        prompt = build_variation_prompt(
            dish_name, list(available_ingredients), max_steps=self.config.MAX_INSTRUCTION_STEPS
        )
        request_id = uuid.uuid4().hex[:8]
        logger.info(f"Generating variations of {dish_name!r}", extra={"request_id": request_id})

        text = await self.generate_text(prompt, request_id=request_id)
        return self._parse_recipes(text, request_id)

    async def generate_meal_plan(
        self,
        inventory_items: Sequence[InventoryItem],
        preferences: Optional[MealPlanPreferences] = None,
    ) -> MealPlan:
        """Generate a multi-day meal plan and shopping list.

        Raises:
            RecipeParseError: The response held no JSON object.
            GenerationError: See generate_text.
        """
        prompt = build_meal_plan_prompt([item.name for item in inventory_items], preferences)
        request_id = uuid.uuid4().hex[:8]
        logger.info(f"Generating meal plan from {len(inventory_items)} inventory items", extra={"request_id": request_id})

        text = await self.generate_text(prompt, request_id=request_id)
        logger.debug("PARSING meal plan", extra={"request_id": request_id})
        try:
            return self.normalizer.parse_meal_plan(text)
        except RecipeParseError:
            logger.error("FAILED: unparseable meal plan response", extra={"request_id": request_id})
            raise

    def _parse_recipes(self, text: str, request_id: str) -> List[Recipe]:
        logger.debug("PARSING", extra={"request_id": request_id})
        # Generation time in ms keeps default ids distinct across batches
        batch_id = str(int(time.time() * 1000))
        try:
            recipes = self.normalizer.parse(text, batch_id=batch_id)
        except RecipeParseError:
            logger.error("FAILED: unparseable recipe response", extra={"request_id": request_id})
            raise
        logger.info(f"NORMALIZED {len(recipes)} recipes", extra={"request_id": request_id})
        return recipes
