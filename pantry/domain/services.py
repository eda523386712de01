"""Functionality behind the routes."""

import json
import logging
from typing import Any, Sequence

from openai.types.chat import (
    ChatCompletionMessageParam,
    ChatCompletionSystemMessageParam,
    ChatCompletionUserMessageParam,
)

from pantry.domain.gateway import GatewayClient
from pantry.domain.models import MalformedRecipe, Recipe, SavedRecipe
from pantry.domain.prompts import CreateRecipePrompt, ingredients_prompt
from pantry.domain.repository import SavedRecipesRepository


logger = logging.getLogger(__name__)


class InvalidIngredients(ValueError):
    pass


class InvalidRecipe(ValueError):
    pass


class NonFiniteNumber(ValueError):
    pass


def reject_constant(name: str) -> float:
    raise NonFiniteNumber(f"Non-finite number {name} is not valid JSON.")


def loads(text: str | bytes) -> Any:
    """`json.loads` without the NaN and Infinity extensions, which cannot be
    written back out as JSON."""
    return json.loads(text, parse_constant=reject_constant)


def check_ingredients(ingredients: Any) -> list[str]:
    if not isinstance(ingredients, list) or not ingredients:
        raise InvalidIngredients("Please provide at least one ingredient.")
    if not all(isinstance(i, str) and i.strip() for i in ingredients):
        raise InvalidIngredients("Ingredients must be non-empty strings.")
    return ingredients


def recipe_messages(ingredients: Sequence[str]) -> list[ChatCompletionMessageParam]:
    system_message: ChatCompletionSystemMessageParam = {
        "role": "system",
        "content": str(CreateRecipePrompt()),
    }
    user_message: ChatCompletionUserMessageParam = {
        "role": "user",
        "content": ingredients_prompt(ingredients),
    }
    return [system_message, user_message]


def parse_recipe(content: str, *, validate: bool = False) -> dict[str, Any]:
    try:
        recipe = loads(content)
    except (json.JSONDecodeError, NonFiniteNumber) as e:
        logger.error("AI response is not JSON: %r", content[:200])
        raise MalformedRecipe(f"AI response is not valid JSON: {e}") from e

    if not isinstance(recipe, dict):
        raise MalformedRecipe("AI response is not a JSON object.")

    if validate:
        Recipe.from_dict(recipe)

    return recipe


async def generate_recipe(
    ingredients: Sequence[str],
    *,
    gateway: GatewayClient,
    validate: bool = False,
) -> dict[str, Any]:
    logger.info("Generating recipe for ingredients: %s", list(ingredients))
    content = await gateway.complete_json(recipe_messages(ingredients))
    return parse_recipe(content, validate=validate)


async def save_recipe(
    recipe: Any,
    *,
    user_id: str,
    repository: SavedRecipesRepository,
    is_favorite: bool = False,
) -> SavedRecipe:
    if not isinstance(recipe, dict):
        raise InvalidRecipe("Expected a recipe object.")
    name = recipe.get("name")
    if not isinstance(name, str) or not name:
        raise InvalidRecipe("Expected a non-empty string for 'name'.")
    try:
        recipe_data = json.dumps(recipe, allow_nan=False)
    except ValueError as e:
        raise InvalidRecipe(str(e)) from e
    return await repository.create(
        user_id=user_id,
        recipe_name=name,
        recipe_data=recipe_data,
        is_favorite=is_favorite,
    )
