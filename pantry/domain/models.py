from enum import Enum
import json
from typing import Any, Self


class MalformedRecipe(Exception):
    pass


class Difficulty(Enum):
    easy = "Easy"
    medium = "Medium"
    hard = "Hard"


def _int(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    # bool is an int subclass, but a model answering `true` has gone wrong.
    if not isinstance(value, int) or isinstance(value, bool):
        raise MalformedRecipe(f"Expected an integer for '{key}', got {value!r}.")
    return value


def _strings(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise MalformedRecipe(f"Expected a list of strings for '{key}'.")
    return list(value)


class Macros:
    def __init__(self, *, calories: int, protein: int, carbs: int, fats: int) -> None:
        self.calories = calories
        self.protein = protein
        self.carbs = carbs
        self.fats = fats

    @classmethod
    def from_dict(cls, data: Any) -> Self:
        if not isinstance(data, dict):
            raise MalformedRecipe("Expected an object for 'macros'.")
        return cls(
            calories=_int(data, "calories"),
            protein=_int(data, "protein"),
            carbs=_int(data, "carbs"),
            fats=_int(data, "fats"),
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
        }


class Recipe:
    def __init__(
        self,
        *,
        name: str,
        cooking_time: int,
        difficulty: Difficulty,
        servings: int,
        macros: Macros,
        ingredients: list[str],
        instructions: list[str],
    ) -> None:
        self.name = name
        self.cooking_time = cooking_time
        self.difficulty = difficulty
        self.servings = servings
        self.macros = macros
        self.ingredients = ingredients
        self.instructions = instructions

    def __repr__(self) -> str:
        return f"<Recipe(name={self.name}, difficulty={self.difficulty.value})>"

    @classmethod
    def from_dict(cls, data: Any) -> Self:
        """Checks a model generated payload against the recipe shape."""
        if not isinstance(data, dict):
            raise MalformedRecipe("Expected a recipe object.")

        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise MalformedRecipe("Expected a non-empty string for 'name'.")

        try:
            difficulty = Difficulty(data.get("difficulty"))
        except ValueError:
            raise MalformedRecipe(
                f"Unknown difficulty {data.get('difficulty')!r}."
            ) from None

        return cls(
            name=name,
            cooking_time=_int(data, "cookingTime"),
            difficulty=difficulty,
            servings=_int(data, "servings"),
            macros=Macros.from_dict(data.get("macros")),
            ingredients=_strings(data, "ingredients"),
            instructions=_strings(data, "instructions"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "cookingTime": self.cooking_time,
            "difficulty": self.difficulty.value,
            "servings": self.servings,
            "macros": self.macros.to_dict(),
            "ingredients": self.ingredients,
            "instructions": self.instructions,
        }


class SavedRecipe:
    """A row of the `saved_recipes` table.

    `recipe_data` is kept as the JSON text it was stored with so what comes back
    out is exactly what went in.
    """

    def __init__(
        self,
        *,
        id: str,
        user_id: str,
        recipe_name: str,
        recipe_data: str,
        is_favorite: bool,
        created_at: str,
        updated_at: str,
    ) -> None:
        self.id = id
        self.user_id = user_id
        self.recipe_name = recipe_name
        self.recipe_data = recipe_data
        self.is_favorite = is_favorite
        self.created_at = created_at
        self.updated_at = updated_at

    def __repr__(self) -> str:
        return f"<SavedRecipe(id={self.id}, recipe_name={self.recipe_name})>"

    @property
    def recipe(self) -> dict[str, Any]:
        return json.loads(self.recipe_data)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "recipe_name": self.recipe_name,
            "recipe_data": self.recipe,
            "is_favorite": self.is_favorite,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
