from typing import Iterable


PREAMBLE = """
You are an expert chef AI that creates delicious recipes based on available ingredients.
When given a list of ingredients, create a complete, detailed recipe that:
- Has a creative and appetizing name
- Lists all ingredients with measurements
- Provides clear step-by-step cooking instructions
- Includes estimated cooking time (in minutes)
- Specifies difficulty level (Easy, Medium, or Hard)
- Includes nutritional macros per serving (calories, protein, carbs, fats)
- Makes the most of the provided ingredients
""".strip()


FORMAT = """
Format your response as JSON with this structure:
{
  "name": "Recipe Name",
  "cookingTime": 30,
  "difficulty": "Easy",
  "servings": 4,
  "macros": {
    "calories": 450,
    "protein": 35,
    "carbs": 40,
    "fats": 15
  },
  "ingredients": ["ingredient 1", "ingredient 2"],
  "instructions": ["step 1", "step 2"]
}
""".strip()


CREATE_RECIPE_PROMPT = """{preamble}

{format}"""


INGREDIENTS_DELIMITER = ", "


class CreateRecipePrompt:
    def __init__(
        self,
        preamble: str | None = None,
        format: str | None = None,
    ) -> None:
        self.preamble = PREAMBLE if preamble is None else preamble
        self.format = FORMAT if format is None else format

    def __str__(self) -> str:
        return CREATE_RECIPE_PROMPT.format(preamble=self.preamble, format=self.format)


def ingredients_prompt(ingredients: Iterable[str]) -> str:
    return (
        "Create a recipe using these ingredients: "
        f"{INGREDIENTS_DELIMITER.join(ingredients)}"
    )
