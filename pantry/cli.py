import argparse
import asyncio
import json
import sys

from rich import print
from rich.markdown import Markdown

from pantry.config import Config
from pantry.domain.gateway import GatewayClient, GatewayError, client_factory
from pantry.domain.models import MalformedRecipe
from pantry.domain.services import generate_recipe
from pantry.logs import configure_logging


def recipe_markdown(recipe: dict) -> str:
    macros = recipe.get("macros") or {}
    lines = [
        f"# {recipe.get('name', 'Untitled recipe')}",
        "",
        f"⏰ {recipe.get('cookingTime', '?')} minutes · "
        f"🔧 {recipe.get('difficulty', '?')} · "
        f"🍴 Serves {recipe.get('servings', '?')}",
        "",
        f"{macros.get('calories', '?')} kcal, {macros.get('protein', '?')}g protein, "
        f"{macros.get('carbs', '?')}g carbs, {macros.get('fats', '?')}g fats",
        "",
        "## 📝 Ingredients",
        "",
    ]
    lines += [f"- {i}" for i in recipe.get("ingredients", [])]
    lines += ["", "## ✅ Instructions", ""]
    lines += [f"{n}. {s}" for n, s in enumerate(recipe.get("instructions", []), 1)]
    return "\n".join(lines)


async def run(ingredients: list[str], *, config: Config, raw: bool) -> int:
    async with client_factory(config) as http_client:
        gateway = GatewayClient.from_config(config, client=http_client)
        try:
            recipe = await generate_recipe(
                ingredients, gateway=gateway, validate=config.validate_recipes
            )
        except (GatewayError, MalformedRecipe) as e:
            print(f"[red]{e}[/red]")
            return 1

    if raw:
        print(json.dumps({"recipe": recipe}, indent=2))
    else:
        print(Markdown(recipe_markdown(recipe)))
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="pantry", description="Generate a recipe from ingredients."
    )
    parser.add_argument("ingredients", nargs="+")
    parser.add_argument("--json", action="store_true", help="print the raw envelope")
    args = parser.parse_args(argv)

    config = Config()
    configure_logging(config.log_level)
    sys.exit(asyncio.run(run(args.ingredients, config=config, raw=args.json)))


if __name__ == "__main__":
    main()
