from datetime import datetime, timezone
from uuid import uuid4

from databases import Database
from databases.interfaces import Record

from pantry.domain.models import SavedRecipe


CREATE_SAVED_RECIPES_TABLE = """
CREATE TABLE IF NOT EXISTS saved_recipes (
    id VARCHAR(36) PRIMARY KEY,
    user_id VARCHAR(64) NOT NULL,
    recipe_name TEXT NOT NULL,
    recipe_data TEXT NOT NULL,
    is_favorite BOOLEAN NOT NULL DEFAULT FALSE,
    created_at VARCHAR(32) NOT NULL,
    updated_at VARCHAR(32) NOT NULL
)
"""


CREATE_SAVED_RECIPE = """
INSERT INTO saved_recipes(id, user_id, recipe_name, recipe_data, is_favorite, created_at, updated_at)
VALUES (:id, :user_id, :recipe_name, :recipe_data, :is_favorite, :created_at, :updated_at)
"""


# Every statement below is scoped to the owner.
GET_SAVED_RECIPE = "SELECT * FROM saved_recipes WHERE id = :id AND user_id = :user_id"


LIST_SAVED_RECIPES = """
SELECT * FROM saved_recipes WHERE user_id = :user_id ORDER BY created_at DESC
"""


LIST_SAVED_RECIPES_BY_FAVORITE = """
SELECT * FROM saved_recipes
WHERE user_id = :user_id AND is_favorite = :is_favorite
ORDER BY created_at DESC
"""


SET_FAVORITE = """
UPDATE saved_recipes SET is_favorite = :is_favorite, updated_at = :updated_at
WHERE id = :id AND user_id = :user_id
"""


DELETE_SAVED_RECIPE = "DELETE FROM saved_recipes WHERE id = :id AND user_id = :user_id"


class RecipeNotFound(Exception):
    pass


def now() -> str:
    return datetime.now(timezone.utc).isoformat()


def to_saved_recipe(record: Record) -> SavedRecipe:
    return SavedRecipe(
        id=record["id"],
        user_id=record["user_id"],
        recipe_name=record["recipe_name"],
        recipe_data=record["recipe_data"],
        is_favorite=bool(record["is_favorite"]),
        created_at=record["created_at"],
        updated_at=record["updated_at"],
    )


async def create_tables(db: Database) -> None:
    await db.execute(  # pyright: ignore[reportUnknownMemberType]
        query=CREATE_SAVED_RECIPES_TABLE
    )


class SavedRecipesRepository:
    """Saved recipes repository."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def create(
        self,
        *,
        user_id: str,
        recipe_name: str,
        recipe_data: str,
        is_favorite: bool = False,
    ) -> SavedRecipe:
        timestamp = now()
        recipe = SavedRecipe(
            id=str(uuid4()),
            user_id=user_id,
            recipe_name=recipe_name,
            recipe_data=recipe_data,
            is_favorite=is_favorite,
            created_at=timestamp,
            updated_at=timestamp,
        )
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            CREATE_SAVED_RECIPE,
            values={
                "id": recipe.id,
                "user_id": recipe.user_id,
                "recipe_name": recipe.recipe_name,
                "recipe_data": recipe.recipe_data,
                "is_favorite": recipe.is_favorite,
                "created_at": recipe.created_at,
                "updated_at": recipe.updated_at,
            },
        )
        return recipe

    async def get(self, id: str, *, user_id: str) -> SavedRecipe:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            GET_SAVED_RECIPE, values={"id": id, "user_id": user_id}
        )
        if result is None:
            raise RecipeNotFound(id)
        return to_saved_recipe(result)

    async def list(
        self, *, user_id: str, is_favorite: bool | None = None
    ) -> tuple[SavedRecipe, ...]:
        if is_favorite is None:
            result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
                LIST_SAVED_RECIPES, values={"user_id": user_id}
            )
        else:
            result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
                LIST_SAVED_RECIPES_BY_FAVORITE,
                values={"user_id": user_id, "is_favorite": is_favorite},
            )
        return tuple(to_saved_recipe(r) for r in result)

    async def set_favorite(
        self, id: str, *, user_id: str, is_favorite: bool
    ) -> SavedRecipe:
        # Fails before writing when the row is not the caller's.
        await self.get(id, user_id=user_id)
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            SET_FAVORITE,
            values={
                "id": id,
                "user_id": user_id,
                "is_favorite": is_favorite,
                "updated_at": now(),
            },
        )
        return await self.get(id, user_id=user_id)

    async def delete(self, id: str, *, user_id: str) -> None:
        await self.get(id, user_id=user_id)
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            DELETE_SAVED_RECIPE, values={"id": id, "user_id": user_id}
        )
