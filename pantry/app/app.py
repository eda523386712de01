import contextlib
import functools
import logging
from typing import Any, Awaitable, Callable

from databases import Database
import httpx
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from pantry.app.identity import owner_id, remember_owner
from pantry.config import Config, Env
from pantry.domain.gateway import GatewayClient, GatewayError, client_factory
from pantry.domain.models import MalformedRecipe
from pantry.domain.repository import (
    RecipeNotFound,
    SavedRecipesRepository,
    create_tables,
)
from pantry.domain.services import (
    InvalidIngredients,
    InvalidRecipe,
    check_ingredients,
    generate_recipe as generate,
    loads,
    save_recipe,
)
from pantry.logs import configure_logging


logger = logging.getLogger(__name__)


CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
}


class BadRequest(ValueError):
    pass


def error(message: str, code: int) -> tuple[dict[str, str], int]:
    return {"error": message}, code


def render(resp: Any) -> Response:
    if isinstance(resp, Response):
        resp.headers.update(CORS_HEADERS)
        return resp
    if not isinstance(resp, tuple):
        body, code = resp, 200
    else:
        body, code = resp
    return JSONResponse(body, status_code=code, headers=CORS_HEADERS)


def aJSONResponse(
    route: Callable[..., Awaitable[Any | tuple[Any, int] | Response]],
):
    """Turns a route's return value into JSON and every failure into `{error}`.

    All responses carry the CORS headers and pre-flight requests never reach
    the route.
    """

    @functools.wraps(route)
    async def wrapper(request: Request, *args: Any, **kwargs: Any) -> Response:
        if request.method == "OPTIONS":
            return Response(None, status_code=200, headers=CORS_HEADERS)

        try:
            return render(await route(request, *args, **kwargs))
        except (BadRequest, InvalidIngredients, InvalidRecipe) as e:
            return render(error(str(e), 400))
        except RecipeNotFound:
            return render(error("Recipe not found.", 404))
        except GatewayError as e:
            return render(error(str(e), e.status_code))
        except MalformedRecipe as e:
            logger.error("Malformed recipe: %s", e)
            return render(error(str(e), 500))
        except Exception as e:
            logger.exception("Error handling %s %s", request.method, request.url.path)
            return render(error(str(e) or "An error occurred", 500))

    return wrapper


def owned(route: Callable[[Request, str], Awaitable[Response]]):
    """Hands the route the caller's owner id and keeps it in their cookie."""

    @functools.wraps(route)
    async def wrapper(request: Request) -> Response:
        owner = owner_id(request)
        response = await route(request, owner)
        remember_owner(request, response, owner)
        return response

    return wrapper


async def json_body(request: Request) -> dict[str, Any]:
    try:
        body = loads(await request.body())
    except ValueError:
        raise BadRequest("Request body must be JSON.") from None
    if not isinstance(body, dict):
        raise BadRequest("Request body must be a JSON object.")
    return body


def favorite_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    match str(value).lower():
        case "true" | "1":
            return True
        case "false" | "0":
            return False
        case _:
            raise BadRequest(f"Invalid favorite flag: {value!r}.")


async def health(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


@aJSONResponse
async def generate_recipe(request: Request) -> dict[str, Any]:
    body = await json_body(request)
    ingredients = check_ingredients(body.get("ingredients"))
    config: Config = request.app.state.config
    recipe = await generate(
        ingredients,
        gateway=request.app.state.gateway,
        validate=config.validate_recipes,
    )
    return {"recipe": recipe}


@owned
@aJSONResponse
async def recipes(request: Request, owner: str) -> Any:
    repo: SavedRecipesRepository = request.app.state.repo
    match request.method.lower():
        case "get":
            flag = request.query_params.get("favorite")
            is_favorite = None if flag is None else favorite_flag(flag)
            saved = await repo.list(user_id=owner, is_favorite=is_favorite)
            return {"recipes": [r.to_dict() for r in saved]}
        case "post":
            body = await json_body(request)
            saved = await save_recipe(
                body.get("recipe"),
                user_id=owner,
                repository=repo,
                is_favorite=favorite_flag(body.get("is_favorite", False)),
            )
            return saved.to_dict(), 201
        case _:
            raise ValueError("Unsupported method.")


@owned
@aJSONResponse
async def recipe_detail(request: Request, owner: str) -> Any:
    id = request.path_params["id"]
    repo: SavedRecipesRepository = request.app.state.repo
    match request.method.lower():
        case "get":
            saved = await repo.get(id, user_id=owner)
            return saved.to_dict()
        case "delete":
            await repo.delete(id, user_id=owner)
            return Response(status_code=204)
        case _:
            raise ValueError("Unsupported method.")


@owned
@aJSONResponse
async def favorite(request: Request, owner: str) -> dict[str, Any]:
    id = request.path_params["id"]
    body = await json_body(request)
    if "is_favorite" not in body:
        raise BadRequest("Missing 'is_favorite'.")
    repo: SavedRecipesRepository = request.app.state.repo
    saved = await repo.set_favorite(
        id, user_id=owner, is_favorite=favorite_flag(body["is_favorite"])
    )
    return saved.to_dict()


def create_app(
    config: Config | None = None,
    *,
    gateway_transport: httpx.AsyncBaseTransport | None = None,
) -> Starlette:
    config = Config() if config is None else config

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        configure_logging(config.log_level)
        db = Database(config.db_url)
        await db.connect()
        await create_tables(db)
        http_client = client_factory(config, transport=gateway_transport)
        app.state.config = config
        app.state.gateway = GatewayClient.from_config(config, client=http_client)
        app.state.repo = SavedRecipesRepository(db)
        try:
            yield
        finally:
            await http_client.aclose()
            await db.disconnect()

    return Starlette(
        debug=config.env == Env.local,
        routes=[
            Route("/health", health),
            Route("/generate-recipe", generate_recipe, methods=["POST", "OPTIONS"]),
            Route("/recipes", recipes, methods=["GET", "POST", "OPTIONS"]),
            Route(
                "/recipes/{id:str}",
                recipe_detail,
                methods=["GET", "DELETE", "OPTIONS"],
            ),
            Route("/recipes/{id:str}/favorite", favorite, methods=["PUT", "OPTIONS"]),
        ],
        lifespan=lifespan,
    )


app = create_app()
