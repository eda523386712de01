import json

import pytest
from starlette.testclient import TestClient

from pantry.app.app import create_app
from pantry.app.identity import COOKIE
from pantry.config import Config


ALICE = {"Cookie": f"{COOKIE}=alice"}
BOB = {"Cookie": f"{COOKIE}=bob"}


def assert_cors(headers) -> None:
    assert headers["access-control-allow-origin"] == "*"
    allowed = headers["access-control-allow-headers"]
    for header in ("authorization", "x-client-info", "apikey", "content-type"):
        assert header in allowed


@pytest.fixture
def make_client(db_url: str):
    clients: list[TestClient] = []

    def make(gateway, **config) -> TestClient:
        config.setdefault("ai_gateway_api_key", "sk-test")
        app = create_app(
            Config(db_url=db_url, **config), gateway_transport=gateway.transport
        )
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield make

    for client in clients:
        client.__exit__(None, None, None)


def test_preflight(make_client, fake_gateway) -> None:
    fake = fake_gateway()
    resp = make_client(fake).options("/generate-recipe")
    assert resp.status_code == 200
    assert resp.content == b""
    assert_cors(resp.headers)
    assert fake.requests == []


def test_generate_recipe(make_client, fake_gateway, recipe) -> None:
    fake = fake_gateway()
    resp = make_client(fake).post(
        "/generate-recipe", json={"ingredients": ["chicken", "rice"]}
    )
    assert resp.status_code == 200
    assert resp.json() == {"recipe": recipe}
    assert_cors(resp.headers)

    payload = fake.payloads[0]
    assert payload["model"] == "google/gemini-2.5-flash"
    assert payload["response_format"] == {"type": "json_object"}
    assert "chicken, rice" in payload["messages"][1]["content"]


@pytest.mark.parametrize(
    "status,expected_status,expected_error",
    (
        (429, 429, "Rate limit exceeded. Please try again later."),
        (402, 402, "Payment required. Please add credits to your workspace."),
        (500, 500, "AI gateway error"),
        (503, 500, "AI gateway error"),
        (400, 500, "AI gateway error"),
    ),
)
def test_generate_recipe_upstream_errors(
    make_client, fake_gateway, status: int, expected_status: int, expected_error: str
) -> None:
    fake = fake_gateway(status=status, body='{"error": "secret upstream detail"}')
    resp = make_client(fake).post("/generate-recipe", json={"ingredients": ["eggs"]})
    assert resp.status_code == expected_status
    assert resp.json() == {"error": expected_error}
    assert_cors(resp.headers)


def test_generate_recipe_non_json_content(make_client, fake_gateway) -> None:
    fake = fake_gateway("Sure! Here is a lovely recipe for eggs.")
    resp = make_client(fake).post("/generate-recipe", json={"ingredients": ["eggs"]})
    assert resp.status_code == 500
    assert "error" in resp.json()
    assert "recipe" not in resp.json()


def test_generate_recipe_without_api_key(make_client, fake_gateway) -> None:
    fake = fake_gateway()
    client = make_client(fake, ai_gateway_api_key=None)
    resp = client.post("/generate-recipe", json={"ingredients": ["eggs"]})
    assert resp.status_code == 500
    assert resp.json() == {"error": "AI_GATEWAY_API_KEY is not configured"}
    assert fake.requests == []


@pytest.mark.parametrize(
    "body",
    (
        {},
        {"ingredients": []},
        {"ingredients": "eggs"},
        {"ingredients": ["eggs", ""]},
        ["eggs"],
    ),
)
def test_generate_recipe_bad_input(make_client, fake_gateway, body) -> None:
    fake = fake_gateway()
    resp = make_client(fake).post("/generate-recipe", json=body)
    assert resp.status_code == 400
    assert "error" in resp.json()
    assert_cors(resp.headers)
    assert fake.requests == []


def test_generate_recipe_body_not_json(make_client, fake_gateway) -> None:
    fake = fake_gateway()
    resp = make_client(fake).post(
        "/generate-recipe",
        content=b"chicken, rice",
        headers={"Content-Type": "text/plain"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Request body must be JSON."}


def test_generate_recipe_validation(make_client, fake_gateway, recipe) -> None:
    del recipe["macros"]
    fake = fake_gateway(json.dumps(recipe))

    resp = make_client(fake).post("/generate-recipe", json={"ingredients": ["eggs"]})
    assert resp.status_code == 200
    assert "macros" not in resp.json()["recipe"]

    strict = make_client(fake, validate_recipes=True)
    resp = strict.post("/generate-recipe", json={"ingredients": ["eggs"]})
    assert resp.status_code == 500


def test_health(make_client, fake_gateway) -> None:
    resp = make_client(fake_gateway()).get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_save_issues_owner_cookie(make_client, fake_gateway, recipe) -> None:
    client = make_client(fake_gateway())
    resp = client.post("/recipes", json={"recipe": recipe})
    assert resp.status_code == 201
    assert COOKIE in resp.headers["set-cookie"]
    assert_cors(resp.headers)

    listed = client.get("/recipes").json()["recipes"]
    assert [r["id"] for r in listed] == [resp.json()["id"]]


def test_saved_recipe_round_trip(make_client, fake_gateway, recipe) -> None:
    client = make_client(fake_gateway())
    saved = client.post("/recipes", json={"recipe": recipe}, headers=ALICE).json()
    assert saved["user_id"] == "alice"
    assert saved["recipe_name"] == recipe["name"]
    assert saved["is_favorite"] is False

    got = client.get(f"/recipes/{saved['id']}", headers=ALICE)
    assert got.status_code == 200
    assert "set-cookie" not in got.headers
    assert got.json()["recipe_data"] == recipe


def test_saved_recipes_are_private(make_client, fake_gateway, recipe) -> None:
    client = make_client(fake_gateway())
    saved = client.post("/recipes", json={"recipe": recipe}, headers=ALICE).json()
    path = f"/recipes/{saved['id']}"

    assert client.get("/recipes", headers=BOB).json() == {"recipes": []}
    assert client.get(path, headers=BOB).status_code == 404
    resp = client.put(f"{path}/favorite", json={"is_favorite": True}, headers=BOB)
    assert resp.status_code == 404
    assert client.delete(path, headers=BOB).status_code == 404
    assert client.get(path, headers=ALICE).status_code == 200


def test_favorites(make_client, fake_gateway, recipe) -> None:
    client = make_client(fake_gateway())
    plain = client.post("/recipes", json={"recipe": recipe}, headers=ALICE).json()
    loved = client.post(
        "/recipes", json={"recipe": recipe, "is_favorite": True}, headers=ALICE
    ).json()

    def ids(query: str) -> list[str]:
        resp = client.get(f"/recipes{query}", headers=ALICE)
        return [r["id"] for r in resp.json()["recipes"]]

    assert ids("?favorite=true") == [loved["id"]]
    assert ids("?favorite=false") == [plain["id"]]
    assert set(ids("")) == {plain["id"], loved["id"]}

    resp = client.put(
        f"/recipes/{plain['id']}/favorite", json={"is_favorite": True}, headers=ALICE
    )
    assert resp.status_code == 200
    assert resp.json()["is_favorite"] is True
    assert set(ids("?favorite=true")) == {plain["id"], loved["id"]}

    assert client.get("/recipes?favorite=maybe", headers=ALICE).status_code == 400
    resp = client.put(f"/recipes/{plain['id']}/favorite", json={}, headers=ALICE)
    assert resp.status_code == 400


def test_delete_saved_recipe(make_client, fake_gateway, recipe) -> None:
    client = make_client(fake_gateway())
    saved = client.post("/recipes", json={"recipe": recipe}, headers=ALICE).json()

    resp = client.delete(f"/recipes/{saved['id']}", headers=ALICE)
    assert resp.status_code == 204
    assert_cors(resp.headers)
    assert client.get(f"/recipes/{saved['id']}", headers=ALICE).status_code == 404


@pytest.mark.parametrize("body", ({}, {"recipe": "Chicken"}, {"recipe": {"name": ""}}))
def test_save_rejects_non_recipes(make_client, fake_gateway, body) -> None:
    client = make_client(fake_gateway())
    resp = client.post("/recipes", json=body, headers=ALICE)
    assert resp.status_code == 400
    assert "error" in resp.json()


@pytest.mark.parametrize(
    "content",
    (
        '{"name": "Toast", "cookingTime": NaN}',
        '{"name": "Toast", "macros": {"calories": Infinity}}',
        '{"name": "Toast", "servings": -Infinity}',
    ),
)
def test_generate_recipe_non_finite_numbers(
    make_client, fake_gateway, content: str
) -> None:
    fake = fake_gateway(content)
    resp = make_client(fake).post("/generate-recipe", json={"ingredients": ["bread"]})
    assert resp.status_code == 500
    assert "error" in resp.json()
    assert_cors(resp.headers)


def test_save_rejects_non_finite_numbers(make_client, fake_gateway) -> None:
    client = make_client(fake_gateway())
    resp = client.post(
        "/recipes",
        content=b'{"recipe": {"name": "Toast", "servings": NaN}}',
        headers={**ALICE, "Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert "error" in resp.json()
    assert_cors(resp.headers)

    resp = client.get("/recipes", headers=ALICE)
    assert resp.status_code == 200
    assert resp.json() == {"recipes": []}


@pytest.mark.parametrize(
    "exc,expected",
    (
        (RuntimeError("boom"), "boom"),
        (RuntimeError(), "An error occurred"),
    ),
)
def test_unexpected_errors(make_client, fake_gateway, exc, expected: str) -> None:
    fake = fake_gateway(raises=exc)
    resp = make_client(fake).post("/generate-recipe", json={"ingredients": ["eggs"]})
    assert resp.status_code == 500
    assert resp.json() == {"error": expected}
    assert_cors(resp.headers)
