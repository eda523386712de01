import json
from typing import Any

import httpx
import pytest


RECIPE: dict[str, Any] = {
    "name": "Chicken Fried Rice",
    "cookingTime": 25,
    "difficulty": "Easy",
    "servings": 2,
    "macros": {"calories": 520, "protein": 38, "carbs": 55, "fats": 14},
    "ingredients": ["200g chicken breast", "300g cooked rice", "1 tbsp soy sauce"],
    "instructions": [
        "Dice the chicken and fry until golden.",
        "Add the rice and soy sauce, toss until hot.",
    ],
}


def completion(content: str | None) -> dict[str, Any]:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


class FakeGateway:
    """Stands in for the chat-completion gateway and remembers what it was sent."""

    def __init__(
        self,
        content: str | None = None,
        *,
        status: int = 200,
        body: str = "upstream says no",
        raises: Exception | None = None,
    ) -> None:
        self.content = json.dumps(RECIPE) if content is None else content
        self.status = status
        self.body = body
        self.raises = raises
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raises is not None:
            raise self.raises
        if self.status != 200:
            return httpx.Response(self.status, text=self.body)
        return httpx.Response(200, json=completion(self.content))

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def recipe() -> dict[str, Any]:
    return json.loads(json.dumps(RECIPE))


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'pantry.db'}"


@pytest.fixture
def fake_gateway() -> type[FakeGateway]:
    return FakeGateway
