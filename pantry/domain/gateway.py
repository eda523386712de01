"""Client for the chat-completion gateway that writes the recipes.

The gateway speaks the OpenAI chat completions dialect, so messages are typed
with the `openai` package's params, but the call itself goes through httpx so
the status code is ours to interpret.
"""

import logging
from typing import Any

import httpx
from openai.types.chat import ChatCompletionMessageParam

from pantry.config import Config


logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """The gateway did not give us a completion."""

    status_code = 500
    message = "AI gateway error"

    def __init__(
        self, message: str | None = None, *, upstream_status: int | None = None
    ) -> None:
        super().__init__(self.message if message is None else message)
        self.upstream_status = upstream_status


class MissingApiKey(GatewayError):
    message = "AI_GATEWAY_API_KEY is not configured"


class RateLimited(GatewayError):
    status_code = 429
    message = "Rate limit exceeded. Please try again later."


class PaymentRequired(GatewayError):
    status_code = 402
    message = "Payment required. Please add credits to your workspace."


class GatewayUnavailable(GatewayError):
    message = "AI gateway unavailable"


def client_factory(
    config: Config,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=config.ai_gateway_url,
        headers={"Content-Type": "application/json"},
        timeout=config.ai_gateway_timeout,
        transport=transport,
    )


class GatewayClient:
    def __init__(
        self,
        api_key: str | None,
        *,
        model: str,
        client: httpx.AsyncClient,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self._client = client

    @classmethod
    def from_config(
        cls, config: Config, *, client: httpx.AsyncClient
    ) -> "GatewayClient":
        return cls(config.ai_gateway_api_key, model=config.core_model, client=client)

    def payload(self, messages: list[ChatCompletionMessageParam]) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": messages,
            "response_format": {"type": "json_object"},
        }

    async def complete_json(self, messages: list[ChatCompletionMessageParam]) -> str:
        """Content of the first choice, which the gateway was asked to make JSON."""
        if not self.api_key:
            raise MissingApiKey()

        try:
            resp = await self._client.post(
                "chat/completions",
                json=self.payload(messages),
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except httpx.TransportError as e:
            logger.error("AI gateway unreachable: %r", e)
            raise GatewayUnavailable() from e

        if not resp.is_success:
            logger.error("AI gateway error: %s %s", resp.status_code, resp.text)
            match resp.status_code:
                case 429:
                    raise RateLimited(upstream_status=429)
                case 402:
                    raise PaymentRequired(upstream_status=402)
                case status:
                    raise GatewayError(upstream_status=status)

        logger.info("AI response received")
        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error("Unexpected AI gateway response: %s", resp.text)
            raise GatewayError("Unexpected AI gateway response") from e
        return content or ""
