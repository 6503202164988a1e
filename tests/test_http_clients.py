"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from cards_after_dark.adapters.expo_push_client import EXPO_PUSH_URL, ExpoPushClient
from cards_after_dark.adapters.openai_recommendation_client import (
    OpenAIRecommendationClient,
)


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str) -> None:
        self.responses = _FakeResponses(output_text)


def test_openai_recommendation_client_parses_output() -> None:
    fake = _FakeOpenAI(json.dumps({"reasoning": None, "cards": []}))
    client = OpenAIRecommendationClient(client=fake)

    result = asyncio.run(
        client.generate(
            model="gpt-5.2",
            reasoning_effort="low",
            store=False,
            schema={"type": "object"},
            prompt="Generate cards",
        )
    )

    assert result == {"reasoning": None, "cards": []}
    payload = fake.responses.last_payload
    assert payload["reasoning"] == {"effort": "low"}
    assert payload["text"]["format"]["name"] == "card_recommendations"
    assert payload["text"]["format"]["strict"] is True


def test_openai_recommendation_client_rejects_empty_output() -> None:
    client = OpenAIRecommendationClient(client=_FakeOpenAI(""))

    with pytest.raises(RuntimeError):
        asyncio.run(
            client.generate(
                model="gpt-5.2",
                reasoning_effort=None,
                store=False,
                schema={"type": "object"},
                prompt="Generate cards",
            )
        )


def test_expo_push_client_posts_message() -> None:
    seen: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == EXPO_PUSH_URL
        seen.append(json.loads(request.content.decode()))
        return httpx.Response(200, json={"data": {"status": "ok"}})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = ExpoPushClient(url=EXPO_PUSH_URL, http_client=async_client)

    asyncio.run(
        client.send(
            "ExponentPushToken[sam]",
            "Your partner voted",
            "Cast your vote",
            {"type": "partner_voted"},
        )
    )

    assert seen == [
        {
            "to": "ExponentPushToken[sam]",
            "title": "Your partner voted",
            "body": "Cast your vote",
            "data": {"type": "partner_voted"},
            "sound": "default",
        }
    ]


def test_expo_push_client_raises_on_error_status() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    client = ExpoPushClient(
        url=EXPO_PUSH_URL, http_client=httpx.AsyncClient(transport=transport)
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.send("token", "title", "body", {}))
