"""Tests for the vision description stage."""

from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from closet.api.openai_client import OpenAIClient
from closet.detection import MissingCredentialError
from closet.imggen import DescriptionRequestError, DescriptionStage, DescriptionStatus, decode_clothing_items
from tests.conftest import chat_response, request_json

ITEMS = [
    {"id": 1, "description": "women's slim-fit navy blazer", "category": "jacket", "color": "navy"},
    {"id": 2, "description": "white cotton crew neck tee", "category": "shirt", "color": "white"},
]


def test_decode_accepts_object_and_bare_array() -> None:
    wrapped = decode_clothing_items(json.dumps({"clothingItems": ITEMS}))
    bare = decode_clothing_items(json.dumps(ITEMS))

    assert wrapped.ok and bare.ok
    assert [item.description for item in wrapped.items] == [item.description for item in bare.items]
    assert wrapped.items[0].category == "jacket"


def test_decode_strips_markdown_fences() -> None:
    content = "```json\n" + json.dumps({"clothingItems": ITEMS}) + "\n```"

    outcome = decode_clothing_items(content)

    assert outcome.status is DescriptionStatus.OK
    assert len(outcome.items) == 2


def test_decode_empty_list_reports_no_items() -> None:
    outcome = decode_clothing_items('{"clothingItems": []}')

    assert outcome.status is DescriptionStatus.NO_ITEMS
    assert outcome.message == "No clothing items detected in the image."


def test_decode_reports_parse_errors() -> None:
    assert decode_clothing_items("I see a jacket").status is DescriptionStatus.PARSE_ERROR
    assert decode_clothing_items('{"items": []}').status is DescriptionStatus.PARSE_ERROR
    assert decode_clothing_items(None).status is DescriptionStatus.PARSE_ERROR


def test_decode_drops_only_unusable_items() -> None:
    content = json.dumps(
        [
            {"id": 1, "description": "navy blazer", "category": "jacket", "color": "navy"},
            {"id": "item-2", "description": "white sneakers", "category": "shoes", "color": "white"},
            {"id": 3, "description": "   ", "category": "shirt"},
            "a belt",
        ],
    )

    outcome = decode_clothing_items(content)

    assert outcome.status is DescriptionStatus.OK
    assert [item.description for item in outcome.items] == ["navy blazer", "white sneakers"]
    assert outcome.items[1].id == "item-2"


def test_decode_without_any_usable_item_reports_no_items() -> None:
    outcome = decode_clothing_items('[{"id": 1, "description": "   "}, {"category": "shoes"}]')

    assert outcome.status is DescriptionStatus.NO_ITEMS
    assert outcome.items == []


def test_decode_truncates_long_output() -> None:
    items = [
        {"id": index, "description": "very long words for a simple plain grey scarf", "category": "accessory"}
        for index in range(1, 7)
    ]

    outcome = decode_clothing_items(json.dumps(items), max_items=4)

    assert len(outcome.items) == 4
    assert outcome.items[0].description == "very long words for a simple"


@pytest.mark.asyncio
async def test_describe_sends_image_and_uses_call_credential(
    make_openai: Callable[..., OpenAIClient],
) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return chat_response(json.dumps({"clothingItems": ITEMS}))

    client = make_openai(handler)
    stage = DescriptionStage(client, max_items=4, model="gpt-4o-mini")

    outcome = await stage.describe("QUJD", api_key="sk-user")

    assert outcome.ok
    assert len(seen) == 1
    assert seen[0].url.path.endswith("/chat/completions")
    assert seen[0].headers["Authorization"] == "Bearer sk-user"
    body = request_json(seen[0])
    assert body["model"] == "gpt-4o-mini"
    image_part = body["messages"][1]["content"][0]
    assert image_part["image_url"]["url"] == "data:image/jpeg;base64,QUJD"
    await client.close()


@pytest.mark.asyncio
async def test_describe_without_credential_makes_no_request(make_openai: Callable[..., OpenAIClient]) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return chat_response("[]")

    stage = DescriptionStage(make_openai(handler))

    with pytest.raises(MissingCredentialError):
        await stage.describe("QUJD", api_key="")
    assert seen == []


@pytest.mark.asyncio
async def test_describe_maps_provider_errors(make_openai: Callable[..., OpenAIClient]) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": {"message": "boom", "type": "server_error"}})

    stage = DescriptionStage(make_openai(handler))

    with pytest.raises(DescriptionRequestError) as exc_info:
        await stage.describe("QUJD", api_key="sk-user")
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_describe_returns_outcome_for_unparseable_text(make_openai: Callable[..., OpenAIClient]) -> None:
    stage = DescriptionStage(make_openai(lambda request: chat_response("Sorry, I cannot help with that.")))

    outcome = await stage.describe("QUJD", api_key="sk-user")

    assert outcome.status is DescriptionStatus.PARSE_ERROR
    assert outcome.items == []
