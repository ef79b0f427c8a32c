from __future__ import annotations

import base64
import json

import httpx
import pytest

from docdiff.infrastructure.clients.vision_http import VisionHttpClient, extract_message_content


def _client(handler, **kw) -> VisionHttpClient:
    return VisionHttpClient(
        base_url="https://llm.example.com/v1",
        api_key="sk-test",
        model="test-model",
        transport=httpx.MockTransport(handler),
        **kw,
    )


@pytest.mark.asyncio
async def test_generate_vision_sends_image_as_data_url() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "1. Missing: logo"}}]})

    out = await _client(handler).generate_vision("sys", "user", b"\x89PNG", "png")
    assert out == "1. Missing: logo"
    assert seen["path"] == "/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    body = seen["body"]
    assert body["model"] == "test-model"
    assert body["messages"][0] == {"role": "system", "content": "sys"}
    parts = body["messages"][1]["content"]
    assert parts[0] == {"type": "text", "text": "user"}
    expected = "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode("ascii")
    assert parts[1]["image_url"]["url"] == expected


@pytest.mark.asyncio
async def test_generate_text_has_no_image_part() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"Content": '{"task": "pdf_structuring"}'})

    out = await _client(handler).generate_text("sys", "hello")
    assert out == '{"task": "pdf_structuring"}'
    assert seen["body"]["messages"][1] == {"role": "user", "content": "hello"}


@pytest.mark.asyncio
async def test_server_errors_are_retried() -> None:
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        if calls["n"] == 1:
            return httpx.Response(503, text="busy")
        return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

    client = _client(handler, retries=1)
    assert await client.generate_text("s", "u") == "ok"
    assert calls["n"] == 2


@pytest.mark.asyncio
async def test_client_errors_raise() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "bad"})

    with pytest.raises(httpx.HTTPStatusError):
        await _client(handler).generate_text("s", "u")


@pytest.mark.asyncio
async def test_unconfigured_base_url_raises() -> None:
    with pytest.raises(RuntimeError):
        await VisionHttpClient(None).generate_text("s", "u")


def test_extract_message_content_variants() -> None:
    parts = {"choices": [{"message": {"content": [{"type": "text", "text": "a"}, {"type": "text", "text": "b"}]}}]}
    assert extract_message_content(parts) == "ab"
    assert extract_message_content({"Content": "flat"}) == "flat"
    with pytest.raises(RuntimeError):
        extract_message_content({"choices": []})
