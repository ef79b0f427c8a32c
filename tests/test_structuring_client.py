from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest

from docdiff.infrastructure.clients.structuring_http import StructuringHttpClient


def _client(handler) -> StructuringHttpClient:
    return StructuringHttpClient(
        base_url="https://structuring.example.com/api/",
        user="svc",
        password="secret",
        timeout_seconds=5,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_posts_form_to_check() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(200, json={"page_text_list": [{"page_no": 0, "text": "hi"}]})

    out = await _client(handler).get_structured_output("w-1")
    assert out == {"page_text_list": [{"page_no": 0, "text": "hi"}]}
    assert seen["path"] == "/api/Check"
    assert seen["form"] == {"work_id": ["w-1"], "userid": ["svc"], "password": ["secret"]}


@pytest.mark.asyncio
async def test_not_found_is_none() -> None:
    out = await _client(lambda r: httpx.Response(404)).get_structured_output("w-1")
    assert out is None


@pytest.mark.asyncio
async def test_unconfigured_is_none() -> None:
    assert await StructuringHttpClient(None).get_structured_output("w-1") is None


@pytest.mark.asyncio
async def test_non_object_payload_raises() -> None:
    with pytest.raises(RuntimeError):
        await _client(lambda r: httpx.Response(200, json=[1, 2])).get_structured_output("w-1")
