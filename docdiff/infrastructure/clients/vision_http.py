"""HTTP client adapter for an OpenAI-compatible chat completions endpoint.

Images are sent inline as base64 data URLs. Transport errors, 429 and 5xx
responses are retried with exponential backoff.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any

import httpx

from docdiff.domain.ports.vision_port import VisionPort
from docdiff.observability.retries import async_retry

logger = logging.getLogger(__name__)

_MIME_BY_FORMAT = {"png": "image/png", "jpeg": "image/jpeg", "jpg": "image/jpeg", "webp": "image/webp", "gif": "image/gif"}


class RetryableStatusError(RuntimeError):
    """Upstream answered 429 or 5xx."""


def extract_message_content(data: dict[str, Any]) -> str:
    """Pull the assistant text out of a completions payload."""
    choices = data.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        msg = choices[0].get("message") or {}
        content = msg.get("content") if isinstance(msg, dict) else None
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            parts = [p.get("text", "") for p in content if isinstance(p, dict) and p.get("type") == "text"]
            return "".join(parts)
    content = data.get("Content")
    if isinstance(content, str):
        return content
    raise RuntimeError("completion response has no message content")


class VisionHttpClient(VisionPort):
    def __init__(
        self,
        base_url: str | None,
        *,
        api_key: str = "",
        model: str = "gpt-4o",
        max_tokens: int = 2000,
        temperature: float = 0.0,
        timeout_seconds: int = 120,
        verify_ssl: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
        retries: int = 2,
    ) -> None:
        self._base_url = base_url.rstrip("/") if base_url else None
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._timeout_seconds = timeout_seconds
        self._verify_ssl = verify_ssl
        self._transport = transport
        self._retries = retries

    def _client(self) -> httpx.AsyncClient:
        if not self._base_url:
            raise RuntimeError("Vision base_url is not configured")
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout_seconds,
            verify=self._verify_ssl,
            transport=self._transport,
            headers=headers,
        )

    async def _post(self, messages: list[dict[str, Any]]) -> str:
        payload = {
            "model": self._model,
            "messages": messages,
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
        }
        async with self._client() as client:
            resp = await client.post("/chat/completions", json=payload)
            if resp.status_code == 429 or resp.status_code >= 500:
                raise RetryableStatusError(f"completion endpoint returned {resp.status_code}")
            resp.raise_for_status()
            try:
                data = resp.json()
            except json.JSONDecodeError as exc:
                raise RuntimeError("completion response not JSON") from exc
            if not isinstance(data, dict):
                raise RuntimeError("completion response not a JSON object")
            return extract_message_content(data)

    async def _complete(self, messages: list[dict[str, Any]]) -> str:
        return await async_retry(
            self._post,
            messages,
            retries=self._retries,
            exceptions=(httpx.TransportError, RetryableStatusError),
        )

    async def generate_vision(
        self,
        system_prompt: str,
        user_prompt: str,
        image_bytes: bytes,
        image_format: str = "png",
    ) -> str:
        mime = _MIME_BY_FORMAT.get(image_format.lower(), "image/png")
        data_url = f"data:{mime};base64,{base64.b64encode(image_bytes).decode('ascii')}"
        messages = [
            {"role": "system", "content": system_prompt},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": user_prompt},
                    {"type": "image_url", "image_url": {"url": data_url}},
                ],
            },
        ]
        return await self._complete(messages)

    async def generate_text(self, system_prompt: str, user_prompt: str) -> str:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        return await self._complete(messages)
