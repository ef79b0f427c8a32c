"""HTTP client adapter for the external structuring service.

Assumes endpoint:
- POST {base_url}/Check  (form: work_id, userid, password)
  -> {"chunk_list": [...], "text_list": [{"text": ...}], "page_text_list": [{"page_no": 0, "text": ...}]}
A 404 means the service holds nothing for the work id.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from docdiff.domain.ports.structured_port import StructuredOutputPort
from docdiff.observability.retries import async_retry

logger = logging.getLogger(__name__)


class StructuringHttpClient(StructuredOutputPort):
    def __init__(
        self,
        base_url: str | None,
        *,
        user: str = "",
        password: str = "",
        timeout_seconds: int = 30,
        verify_ssl: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
        retries: int = 2,
    ) -> None:
        self._base_url = base_url.rstrip("/") if base_url else None
        self._user = user
        self._password = password
        self._timeout_seconds = timeout_seconds
        self._verify_ssl = verify_ssl
        self._transport = transport
        self._retries = retries

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url or "",
            timeout=self._timeout_seconds,
            verify=self._verify_ssl,
            transport=self._transport,
        )

    async def _fetch(self, work_id: str) -> dict[str, Any] | None:
        async with self._client() as client:
            resp = await client.post(
                "/Check",
                data={"work_id": work_id, "userid": self._user, "password": self._password},
            )
            if resp.status_code == 404:
                return None
            resp.raise_for_status()
            data = resp.json()
            if not isinstance(data, dict):
                raise RuntimeError("structuring response is not a JSON object")
            return data

    async def get_structured_output(self, work_id: str) -> dict[str, Any] | None:
        if not self._base_url:
            logger.info("structuring_not_configured", extra={"work_id": work_id})
            return None
        return await async_retry(
            self._fetch,
            work_id,
            retries=self._retries,
            exceptions=(httpx.TransportError,),
        )
