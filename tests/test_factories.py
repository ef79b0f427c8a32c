from __future__ import annotations

import pytest

from docdiff.application.services.factories import build_vision_client
from docdiff.core.config import get_settings


def test_vision_client_built_from_settings(isolated_settings, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOCDIFF_VISION_BASE_URL", "http://vision.local/v1/")
    monkeypatch.setenv("DOCDIFF_VISION_MODEL", "vision-mini")
    get_settings.cache_clear()
    client = build_vision_client()
    assert client._base_url == "http://vision.local/v1"
    assert client._model == "vision-mini"
    assert client._transport is None
