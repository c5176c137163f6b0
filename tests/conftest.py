from __future__ import annotations

import base64
import io
import json
from typing import Any, Dict, List, Optional, Tuple

import pytest
import requests
from fastapi.testclient import TestClient
from PIL import Image

from app.core.settings import settings

REF_BASE = "https://example.com/refs/"
BRIDE_URL = REF_BASE + "bride.png"
GROOM_URL = REF_BASE + "groom.png"


def make_png(size: Tuple[int, int] = (64, 48), color=(200, 120, 90)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        json_body: Any = None,
        text: Optional[str] = None,
        content: bytes = b"",
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.status_code = status_code
        self._json = json_body
        self.text = text if text is not None else (json.dumps(json_body) if json_body is not None else "")
        self.content = content
        self.headers = headers or {"Content-Type": "application/json"}

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if self._json is None:
            raise ValueError("response body is not JSON")
        return self._json

    def raise_for_status(self) -> None:
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code}", response=self)  # type: ignore[arg-type]


class FakeHTTP:
    """Stands in for requests.get/post; routes by method + URL prefix."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
        self._routes: List[Tuple[str, str, List[Any]]] = []

    def on(self, method: str, prefix: str, *responses: Any) -> None:
        self._routes.append((method, prefix, list(responses)))

    def _dispatch(self, method: str, url: str, **kw: Any) -> Any:
        self.calls.append((method, url, kw))
        for m, prefix, responses in self._routes:
            if m == method and url.startswith(prefix):
                r = responses.pop(0) if len(responses) > 1 else responses[0]
                if isinstance(r, Exception):
                    raise r
                return r
        raise AssertionError(f"unexpected {method} {url}")

    def post(self, url: str, **kw: Any) -> Any:
        return self._dispatch("POST", url, **kw)

    def get(self, url: str, **kw: Any) -> Any:
        return self._dispatch("GET", url, **kw)

    def vendor_calls(self) -> List[Tuple[str, str, Dict[str, Any]]]:
        return [c for c in self.calls if not c[1].startswith(REF_BASE)]


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def guest_data_url(png_bytes: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode()


@pytest.fixture
def booth_settings(monkeypatch: pytest.MonkeyPatch):
    values = {
        "BOOTH_VENDOR": "openai",
        "OPENAI_API_KEY": "sk-test",
        "GEMINI_API_KEY": None,
        "GOOGLE_GENAI_USE_VERTEXAI": False,
        "REPLICATE_API_TOKEN": None,
        "PIAPI_API_KEY": None,
        "BRIDE_PHOTO_URL": BRIDE_URL,
        "GROOM_PHOTO_URL": GROOM_URL,
        "STYLE_REFERENCE_URL": None,
        "FACE_COUNT_ENABLED": False,
        "COUPLE_NAMES": "Hussein & Shahd",
        "WEDDING_DATE": "May 29, 2026",
        "POLL_INTERVAL_S": 0.01,
        "POLL_TIMEOUT_S": 0.05,
        "CLOUDINARY_URL": None,
        "CLOUDINARY_CLOUD_NAME": None,
        "CLOUDINARY_API_KEY": None,
        "CLOUDINARY_API_SECRET": None,
    }
    for k, v in values.items():
        monkeypatch.setattr(settings, k, v)
    return settings


@pytest.fixture
def http(monkeypatch: pytest.MonkeyPatch, png_bytes: bytes) -> FakeHTTP:
    fake = FakeHTTP()
    fake.on("GET", REF_BASE, FakeResponse(200, content=png_bytes, headers={"Content-Type": "image/png"}))
    monkeypatch.setattr(requests, "post", fake.post)
    monkeypatch.setattr(requests, "get", fake.get)
    return fake


@pytest.fixture
def client(booth_settings) -> TestClient:
    from main import create_app
    return TestClient(create_app())
