# app/lib/vendors/gemini.py
from __future__ import annotations

import base64
import json
import logging
from typing import Any, Dict, List

import requests

from app.core.settings import settings
from app.helpers.images import fetch_image_bytes, to_data_url
from app.lib.errors import NoImageError
from app.lib.vendors.common import PortraitJob, raise_for_vendor

log = logging.getLogger("gemini")

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


def _b64(b: bytes) -> str:
    return base64.b64encode(b).decode("utf-8")


def _obtain_token() -> str:
    import google.auth
    from google.auth.transport.requests import Request
    creds, _ = google.auth.default(scopes=["https://www.googleapis.com/auth/cloud-platform"])
    if not creds.valid:
        creds.refresh(Request())
    return creds.token  # type: ignore[no-any-return]


def _endpoint() -> tuple[str, Dict[str, str]]:
    model = settings.GEMINI_IMAGE_MODEL
    headers = {"Content-Type": "application/json"}
    if settings.GOOGLE_GENAI_USE_VERTEXAI:
        loc, project = settings.GOOGLE_CLOUD_LOCATION, settings.GOOGLE_CLOUD_PROJECT
        url = (
            f"https://{loc}-aiplatform.googleapis.com/v1/"
            f"projects/{project}/locations/{loc}/publishers/google/models/{model}:generateContent"
        )
        headers["Authorization"] = f"Bearer {_obtain_token()}"
    else:
        url = f"{GEMINI_API_BASE}/{model}:generateContent"
        headers["x-goog-api-key"] = settings.GEMINI_API_KEY or ""
    return url, headers


def _inline(mime: str, b: bytes) -> Dict[str, Any]:
    return {"inlineData": {"mimeType": mime, "data": _b64(b)}}


def extract_image(body: Dict[str, Any]) -> str:
    for cand in body.get("candidates") or []:
        for part in (cand.get("content") or {}).get("parts") or []:
            inline = part.get("inlineData") or part.get("inline_data")
            if inline and inline.get("data"):
                mime = inline.get("mimeType") or inline.get("mime_type") or "image/png"
                return to_data_url(inline["data"], mime)
    raise NoImageError()


def generate(job: PortraitJob) -> str:
    parts: List[Dict[str, Any]] = [{"text": job.prompt}]
    for url in (job.bride_url, job.groom_url):
        parts.append(_inline(*fetch_image_bytes(url)))
    parts.append(_inline(job.guest_mime, job.guest_bytes))
    if job.style_url:
        parts.append(_inline(*fetch_image_bytes(job.style_url)))

    payload = {
        "contents": [{"role": "user", "parts": parts}],
        "generationConfig": {"responseModalities": ["IMAGE"]},
    }
    url, headers = _endpoint()
    log.info("gemini: generateContent model=%s vertex=%s", settings.GEMINI_IMAGE_MODEL, settings.GOOGLE_GENAI_USE_VERTEXAI)
    resp = requests.post(url, headers=headers, data=json.dumps(payload), timeout=settings.REQUEST_TIMEOUT_S)
    raise_for_vendor(resp, "Gemini")
    return extract_image(resp.json())
