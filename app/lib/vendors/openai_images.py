# app/lib/vendors/openai_images.py
from __future__ import annotations

import logging
from typing import List, Tuple

import requests

from app.core.settings import settings
from app.helpers.images import fetch_image_bytes, to_data_url
from app.lib.errors import NoImageError
from app.lib.vendors.common import PortraitJob, raise_for_vendor

log = logging.getLogger("openai")

OPENAI_EDITS_URL = "https://api.openai.com/v1/images/edits"

_EXT = {"image/png": "png", "image/jpeg": "jpg", "image/webp": "webp"}


def _file_part(name: str, mime: str, content: bytes) -> Tuple[str, Tuple[str, bytes, str]]:
    return "image[]", (f"{name}.{_EXT.get(mime, 'png')}", content, mime)


def generate(job: PortraitJob) -> str:
    """
    Multipart image edit: image[] = bride, groom, guest (+ style scene).
    Returns a PNG data URL for b64_json results, otherwise the hosted URL.
    """
    files: List[Tuple[str, Tuple[str, bytes, str]]] = []
    bride_mime, bride = fetch_image_bytes(job.bride_url)
    files.append(_file_part("bride", bride_mime, bride))
    groom_mime, groom = fetch_image_bytes(job.groom_url)
    files.append(_file_part("groom", groom_mime, groom))
    files.append(_file_part("guest", job.guest_mime, job.guest_bytes))
    if job.style_url:
        style_mime, style = fetch_image_bytes(job.style_url)
        files.append(_file_part("style", style_mime, style))

    data = {
        "model": settings.OPENAI_IMAGE_MODEL,
        "prompt": job.prompt,
        "size": settings.OPENAI_IMAGE_SIZE,
        "quality": settings.OPENAI_IMAGE_QUALITY,
        "n": "1",
    }
    log.info("openai: images/edits model=%s images=%d", settings.OPENAI_IMAGE_MODEL, len(files))
    resp = requests.post(
        OPENAI_EDITS_URL,
        headers={"Authorization": f"Bearer {settings.OPENAI_API_KEY}"},
        data=data,
        files=files,
        timeout=settings.REQUEST_TIMEOUT_S,
    )
    raise_for_vendor(resp, "OpenAI")

    img = (resp.json().get("data") or [{}])[0] or {}
    if img.get("b64_json"):
        return to_data_url(img["b64_json"], "image/png")
    if img.get("url"):
        return img["url"]
    raise NoImageError()
