from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Tuple

import requests

from app.core.settings import settings

log = logging.getLogger("vision")

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"

FACE_COUNT_PROMPT = (
    "Count the human faces clearly visible in this photo. "
    "For each face give a short visual description (hair, clothing, notable features) "
    "ordered left to right. "
    "Return STRICT JSON: {\"face_count\": int, \"faces\": [{\"description\": string}]}. "
    "No text outside the JSON."
)

DEFAULT_GUESTS: Tuple[int, List[str]] = (1, [])


def parse_face_count(text: str) -> Tuple[int, List[str]]:
    """(count, descriptions) from the model's JSON; (1, []) on anything unexpected."""
    try:
        j = json.loads(text)
        count = int(j.get("face_count"))
    except (TypeError, ValueError, AttributeError):
        return DEFAULT_GUESTS
    if count < 1:
        return DEFAULT_GUESTS
    faces = j.get("faces")
    if not isinstance(faces, list):
        faces = []
    descs: List[str] = []
    for f in faces:
        d = f.get("description") if isinstance(f, dict) else f
        if isinstance(d, str) and d.strip():
            descs.append(d.strip())
    return count, descs


def count_faces(guest_data_url: str) -> Tuple[int, List[str]]:
    """Ask the vision model how many guests are in the selfie. Never raises."""
    body: Dict[str, Any] = {
        "model": settings.OPENAI_VISION_MODEL,
        "response_format": {"type": "json_object"},
        "temperature": 0,
        "max_tokens": 400,
        "messages": [{
            "role": "user",
            "content": [
                {"type": "text", "text": FACE_COUNT_PROMPT},
                {"type": "image_url", "image_url": {"url": guest_data_url}},
            ],
        }],
    }
    try:
        resp = requests.post(
            OPENAI_CHAT_URL,
            headers={"Authorization": f"Bearer {settings.OPENAI_API_KEY}", "Content-Type": "application/json"},
            json=body,
            timeout=60,
        )
        resp.raise_for_status()
        text = resp.json()["choices"][0]["message"]["content"] or ""
    except (requests.RequestException, KeyError, IndexError, TypeError, ValueError) as e:
        log.warning("vision: face count failed, assuming one guest: %s", e)
        return DEFAULT_GUESTS

    count, descs = parse_face_count(text)
    log.info("vision: face_count=%d", count)
    return count, descs
