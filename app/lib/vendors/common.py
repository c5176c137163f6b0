from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Optional

import requests

from app.helpers.images import to_data_url
from app.lib.errors import VendorError

log = logging.getLogger("vendors")

GENERIC_VENDOR_ERROR = "AI generation failed"


def vendor_error_message(resp: requests.Response, fallback: str = GENERIC_VENDOR_ERROR) -> str:
    """
    Pull a human-readable message out of a vendor error body.

    Understands {"error": {"message": ...}} (OpenAI, Gemini), {"error": "..."},
    {"detail": "..."} (Replicate) and {"message": "..."} (PiAPI).
    """
    try:
        body: Any = resp.json()
    except ValueError:
        return fallback
    if not isinstance(body, dict):
        return fallback
    err = body.get("error")
    if isinstance(err, dict) and err.get("message"):
        return str(err["message"])
    if isinstance(err, str) and err:
        return err
    for key in ("detail", "message"):
        if isinstance(body.get(key), str) and body[key]:
            return body[key]
    return fallback


def raise_for_vendor(resp: requests.Response, vendor: str) -> None:
    if resp.ok:
        return
    log.error("%s error: %s %s", vendor, resp.status_code, resp.text[:500])
    raise VendorError(vendor_error_message(resp))


@dataclass
class PortraitJob:
    """Everything a vendor needs for one generation."""

    guest_mime: str
    guest_bytes: bytes
    prompt: str
    bride_url: str
    groom_url: str
    style_url: Optional[str] = None
    cancel: threading.Event = field(default_factory=threading.Event)

    @property
    def guest_data_url(self) -> str:
        return to_data_url(self.guest_bytes, self.guest_mime)
