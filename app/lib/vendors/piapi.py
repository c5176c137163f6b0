# app/lib/vendors/piapi.py
from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Optional

import requests

from app.core.settings import settings
from app.helpers.images import composite_faces, fetch_image_bytes, to_data_url
from app.lib.errors import ConfigError, NoImageError, VendorError
from app.lib.polling import poll_until_done
from app.lib.vendors.common import PortraitJob, raise_for_vendor

log = logging.getLogger("piapi")

PIAPI_TASK_URL = "https://api.piapi.ai/api/v1/task"
FACE_SWAP_MODEL = "Qubico/image-toolkit"
FACE_SWAP_TASK = "multi-face-swap"


def _headers() -> Dict[str, str]:
    return {"x-api-key": settings.PIAPI_API_KEY or "", "Content-Type": "application/json"}


def read_task(body: Dict[str, Any]) -> Optional[str]:
    """None while pending/processing; image on completion; VendorError on failure."""
    data = body.get("data") or {}
    status = str(data.get("status") or "").lower()
    if status == "completed":
        out = data.get("output") or {}
        if out.get("image_url"):
            return out["image_url"]
        if out.get("image_base64"):
            return to_data_url(out["image_base64"], "image/png")
        raise NoImageError()
    if status == "failed":
        err = data.get("error") or {}
        if isinstance(err, str):
            raise VendorError(err)
        msg = err.get("message") if isinstance(err, dict) else None
        raise VendorError(str(msg or "Face swap failed"))
    return None


def generate(job: PortraitJob) -> str:
    """
    Face-swap path: bride, groom and guest faces are composited left-to-right
    into one image and swapped onto the style reference scene.
    """
    if not job.style_url:
        raise ConfigError("Server misconfigured: missing STYLE_REFERENCE_URL")
    _, bride = fetch_image_bytes(job.bride_url)
    _, groom = fetch_image_bytes(job.groom_url)
    swap = composite_faces([bride, groom, job.guest_bytes])

    payload = {
        "model": FACE_SWAP_MODEL,
        "task_type": FACE_SWAP_TASK,
        "input": {
            "target_image": job.style_url,
            "swap_image": base64.b64encode(swap).decode("utf-8"),
            "swap_faces_index": "0,1,2",
            "target_faces_index": "0,1,2",
        },
    }
    log.info("piapi: create %s task", FACE_SWAP_TASK)
    resp = requests.post(PIAPI_TASK_URL, headers=_headers(), json=payload, timeout=settings.REQUEST_TIMEOUT_S)
    raise_for_vendor(resp, "PiAPI")
    body = resp.json()
    task_id = (body.get("data") or {}).get("task_id")
    if not task_id:
        raise VendorError("Face swap task was not created")

    def _check(remaining_s: float) -> Optional[str]:
        r = requests.get(f"{PIAPI_TASK_URL}/{task_id}", headers=_headers(), timeout=min(settings.REQUEST_TIMEOUT_S, remaining_s))
        raise_for_vendor(r, "PiAPI")
        return read_task(r.json())

    return poll_until_done(
        _check,
        interval_s=settings.POLL_INTERVAL_S,
        timeout_s=settings.POLL_TIMEOUT_S,
        cancel=job.cancel,
        label=f"piapi task {task_id}",
    )
