# app/lib/vendors/replicate.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from app.core.settings import settings
from app.lib.errors import NoImageError, VendorError
from app.lib.polling import poll_until_done
from app.lib.vendors.common import PortraitJob, raise_for_vendor

log = logging.getLogger("replicate")

REPLICATE_API = "https://api.replicate.com/v1"

SUCCEEDED = "succeeded"
FAILED_STATES = ("failed", "canceled")


def _headers() -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {settings.REPLICATE_API_TOKEN}",
        "Content-Type": "application/json",
    }


def _output_url(output: Any) -> Optional[str]:
    if isinstance(output, str) and output:
        return output
    if isinstance(output, list) and output and isinstance(output[0], str):
        return output[0]
    return None


def read_prediction(pred: Dict[str, Any]) -> Optional[str]:
    """None while running; image URL on success; VendorError on failure."""
    status = pred.get("status")
    if status == SUCCEEDED:
        url = _output_url(pred.get("output"))
        if not url:
            raise NoImageError()
        return url
    if status in FAILED_STATES:
        raise VendorError(str(pred.get("error") or f"Prediction {status}"))
    return None


def generate(job: PortraitJob) -> str:
    payload = {
        "input": {
            "prompt": job.prompt,
            "input_images": [job.bride_url, job.groom_url, job.guest_data_url] + ([job.style_url] if job.style_url else []),
            "aspect_ratio": "3:2",
            "output_format": "png",
        }
    }
    url = f"{REPLICATE_API}/models/{settings.REPLICATE_MODEL}/predictions"
    log.info("replicate: create prediction model=%s", settings.REPLICATE_MODEL)
    resp = requests.post(url, headers=_headers(), json=payload, timeout=settings.REQUEST_TIMEOUT_S)
    raise_for_vendor(resp, "Replicate")
    pred = resp.json()

    done = read_prediction(pred)
    if done:
        return done

    poll_url = (pred.get("urls") or {}).get("get") or f"{REPLICATE_API}/predictions/{pred.get('id')}"

    def _check(remaining_s: float) -> Optional[str]:
        r = requests.get(poll_url, headers=_headers(), timeout=min(settings.REQUEST_TIMEOUT_S, remaining_s))
        raise_for_vendor(r, "Replicate")
        return read_prediction(r.json())

    return poll_until_done(
        _check,
        interval_s=settings.POLL_INTERVAL_S,
        timeout_s=settings.POLL_TIMEOUT_S,
        cancel=job.cancel,
        label=f"replicate prediction {pred.get('id')}",
    )
