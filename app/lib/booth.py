# app/lib/booth.py
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from app.core.settings import settings
from app.helpers.images import cloudinary_transform, parse_guest_photo, to_data_url
from app.lib.errors import BadRequest, BoothError, ConfigError, VendorTimeout
from app.lib.prompting import build_wedding_prompt
from app.lib.vendors import gemini, openai_images, piapi, replicate
from app.lib.vendors.common import PortraitJob
from app.lib.vision import count_faces

log = logging.getLogger("booth")

GENERIC_ERROR = "Something went wrong. Please try again."

VENDORS: Dict[str, Callable[[PortraitJob], str]] = {
    "openai": openai_images.generate,
    "gemini": gemini.generate,
    "replicate": replicate.generate,
    "piapi": piapi.generate,
}

# vendors whose path builds a prompt (the face-swap path does not)
PROMPTED_VENDORS = ("openai", "gemini", "replicate")


def _vendor_credentials(vendor: str) -> Dict[str, Optional[str]]:
    if vendor == "openai":
        return {"OPENAI_API_KEY": settings.OPENAI_API_KEY}
    if vendor == "gemini":
        if settings.GOOGLE_GENAI_USE_VERTEXAI:
            return {"GOOGLE_CLOUD_PROJECT": settings.GOOGLE_CLOUD_PROJECT}
        return {"GEMINI_API_KEY": settings.GEMINI_API_KEY}
    if vendor == "replicate":
        return {"REPLICATE_API_TOKEN": settings.REPLICATE_API_TOKEN}
    if vendor == "piapi":
        return {"PIAPI_API_KEY": settings.PIAPI_API_KEY, "STYLE_REFERENCE_URL": settings.STYLE_REFERENCE_URL}
    return {}


def check_config() -> str:
    """Return the configured vendor name or raise ConfigError naming what is missing."""
    vendor = settings.BOOTH_VENDOR
    if vendor not in VENDORS:
        raise ConfigError(f"Server misconfigured: unknown vendor '{vendor}'")
    required: Dict[str, Optional[str]] = dict(_vendor_credentials(vendor))
    required["BRIDE_PHOTO_URL"] = settings.BRIDE_PHOTO_URL
    required["GROOM_PHOTO_URL"] = settings.GROOM_PHOTO_URL
    missing: List[str] = [k for k, v in required.items() if not v]
    if missing:
        raise ConfigError(f"Server misconfigured: missing {', '.join(missing)}")
    return vendor


def _guest_count(guest_data_url: str) -> tuple[int, List[str]]:
    if settings.FACE_COUNT_ENABLED and settings.OPENAI_API_KEY:
        return count_faces(guest_data_url)
    return 1, []


def build_job(guest_photo: str, cancel: Optional[threading.Event] = None) -> tuple[str, PortraitJob]:
    mime, guest_bytes = parse_guest_photo(guest_photo)
    if not guest_bytes:
        raise BadRequest("Guest photo is not a valid image")
    vendor = check_config()

    style_url = cloudinary_transform(settings.STYLE_REFERENCE_URL, settings.CLOUDINARY_TRANSFORM)
    prompt = ""
    if vendor in PROMPTED_VENDORS:
        n, descs = _guest_count(to_data_url(guest_bytes, mime or "image/png"))
        prompt = build_wedding_prompt(
            couple_names=settings.COUPLE_NAMES,
            wedding_date=settings.WEDDING_DATE,
            guest_count=n,
            guest_descriptions=descs,
            has_style_ref=bool(style_url),
        )
    job = PortraitJob(
        guest_mime=mime or "image/png",
        guest_bytes=guest_bytes,
        prompt=prompt,
        bride_url=cloudinary_transform(settings.BRIDE_PHOTO_URL, settings.CLOUDINARY_TRANSFORM) or "",
        groom_url=cloudinary_transform(settings.GROOM_PHOTO_URL, settings.CLOUDINARY_TRANSFORM) or "",
        style_url=style_url,
    )
    if cancel is not None:
        job.cancel = cancel
    return vendor, job


def run_wedding_portrait(guest_photo: Optional[str], cancel: Optional[threading.Event] = None) -> Dict[str, Any]:
    """
    Validate, build the vendor request, run it and map the outcome.

    Returns {"image": ...} on success or {"error": ..., "status": ...}.
    Setting `cancel` stops any vendor job polling (503).
    """
    if not guest_photo:
        return {"error": "No guest photo provided", "status": 400}

    start = time.time()
    try:
        vendor, job = build_job(guest_photo, cancel)
        image = VENDORS[vendor](job)
    except requests.Timeout as e:
        err = VendorTimeout()
        log.warning("booth: vendor request timed out: %s", e)
        return {"error": err.message, "status": err.status}
    except BoothError as e:
        log.warning("booth: generation failed (%d): %s", e.status, e.message)
        return {"error": e.message, "status": e.status}
    except Exception:
        log.exception("booth: unexpected generation error")
        return {"error": GENERIC_ERROR, "status": 500}

    log.info("booth: %s portrait ready in %dms", vendor, int((time.time() - start) * 1000))
    return {"image": image}
