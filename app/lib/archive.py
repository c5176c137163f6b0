from __future__ import annotations

import logging
import uuid
from typing import Optional

import cloudinary
import cloudinary.uploader

from app.core.settings import settings

log = logging.getLogger("archive")


def archive_enabled() -> bool:
    if settings.CLOUDINARY_URL:
        return True
    return bool(settings.CLOUDINARY_CLOUD_NAME and settings.CLOUDINARY_API_KEY and settings.CLOUDINARY_API_SECRET)


def _configure() -> None:
    if settings.CLOUDINARY_CLOUD_NAME:
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            secure=True,
        )
    # otherwise the SDK reads CLOUDINARY_URL from the environment


def archive_session(guest_data_url: str, result_image: Optional[str]) -> None:
    """Upload selfie and generated image. Best-effort: errors are logged only."""
    if not archive_enabled():
        return
    session = uuid.uuid4().hex[:12]
    folder = f"{settings.ARCHIVE_FOLDER}/{session}"
    try:
        _configure()
    except Exception as e:
        log.warning("archive: cloudinary config failed: %s", e)
        return
    for name, src in (("selfie", guest_data_url), ("portrait", result_image)):
        if not src:
            continue
        try:
            up = cloudinary.uploader.upload(src, folder=folder, public_id=name, resource_type="image")
            log.info("archive: uploaded %s -> %s", name, up.get("secure_url"))
        except Exception as e:
            log.warning("archive: upload of %s failed (non-fatal): %s", name, e)
