from __future__ import annotations

import base64
import binascii
import io
import logging
from typing import List, Optional, Tuple

import requests
from PIL import Image, UnidentifiedImageError

log = logging.getLogger("images")

DATA_URL_PREFIX = "data:"
CLOUDINARY_HOST = "res.cloudinary.com"
UPLOAD_SEGMENT = "/upload/"

_FMT_MIME = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
    "GIF": "image/gif",
    "BMP": "image/bmp",
    "HEIF": "image/heif",
}


def sniff_mime(b: bytes) -> Optional[str]:
    try:
        with Image.open(io.BytesIO(b)) as im:
            return _FMT_MIME.get((im.format or "").upper())
    except (UnidentifiedImageError, OSError):
        return None


def parse_guest_photo(s: str) -> Tuple[Optional[str], Optional[bytes]]:
    """
    Decode a guest photo into (mime, bytes).

    Accepts either a data URL (data:image/png;base64,...) or bare base64.
    Bare base64 is sniffed with Pillow. Returns (None, None) when the payload
    is not base64 or not an image.
    """
    if not s or not isinstance(s, str):
        return None, None
    s = s.strip()
    mime: Optional[str] = None
    b64 = s
    if s.startswith(DATA_URL_PREFIX):
        try:
            header, b64 = s.split(",", 1)
        except ValueError:
            return None, None
        if ";base64" not in header:
            return None, None
        mime = header[len(DATA_URL_PREFIX):].split(";")[0].strip().lower()
        if not mime.startswith("image/"):
            log.warning("parse_guest_photo: non-image data URL rejected (mime=%s)", mime)
            return None, None
    try:
        raw = base64.b64decode(b64, validate=True)
    except (binascii.Error, ValueError):
        return None, None
    if not raw:
        return None, None
    if mime is None:
        mime = sniff_mime(raw)
        if mime is None:
            return None, None
    return mime, raw


def to_data_url(data: bytes | str, mime: str = "image/png") -> str:
    b64 = data if isinstance(data, str) else base64.b64encode(data).decode("utf-8")
    return f"data:{mime};base64,{b64}"


def cloudinary_transform(url: Optional[str], transform: Optional[str]) -> Optional[str]:
    """Insert a Cloudinary transformation after /upload/ (e.g. w_1024,c_limit)."""
    if not url or not transform or CLOUDINARY_HOST not in url or UPLOAD_SEGMENT not in url:
        return url
    if f"{UPLOAD_SEGMENT}{transform}/" in url:
        return url
    return url.replace(UPLOAD_SEGMENT, f"{UPLOAD_SEGMENT}{transform}/", 1)


def fetch_image_bytes(url: str, timeout: float = 30) -> Tuple[str, bytes]:
    """Download a reference photo. Raises on HTTP failure or non-image content."""
    r = requests.get(url, timeout=timeout, headers={"Accept": "image/*"})
    r.raise_for_status()
    ct = (r.headers.get("Content-Type") or "").split(";")[0].strip().lower()
    if not ct.startswith("image/"):
        raise ValueError(f"reference URL is not an image (ct={ct}): {url}")
    return ct, r.content


# ---------- face composite (face-swap input) ----------
def _portrait_crop(img: Image.Image) -> Image.Image:
    # faces sit in the upper-middle of a selfie/portrait
    w, h = img.size
    side = min(w, h)
    left = (w - side) // 2
    top = int((h - side) * 0.25)
    return img.crop((left, top, left + side, top + side))


def composite_faces(images: List[bytes], tile: int = 512, gutter: int = 32) -> bytes:
    """Lay out one square crop per image left-to-right on a white PNG canvas."""
    if not images:
        raise ValueError("composite_faces needs at least one image")
    width = len(images) * tile + (len(images) + 1) * gutter
    canvas = Image.new("RGB", (width, tile + 2 * gutter), (255, 255, 255))
    for i, b in enumerate(images):
        with Image.open(io.BytesIO(b)) as im:
            face = _portrait_crop(im.convert("RGB")).resize((tile, tile), Image.LANCZOS)
        canvas.paste(face, (gutter + i * (tile + gutter), gutter))
    buf = io.BytesIO(); canvas.save(buf, format="PNG")
    return buf.getvalue()
