from __future__ import annotations
import os
from pathlib import Path
from dotenv import load_dotenv; load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "t")


class Settings:
    BOOTH_VENDOR = os.getenv("BOOTH_VENDOR", "openai").strip().lower()
    ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    STATIC_DIR = Path(os.getenv("STATIC_DIR", Path(__file__).resolve().parent.parent / "static")).resolve()

    # reference photos
    BRIDE_PHOTO_URL = os.getenv("BRIDE_PHOTO_URL")
    GROOM_PHOTO_URL = os.getenv("GROOM_PHOTO_URL")
    STYLE_REFERENCE_URL = os.getenv("STYLE_REFERENCE_URL")
    CLOUDINARY_TRANSFORM = os.getenv("CLOUDINARY_TRANSFORM", "w_1024,h_1024,c_limit")

    # event personalisation
    COUPLE_NAMES = os.getenv("COUPLE_NAMES", "The Happy Couple")
    WEDDING_DATE = os.getenv("WEDDING_DATE", "")

    # OpenAI
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    OPENAI_IMAGE_MODEL = os.getenv("OPENAI_IMAGE_MODEL", "gpt-image-1")
    OPENAI_IMAGE_SIZE = os.getenv("OPENAI_IMAGE_SIZE", "1536x1024")
    OPENAI_IMAGE_QUALITY = os.getenv("OPENAI_IMAGE_QUALITY", "high")
    OPENAI_VISION_MODEL = os.getenv("OPENAI_VISION_MODEL", "gpt-4o")
    FACE_COUNT_ENABLED = _flag("FACE_COUNT_ENABLED")

    # Gemini
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
    GEMINI_IMAGE_MODEL = os.getenv("GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image")
    GOOGLE_GENAI_USE_VERTEXAI = _flag("GOOGLE_GENAI_USE_VERTEXAI")
    GOOGLE_CLOUD_PROJECT = os.getenv("GOOGLE_CLOUD_PROJECT")
    GOOGLE_CLOUD_LOCATION = os.getenv("GOOGLE_CLOUD_LOCATION", "us-central1")

    # Replicate / PiAPI
    REPLICATE_API_TOKEN = os.getenv("REPLICATE_API_TOKEN")
    REPLICATE_MODEL = os.getenv("REPLICATE_MODEL", "flux-kontext-apps/multi-image-list")
    PIAPI_API_KEY = os.getenv("PIAPI_API_KEY")

    # timing
    POLL_INTERVAL_S = float(os.getenv("POLL_INTERVAL_S", "2"))
    POLL_TIMEOUT_S = float(os.getenv("POLL_TIMEOUT_S", "55"))
    REQUEST_TIMEOUT_S = float(os.getenv("REQUEST_TIMEOUT_S", "120"))

    # archival (optional)
    CLOUDINARY_URL = os.getenv("CLOUDINARY_URL")
    CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME")
    CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY")
    CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET")
    ARCHIVE_FOLDER = os.getenv("ARCHIVE_FOLDER", "wedsnap")

settings = Settings()
