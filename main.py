from __future__ import annotations
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from app.core.settings import settings
from app.core.logging import configure_logging
from dotenv import load_dotenv
load_dotenv()

APP_NAME = "WedSnap"
APP_VERSION = "0.1.0"

def create_app() -> FastAPI:
    configure_logging()
    application = FastAPI(title=APP_NAME, version=APP_VERSION)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=86400,
    )

    from app.routes.generate import router as generate_router
    from app.routes.event import router as event_router
    application.include_router(generate_router, prefix="/api", tags=["booth"])
    application.include_router(event_router, prefix="/api", tags=["booth"])

    @application.get("/healthz")
    def healthz(): return {"ok": True, "name": APP_NAME, "version": APP_VERSION, "vendor": settings.BOOTH_VENDOR}

    if settings.STATIC_DIR.is_dir():
        application.mount("/", StaticFiles(directory=str(settings.STATIC_DIR), html=True), name="booth")

    return application

app = create_app()
