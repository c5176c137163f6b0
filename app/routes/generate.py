# app/routes/generate.py
from __future__ import annotations

import asyncio
import json
import logging
import threading

from fastapi import APIRouter, BackgroundTasks, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from app.helpers.images import DATA_URL_PREFIX, parse_guest_photo, to_data_url
from app.lib.archive import archive_enabled, archive_session
from app.lib.booth import run_wedding_portrait

router = APIRouter()
log = logging.getLogger("routes.generate")

DISCONNECT_CHECK_S = 0.5


async def watch_disconnect(request: Request, cancel: threading.Event, interval_s: float = DISCONNECT_CHECK_S) -> None:
    """Set `cancel` once the guest's browser goes away, so vendor polling stops."""
    while not cancel.is_set():
        if await request.is_disconnected():
            log.info("generate: client disconnected, cancelling generation")
            cancel.set()
            return
        await asyncio.sleep(interval_s)


def archive_selfie_url(guest_photo: str) -> str:
    s = guest_photo.strip()
    if s.startswith(DATA_URL_PREFIX):
        return s
    mime, _ = parse_guest_photo(s)
    return to_data_url(s, mime or "image/png")


@router.post("/generate")
async def generate(request: Request, background: BackgroundTasks):
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None
    guest_photo = body.get("guestPhoto") if isinstance(body, dict) else None
    if not isinstance(guest_photo, str):
        guest_photo = None

    cancel = threading.Event()
    watcher = asyncio.create_task(watch_disconnect(request, cancel))
    try:
        # vendor calls block (requests + polling); keep them off the event loop
        resp = await run_in_threadpool(run_wedding_portrait, guest_photo, cancel)
    finally:
        watcher.cancel()
    status = resp.pop("status", 200)

    if status == 200 and archive_enabled():
        background.add_task(archive_session, archive_selfie_url(guest_photo), resp.get("image"))
    return JSONResponse(resp, status_code=status)


@router.api_route(
    "/generate",
    methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def generate_wrong_method():
    return JSONResponse({"error": "Method not allowed"}, status_code=405, headers={"Allow": "POST"})
