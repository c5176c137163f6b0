from __future__ import annotations
from fastapi import APIRouter
from ..core.settings import settings
from ..schemas import EventOut

router = APIRouter()

@router.get("/event")
def get_event():
    return EventOut(
        couple_names=settings.COUPLE_NAMES,
        wedding_date=settings.WEDDING_DATE,
        vendor=settings.BOOTH_VENDOR,
    ).model_dump()
