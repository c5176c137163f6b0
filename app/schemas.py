from __future__ import annotations
from pydantic import BaseModel

class EventOut(BaseModel):
    couple_names: str
    wedding_date: str
    vendor: str
