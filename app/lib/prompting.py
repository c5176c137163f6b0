# app/lib/prompting.py
from __future__ import annotations
from typing import List, Optional
import logging

logger = logging.getLogger("prompting")

MAX_GUESTS = 8

_NUMBER_WORDS = {
    1: "ONE", 2: "TWO", 3: "THREE", 4: "FOUR", 5: "FIVE",
    6: "SIX", 7: "SEVEN", 8: "EIGHT", 9: "NINE", 10: "TEN",
}

def number_word(n: int) -> str:
    return _NUMBER_WORDS.get(n, str(n))

def clamp_guest_count(n: Optional[int]) -> int:
    try:
        n = int(n or 1)
    except (TypeError, ValueError):
        return 1
    return max(1, min(MAX_GUESTS, n))

def _occasion(couple_names: str, wedding_date: str) -> str:
    names = (couple_names or "").strip()
    date = (wedding_date or "").strip()
    if names and date:
        return f" celebrating the wedding of {names} on {date}"
    if names:
        return f" celebrating the wedding of {names}"
    return ""

def _subjects(guest_count: int, descriptions: List[str]) -> str:
    total = guest_count + 2
    head = f"There are {number_word(total)} people in this photo: the bride (from image 1), the groom (from image 2), "
    if guest_count == 1:
        line = head + "and a wedding guest (from image 3). "
        if descriptions:
            line += f"The guest: {descriptions[0]}. "
        return line + "The guest is standing between or beside the bride and groom, all smiling together. "

    line = head + f"and {number_word(guest_count)} wedding guests (all from image 3). "
    for i in range(guest_count):
        desc = descriptions[i] if i < len(descriptions) and descriptions[i] else "as they appear in image 3"
        line += f"Guest {i + 1}: {desc}. "
    return line + (
        "The guests stand together beside the bride and groom, naturally grouped, all smiling together. "
        "Every guest from image 3 must appear exactly once. "
    )

def build_wedding_prompt(
    *,
    couple_names: str,
    wedding_date: str = "",
    guest_count: int = 1,
    guest_descriptions: Optional[List[str]] = None,
    has_style_ref: bool = False,
) -> str:
    """
    Generation instruction for the composite portrait.

    guest_count is clamped to 1..MAX_GUESTS; the text always names the bride,
    the groom and exactly guest_count guests.
    """
    n = clamp_guest_count(guest_count)
    descs = [str(d).strip() for d in (guest_descriptions or []) if str(d).strip()]

    prompt = (
        "Create a beautiful, joyful professional wedding group photograph"
        f"{_occasion(couple_names, wedding_date)}. "
        + _subjects(n, descs)
        + "The bride wears an elegant white wedding gown and the groom a tailored dark suit; "
        "guests keep the clothing they wear in their photo. "
        "They are at an elegant wedding venue with soft romantic lighting, lush floral "
        "arrangements, and a dreamy atmosphere. Make it look like a high-end candid wedding "
        "photo with warm golden tones. "
    )
    if has_style_ref:
        prompt += (
            "Match the setting, composition and color grading of the scene in image 4, "
            "but do not copy any faces from it. "
        )
    prompt += (
        "Preserve each person's face and features accurately. "
        "No text, no watermark, no extra people."
    )
    logger.debug("prompting: guests=%d style_ref=%s prompt=%s", n, has_style_ref, prompt)
    return prompt
