from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional, TypeVar

import requests

from app.lib.errors import JobCancelled, VendorTimeout

log = logging.getLogger("polling")

T = TypeVar("T")

MIN_CHECK_TIMEOUT_S = 0.5


def poll_until_done(
    check: Callable[[float], Optional[T]],
    *,
    interval_s: float,
    timeout_s: float,
    cancel: Optional[threading.Event] = None,
    label: str = "job",
) -> T:
    """
    Call `check(remaining_s)` every `interval_s` seconds until it returns a value.

    `check` receives the seconds left before the deadline and must bound its
    own HTTP call with it. It returns None while the vendor job is still
    running and raises VendorError when the vendor reports failure. Raises
    VendorTimeout once the monotonic deadline passes or a status request times
    out, JobCancelled if `cancel` is set.
    """
    cancel = cancel or threading.Event()
    deadline = time.monotonic() + timeout_s
    attempts = 0
    while True:
        if cancel.is_set():
            raise JobCancelled(f"{label} cancelled")
        attempts += 1
        remaining = max(deadline - time.monotonic(), MIN_CHECK_TIMEOUT_S)
        try:
            result = check(remaining)
        except requests.Timeout:
            log.warning("polling: %s status request timed out (%d checks)", label, attempts)
            raise VendorTimeout()
        if result is not None:
            log.info("polling: %s finished after %d checks", label, attempts)
            return result
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            log.warning("polling: %s timed out after %.1fs (%d checks)", label, timeout_s, attempts)
            raise VendorTimeout()
        # Event.wait doubles as an interruptible sleep
        if cancel.wait(min(interval_s, remaining)):
            raise JobCancelled(f"{label} cancelled")
