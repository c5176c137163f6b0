from __future__ import annotations

import threading
import time

import pytest
import requests

from app.lib.errors import JobCancelled, VendorError, VendorTimeout
from app.lib.polling import poll_until_done


def test_returns_first_terminal_value():
    states = iter([None, None, "https://cdn.example.com/x.png"])
    calls = []

    def check(remaining_s):
        calls.append(remaining_s)
        return next(states)

    out = poll_until_done(check, interval_s=0.001, timeout_s=1.0)
    assert out == "https://cdn.example.com/x.png"
    assert len(calls) == 3


def test_check_receives_shrinking_budget():
    budgets = []

    def check(remaining_s):
        budgets.append(remaining_s)
        return "done" if len(budgets) == 3 else None

    poll_until_done(check, interval_s=0.01, timeout_s=30.0)
    assert all(b <= 30.0 for b in budgets)
    assert budgets[0] > budgets[-1]


def test_deadline_raises_timeout():
    start = time.monotonic()
    with pytest.raises(VendorTimeout):
        poll_until_done(lambda remaining_s: None, interval_s=0.01, timeout_s=0.05)
    assert time.monotonic() - start < 1.0


def test_status_request_timeout_becomes_vendor_timeout():
    def check(remaining_s):
        raise requests.Timeout("read timed out")

    with pytest.raises(VendorTimeout):
        poll_until_done(check, interval_s=0.01, timeout_s=1.0)


def test_vendor_failure_propagates():
    def check(remaining_s):
        raise VendorError("NSFW content detected")

    with pytest.raises(VendorError, match="NSFW"):
        poll_until_done(check, interval_s=0.01, timeout_s=1.0)


def test_cancel_token_stops_loop():
    cancel = threading.Event()
    calls = []

    def check(remaining_s):
        calls.append(1)
        cancel.set()
        return None

    with pytest.raises(JobCancelled):
        poll_until_done(check, interval_s=5.0, timeout_s=30.0, cancel=cancel)
    assert len(calls) == 1


def test_pre_cancelled_never_checks():
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(JobCancelled):
        poll_until_done(lambda remaining_s: pytest.fail("checked"), interval_s=0.01, timeout_s=1.0, cancel=cancel)
