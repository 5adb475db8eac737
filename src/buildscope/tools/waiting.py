"""Bounded waiting on externally driven completion flags."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

LOGGER = logging.getLogger(__name__)


class ProcessTimeout(RuntimeError):
    """Raised when an external operation does not finish before its deadline."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"timed out after {timeout:g} seconds")


def wait_until(
    predicate: Callable[[], bool],
    *,
    interval: float = 0.5,
    timeout: float | None = None,
    on_timeout: Callable[[], None] | None = None,
) -> None:
    """Block until ``predicate`` returns true or ``timeout`` expires.

    The predicate is sampled every ``interval`` seconds on a background
    thread that sets a single-use event; the caller waits on that event with
    the deadline.  On expiry ``on_timeout`` runs (to force-stop the external
    operation) and :class:`ProcessTimeout` is raised.  ``timeout=None`` waits
    indefinitely.  Errors raised by the predicate are re-raised here.
    """

    done = threading.Event()
    cancelled = threading.Event()
    failure: list[BaseException] = []

    def _poll() -> None:
        try:
            while not cancelled.is_set():
                if predicate():
                    done.set()
                    return
                cancelled.wait(interval)
        except Exception as error:  # noqa: BLE001 - re-raised on the caller's thread
            failure.append(error)
            done.set()

    poller = threading.Thread(target=_poll, name="buildscope-poll", daemon=True)
    started = time.monotonic()
    poller.start()

    finished = done.wait(timeout)
    cancelled.set()
    if failure:
        raise failure[0]
    if not finished:
        LOGGER.warning("Gave up waiting after %.1fs", time.monotonic() - started)
        if on_timeout is not None:
            on_timeout()
        raise ProcessTimeout(timeout or 0.0)
    LOGGER.debug("Wait finished after %.1fs", time.monotonic() - started)


__all__ = ["ProcessTimeout", "wait_until"]
