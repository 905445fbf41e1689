from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Iterable

from tips.config import EXPECTATION_TIMEOUT_S, FETCH_DELAY_S, FETCH_RESPONSE, SLEEP_WAIT_S


LOG = logging.getLogger("tips.expectations")


class ExpectationTimeout(TimeoutError):
    def __init__(self, pending: list[str], timeout: float) -> None:
        super().__init__(f"unfulfilled after {timeout:.2f}s: {', '.join(pending)}")
        self.pending = pending
        self.timeout = timeout


class Expectation:
    """One-shot flag a completion callback fulfils and a test waits on."""

    def __init__(self, description: str) -> None:
        self.description = description
        self._event = threading.Event()

    def __repr__(self) -> str:
        return f"Expectation({self.description!r}, fulfilled={self.is_fulfilled})"

    def fulfill(self) -> None:
        self._event.set()

    @property
    def is_fulfilled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)


def wait_for(expectations: Iterable[Expectation], timeout: float = EXPECTATION_TIMEOUT_S) -> None:
    """Block until every expectation is fulfilled, sharing one deadline.

    Returns as soon as the last one fires instead of sleeping a fixed time.
    Raises ExpectationTimeout naming the ones still pending.
    """
    expectations = list(expectations)
    deadline = time.monotonic() + timeout
    for exp in expectations:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        exp.wait(remaining)
    pending = [exp.description for exp in expectations if not exp.is_fulfilled]
    if pending:
        raise ExpectationTimeout(pending, timeout)
    LOG.debug("fulfilled %d expectation(s)", len(expectations))


def fetch_from_network(completion: Callable[[str], None], delay: float = FETCH_DELAY_S) -> threading.Timer:
    """Deliver FETCH_RESPONSE to `completion` on a background thread after `delay`."""
    timer = threading.Timer(delay, completion, args=(FETCH_RESPONSE,))
    timer.daemon = True
    timer.start()
    return timer


def fetch_by_sleeping(sleep_s: float = SLEEP_WAIT_S, delay: float = FETCH_DELAY_S) -> str | None:
    # Not good: always costs sleep_s, and returns None whenever the fetch outlasts it.
    result: list[str] = []
    fetch_from_network(result.append, delay=delay)
    time.sleep(sleep_s)
    return result[0] if result else None


def fetch_with_expectation(timeout: float = EXPECTATION_TIMEOUT_S, delay: float = FETCH_DELAY_S) -> str:
    """Preferred: returns as soon as the response lands, fails loudly after `timeout`."""
    exp = Expectation("Async Test")
    result: list[str] = []

    def completion(response: str) -> None:
        result.append(response)
        exp.fulfill()

    fetch_from_network(completion, delay=delay)
    wait_for([exp], timeout=timeout)
    return result[0]
