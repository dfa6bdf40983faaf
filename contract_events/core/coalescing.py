"""Collapse duplicate in-flight requests onto one execution.

Callers sharing an idempotency key while the first call is still running
wait for, and receive, that call's result (or its exception). The entry is
removed as soon as the call finishes, whether it succeeded or failed, so a
later call with the same key runs again.
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestCoalescer:
    """Process-wide map of idempotency key -> in-flight result handle."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._in_flight: dict[str, Future[Any]] = {}

    def in_flight(self, key: str) -> bool:
        with self._lock:
            return key in self._in_flight

    def run(self, key: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run ``fn`` for ``key`` unless a call for ``key`` is already running."""
        with self._lock:
            future = self._in_flight.get(key)
            owner = future is None
            if future is None:
                future = Future()
                self._in_flight[key] = future

        if not owner:
            logger.info("Joining in-flight request %s", key)
            return future.result()  # type: ignore[no-any-return]

        try:
            result = fn(*args, **kwargs)
        except BaseException as exc:
            future.set_exception(exc)
            raise
        else:
            future.set_result(result)
            return result
        finally:
            with self._lock:
                self._in_flight.pop(key, None)


request_coalescer = RequestCoalescer()
