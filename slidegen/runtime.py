"""A private asyncio loop running on one background thread.

Streamlit executes each rerun on its own thread. Hosting the pipeline on a
single long-lived loop keeps every document mutation on one thread, so the
core can rely on cooperative scheduling instead of locks.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import Future
from typing import Any, Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")

LOGGER = logging.getLogger(__name__)


class BackgroundLoop:
    """Own an event loop thread and marshal work onto it."""

    def __init__(self, name: str = "slidegen-loop") -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive() and not self._loop.is_closed()

    def submit(self, coro: Awaitable[T]) -> "Future[T]":
        """Schedule ``coro`` on the loop and return a thread-safe future."""

        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def run(self, coro: Awaitable[T], timeout: Optional[float] = None) -> T:
        """Run ``coro`` on the loop and block the calling thread for its result."""

        return self.submit(coro).result(timeout)

    def call(self, func: Callable[..., T], *args: Any, timeout: Optional[float] = None) -> T:
        """Run a synchronous ``func`` on the loop thread and return its result."""

        async def invoke() -> T:
            return func(*args)

        return self.run(invoke(), timeout)

    def stop(self, timeout: float = 5.0) -> None:
        if self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout)
        if not self._thread.is_alive():
            self._loop.close()

    def _run(self) -> None:
        asyncio.set_event_loop(self._loop)
        LOGGER.debug("Background loop started")
        self._loop.run_forever()
