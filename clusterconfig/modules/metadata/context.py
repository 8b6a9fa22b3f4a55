"""
Home context handoff.

Shared metadata is owned by one event loop. Work that touches it is handed
to that loop and the caller awaits the result, whichever loop or thread the
caller itself runs on.
"""

import asyncio
import concurrent.futures
import logging
import threading
import weakref
from typing import Callable, Optional, Set, TypeVar

from ..errors import OperationInterrupted

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HomeContext:
    """
    Dedicated thread running the event loop that owns shared metadata.

    Usage:
        home = HomeContext()
        home.start()
        view = InMemoryMetadataView(home.loop)
        ...
        home.stop()
    """

    def __init__(self, name: str = "clusterconfig-home"):
        self.name = name
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._ready = threading.Event()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            raise RuntimeError("Home context is not running")
        return self._loop

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> asyncio.AbstractEventLoop:
        """Start the home thread and return its loop once it is running."""
        if self.running:
            return self.loop

        self._loop = asyncio.new_event_loop()
        self._ready.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        self._ready.wait()
        logger.info(f"Home context {self.name} started")
        return self._loop

    def stop(self, timeout: float = 5.0) -> None:
        """
        Stop the loop and join the home thread.

        Handoffs still queued on the loop fail with OperationInterrupted.
        """
        if self._loop is None:
            return

        if self.running:
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning(f"Home context {self.name} did not stop within {timeout}s")
                return

        _handoffs.close(self._loop)
        self._loop.close()
        self._loop = None
        self._thread = None
        logger.info(f"Home context {self.name} stopped")

    def _run(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.call_soon(self._ready.set)
        self._loop.run_forever()

    def __enter__(self) -> "HomeContext":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()


def _check_interruptor(interruptor: Optional[threading.Event]) -> None:
    if interruptor is not None and interruptor.is_set():
        raise OperationInterrupted("Operation interrupted before reaching the home context")


class _PendingHandoffs:
    """
    Handoffs queued on each home loop and not yet picked up.

    Once a loop is closed here, queued handoffs fail with OperationInterrupted
    and new ones are refused, so no caller waits on a loop that will never
    run again.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._pending: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, Set[concurrent.futures.Future]]" = (
            weakref.WeakKeyDictionary()
        )
        self._closed: "weakref.WeakSet[asyncio.AbstractEventLoop]" = weakref.WeakSet()

    def submit(
        self,
        loop: asyncio.AbstractEventLoop,
        callback: Callable[[], None],
        future: concurrent.futures.Future,
    ) -> None:
        with self._lock:
            if loop in self._closed:
                raise OperationInterrupted("Home context has stopped")
            try:
                loop.call_soon_threadsafe(callback)
            except RuntimeError as e:
                raise OperationInterrupted("Home context has stopped") from e
            self._pending.setdefault(loop, set()).add(future)
        future.add_done_callback(lambda done: self._discard(loop, done))

    def close(self, loop: asyncio.AbstractEventLoop) -> None:
        """Refuse new handoffs to ``loop`` and fail the ones still queued."""
        with self._lock:
            self._closed.add(loop)
            pending = self._pending.pop(loop, set())

        for future in pending:
            if future.set_running_or_notify_cancel():
                future.set_exception(
                    OperationInterrupted("Home context stopped before the operation ran")
                )
        if pending:
            logger.warning(f"Failed {len(pending)} handoff(s) queued on a stopped home context")

    def _discard(self, loop: asyncio.AbstractEventLoop, future: concurrent.futures.Future) -> None:
        with self._lock:
            pending = self._pending.get(loop)
            if pending is not None:
                pending.discard(future)


_handoffs = _PendingHandoffs()


async def run_on_home(
    loop: asyncio.AbstractEventLoop,
    fn: Callable[[], T],
    interruptor: Optional[threading.Event] = None,
) -> T:
    """
    Run ``fn`` on ``loop`` and return its result.

    Args:
        loop: Home loop that owns the state ``fn`` touches
        fn: Synchronous callable, runs to completion on the home loop
        interruptor: Optional event; once set, ``fn`` is not started

    Returns:
        Whatever ``fn`` returns

    Raises:
        OperationInterrupted: If the interruptor fired, or the home context
            stopped, before ``fn`` started
    """
    _check_interruptor(interruptor)

    if asyncio.get_running_loop() is loop:
        return fn()

    future: concurrent.futures.Future = concurrent.futures.Future()

    def on_home() -> None:
        # False when the caller was cancelled while this call was queued
        if not future.set_running_or_notify_cancel():
            return
        try:
            _check_interruptor(interruptor)
            future.set_result(fn())
        except Exception as e:
            future.set_exception(e)

    _handoffs.submit(loop, on_home, future)
    return await asyncio.wrap_future(future)
