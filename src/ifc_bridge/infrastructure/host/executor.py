"""Host execution queue.

Host APIs are main-thread affine and not re-entrant. Every host-touching
call is queued here and executed strictly one at a time, in arrival order,
by a single consumer. Callers receive a one-shot Future per call.

The consumer is either a dedicated thread (``start()``) or the host's own
idle loop calling ``run_pending()``, the way an external-event handler is
raised on a CAD host's UI thread.
"""
from __future__ import annotations

import queue
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from ifc_bridge.shared.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class _WorkItem:
    future: Future[Any]
    fn: Callable[..., Any]
    args: tuple[Any, ...] = field(default_factory=tuple)
    name: str = "host-call"


class HostExecutor:
    """Single-consumer FIFO queue for host calls."""

    def __init__(self, name: str = "host-main") -> None:
        self.name = name
        self._queue: queue.Queue[_WorkItem | None] = queue.Queue()
        self._thread: threading.Thread | None = None
        self._stopping = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def pending(self) -> int:
        """Number of queued calls not yet picked up."""
        return self._queue.qsize()

    def submit(self, fn: Callable[..., T], *args: Any, name: str | None = None) -> Future[T]:
        """Queue a host call.

        Args:
            fn: Callable executed on the host context
            *args: Positional arguments for fn
            name: Label for logging

        Returns:
            Future completed exactly once with fn's outcome
        """
        if self._stopping.is_set():
            raise RuntimeError(f"Executor {self.name} is stopped")
        future: Future[T] = Future()
        self._queue.put(_WorkItem(future, fn, args, name or getattr(fn, "__name__", "host-call")))
        return future

    def start(self) -> None:
        """Run the consumer on a dedicated daemon thread."""
        if self.is_running:
            return
        self._stopping.clear()
        self._thread = threading.Thread(target=self._consume, name=self.name, daemon=True)
        self._thread.start()
        logger.debug("Host executor started", executor=self.name)

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop accepting work and let the consumer drain."""
        self._stopping.set()
        self._queue.put(None)
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Host executor still busy at shutdown", executor=self.name)
            self._thread = None
        logger.debug("Host executor stopped", executor=self.name)

    def run_pending(self, limit: int | None = None) -> int:
        """Execute queued calls on the current thread.

        Intended for hosts that pump the queue from their own main loop.

        Args:
            limit: Maximum number of calls to run

        Returns:
            Number of calls executed
        """
        executed = 0
        while limit is None or executed < limit:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if item is None:
                break
            self._execute(item)
            executed += 1
        return executed

    def _consume(self) -> None:
        while True:
            item = self._queue.get()
            if item is None:
                break
            self._execute(item)

    def _execute(self, item: _WorkItem) -> None:
        if not item.future.set_running_or_notify_cancel():
            return
        try:
            result = item.fn(*item.args)
        except BaseException as e:
            logger.debug("Host call raised", call=item.name, error=str(e))
            item.future.set_exception(e)
        else:
            item.future.set_result(result)
