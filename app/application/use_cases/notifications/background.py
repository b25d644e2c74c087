"""Run orchestrator entry points without blocking the caller."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from app.domain.entities import DispatchReport

logger = logging.getLogger(__name__)

ErrorSink = Callable[[str, "DispatchReport | None", "BaseException | None"], None]


def log_error_sink(
    name: str, report: DispatchReport | None, error: BaseException | None
) -> None:
    """Default sink: log aborted dispatches and unexpected exceptions."""

    if error is not None:
        logger.error("Background notification %s failed: %s", name, error)
    elif report is not None and report.aborted:
        logger.warning("Background notification %s aborted: %s", name, report.error)


class BackgroundDispatcher:
    """Bounded pool for fire-and-forget notification dispatches.

    Callers get a :class:`~concurrent.futures.Future` back immediately. When
    the work finishes, its report or exception is handed to ``error_sink`` so
    failures are observable even though nobody awaits the result.
    """

    def __init__(self, *, max_workers: int = 2, error_sink: ErrorSink = log_error_sink) -> None:
        self._max_workers = max_workers
        self._error_sink = error_sink
        self._executor: ThreadPoolExecutor | None = None
        self._lock = threading.Lock()
        self._shutdown = False

    @property
    def running(self) -> bool:
        with self._lock:
            return self._executor is not None and not self._shutdown

    def start(self) -> None:
        with self._lock:
            self._shutdown = False
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers, thread_name_prefix="notify-background"
                )
                logger.debug("Started background dispatcher with %d worker(s)", self._max_workers)

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        """Schedule ``fn(*args, **kwargs)``.

        Raises:
            RuntimeError: the dispatcher has been shut down.
        """

        with self._lock:
            if self._shutdown:
                raise RuntimeError("Background dispatcher has been shut down")
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers, thread_name_prefix="notify-background"
                )
            future = self._executor.submit(fn, *args, **kwargs)

        name = getattr(fn, "__name__", repr(fn))
        future.add_done_callback(lambda done: self._report(name, done))
        return future

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work; safe to call more than once."""

        with self._lock:
            executor, self._executor = self._executor, None
            self._shutdown = True
        if executor is not None:
            executor.shutdown(wait=wait)
            logger.debug("Background dispatcher stopped")

    def _report(self, name: str, future: Future) -> None:
        if future.cancelled():
            return

        error = future.exception()
        result = None if error is not None else future.result()
        report = result if isinstance(result, DispatchReport) else None
        try:
            self._error_sink(name, report, error)
        except Exception:  # noqa: BLE001 - a broken sink must not kill the worker
            logger.exception("Notification error sink failed for %s", name)


__all__ = ["BackgroundDispatcher", "ErrorSink", "log_error_sink"]
