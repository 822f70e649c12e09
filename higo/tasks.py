"""Background tasks: submitted to a queue and each run on its own thread."""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable, Sequence
from typing import Any

__all__ = ["TaskExecutor", "TaskQueue"]

TaskFunc = Callable[..., Any]


class TaskExecutor:
    """A function, its arguments and a callback run after it finishes."""

    def __init__(
        self,
        fn: TaskFunc,
        params: Sequence[Any] = (),
        callback: Callable[[], Any] | None = None,
    ) -> None:
        self.fn = fn
        self.params = tuple(params)
        self.callback = callback

    def exec(self) -> Any:
        """Call the function with its arguments."""
        return self.fn(*self.params)

    def run(self) -> Any:
        """Call the function, then the callback, even when the function fails."""
        try:
            return self.exec()
        finally:
            if self.callback is not None:
                self.callback()


_STOP = object()


class TaskQueue:
    """Dispatches submitted tasks to worker threads."""

    def __init__(self) -> None:
        self._queue: queue.Queue[Any] = queue.Queue()
        self._dispatcher: threading.Thread | None = None
        self._lock = threading.Lock()

    def submit(
        self, fn: TaskFunc | None, callback: Callable[[], Any] | None, *args: Any
    ) -> TaskExecutor | None:
        """Queue ``fn(*args)``; a missing function is ignored."""
        if fn is None:
            return None
        executor = TaskExecutor(fn, args, callback)
        self._queue.put(executor)
        return executor

    def start(self) -> None:
        """Start dispatching queued tasks; does nothing if already running."""
        with self._lock:
            if self._dispatcher is not None and self._dispatcher.is_alive():
                return
            self._dispatcher = threading.Thread(target=self._dispatch, daemon=True)
            self._dispatcher.start()

    def stop(self) -> None:
        """Stop the dispatcher once the tasks queued before it have been handed out."""
        with self._lock:
            dispatcher = self._dispatcher
            self._dispatcher = None
        if dispatcher is None or not dispatcher.is_alive():
            return
        self._queue.put(_STOP)
        dispatcher.join()

    def join(self) -> None:
        """Block until every submitted task has finished."""
        self._queue.join()

    def _dispatch(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                self._queue.task_done()
                return
            threading.Thread(target=self._work, args=(item,), daemon=True).start()

    def _work(self, executor: TaskExecutor) -> None:
        try:
            executor.run()
        except Exception:  # noqa: BLE001 - a failing task must not stop the others
            pass
        finally:
            self._queue.task_done()

    def __enter__(self) -> TaskQueue:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.join()
        self.stop()