"""Fixed-size pool of worker threads fed from a task queue."""

from __future__ import annotations

import threading
from collections import deque
from concurrent.futures import Future
from typing import Any, Callable, Deque, Tuple

_Task = Tuple[Future, Callable[..., Any], tuple, dict]


class ThreadPool:
    """Runs submitted callables on ``thread_num`` threads.

    ``thread_type`` labels the threads (for example "IO" or "WORK").
    """

    def __init__(self, thread_num: int, thread_type: str) -> None:
        self.thread_type = thread_type
        self._tasks: Deque[_Task] = deque()
        self._cond = threading.Condition()
        self._stop = False
        self._threads = [
            threading.Thread(target=self._worker, name=f"{thread_type}-{index}", daemon=True)
            for index in range(thread_num)
        ]
        for thread in self._threads:
            thread.start()

    def _worker(self) -> None:
        print(f"create {self.thread_type} thread({threading.get_native_id()}).", flush=True)
        while not self._stop:
            with self._cond:
                self._cond.wait_for(lambda: self._stop or bool(self._tasks))
                if self._stop and not self._tasks:
                    return
                future, fn, args, kwargs = self._tasks.popleft()
            if not future.set_running_or_notify_cancel():
                continue
            try:
                result = fn(*args, **kwargs)
            except BaseException as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """Queue ``fn(*args, **kwargs)`` and return a future for its result."""
        future: Future = Future()
        with self._cond:
            if self._stop:
                raise RuntimeError("enqueue on stopped ThreadPool")
            self._tasks.append((future, fn, args, kwargs))
            self._cond.notify()
        return future

    def stop(self) -> None:
        """Stop the workers and wait for them to exit.

        Tasks still queued when the workers exit are cancelled.
        """
        with self._cond:
            if self._stop:
                return
            self._stop = True
            self._cond.notify_all()
        current = threading.current_thread()
        for thread in self._threads:
            if thread is not current:
                thread.join()
        with self._cond:
            while self._tasks:
                future, _, _, _ = self._tasks.popleft()
                future.cancel()

    def __len__(self) -> int:
        return len(self._threads)