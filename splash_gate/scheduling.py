"""
Foreground loop and background worker for the splash flow

The decision flow runs on one foreground thread; network and file I/O run
on a single background worker whose results are posted back to the
foreground. Nothing posted after cancellation is executed.
"""

from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional, Protocol, TypeVar

from .cancel_token import CancelToken

logger = logging.getLogger(__name__)

T = TypeVar("T")

_STOP = object()


class Foreground(Protocol):
  """Where UI-visible effects run"""

  def post(self, fn: Callable[[], Any]) -> None: ...

  def post_delayed(self, delay_s: float, fn: Callable[[], Any]) -> None: ...


class SerialForeground:
  """Runs posted callables one at a time on a dedicated thread"""

  def __init__(self, name: str = "splash-foreground"):
    self._queue: queue.Queue = queue.Queue()
    self._timers: list[threading.Timer] = []
    self._lock = threading.Lock()
    self._thread = threading.Thread(target=self._run, name=name, daemon=True)
    self._thread.start()

  def _run(self) -> None:
    while True:
      fn = self._queue.get()
      if fn is _STOP:
        return
      try:
        fn()
      except Exception:
        logger.exception("Foreground callback failed")

  def post(self, fn: Callable[[], Any]) -> None:
    self._queue.put(fn)

  def post_delayed(self, delay_s: float, fn: Callable[[], Any]) -> None:
    if delay_s <= 0:
      self.post(fn)
      return
    timer = threading.Timer(delay_s, self.post, args=(fn,))
    timer.daemon = True
    with self._lock:
      self._timers = [t for t in self._timers if t.is_alive()]
      self._timers.append(timer)
    timer.start()

  def stop(self) -> None:
    with self._lock:
      for timer in self._timers:
        timer.cancel()
      self._timers.clear()
    self._queue.put(_STOP)


class BackgroundWorker:
  """Single-worker queue for I/O; operations run in submission order"""

  def __init__(self, foreground: Foreground, cancel_token: CancelToken):
    self._foreground = foreground
    self._cancel_token = cancel_token
    self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="splash-io")

  def submit(
    self,
    fn: Callable[[], T],
    on_done: Optional[Callable[[T], Any]] = None,
    on_error: Optional[Callable[[Exception], Any]] = None,
  ) -> Optional[Future]:
    """
    Run fn in the background and post its outcome to the foreground

    Args:
      fn: Work to run on the worker thread
      on_done: Foreground callback receiving the result
      on_error: Foreground callback receiving the exception; without it,
        errors are logged

    Returns:
      The underlying future, or None once cancelled
    """
    if self._cancel_token.cancelled:
      return None

    def run():
      try:
        result = fn()
      except Exception as e:
        if on_error is None:
          logger.warning(f"Background task failed: {e}")
        else:
          self._post(lambda error=e: on_error(error))
        return None
      if on_done is not None:
        self._post(lambda: on_done(result))
      return result

    try:
      return self._executor.submit(run)
    except RuntimeError:
      # Executor already shut down
      return None

  def _post(self, fn: Callable[[], Any]) -> None:
    if self._cancel_token.cancelled:
      return

    def guarded():
      if not self._cancel_token.cancelled:
        fn()

    self._foreground.post(guarded)

  def shutdown(self) -> None:
    self._executor.shutdown(wait=False, cancel_futures=True)
