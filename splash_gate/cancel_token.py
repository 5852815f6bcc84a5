"""Cancellation token tied to the splash screen's lifetime."""

from __future__ import annotations

import threading


class CancelToken:
  def __init__(self):
    self._cancelled = threading.Event()

  @property
  def cancelled(self) -> bool:
    return self._cancelled.is_set()

  def cancel(self) -> None:
    self._cancelled.set()
