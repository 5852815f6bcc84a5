"""Tests for the foreground loop and background worker"""

import threading

import pytest

from splash_gate.cancel_token import CancelToken
from splash_gate.scheduling import BackgroundWorker, SerialForeground


@pytest.fixture
def foreground():
  fg = SerialForeground()
  yield fg
  fg.stop()


def run_on(foreground, fn):
  done = threading.Event()

  def wrapped():
    fn()
    done.set()

  foreground.post(wrapped)
  assert done.wait(2.0)


class TestSerialForeground:
  def test_runs_in_order_on_one_thread(self, foreground):
    seen = []
    for i in range(5):
      foreground.post(lambda i=i: seen.append((i, threading.current_thread().name)))
    run_on(foreground, lambda: None)
    assert [i for i, _ in seen] == [0, 1, 2, 3, 4]
    assert {name for _, name in seen} == {"splash-foreground"}

  def test_failing_callback_does_not_stop_loop(self, foreground):
    foreground.post(lambda: 1 / 0)
    ran = []
    run_on(foreground, lambda: ran.append(True))
    assert ran == [True]

  def test_post_delayed(self, foreground):
    done = threading.Event()
    foreground.post_delayed(0.05, done.set)
    assert done.wait(2.0)

  def test_stop_cancels_timers(self):
    fg = SerialForeground()
    fired = threading.Event()
    fg.post_delayed(0.2, fired.set)
    fg.stop()
    assert not fired.wait(0.4)


class TestBackgroundWorker:
  def test_result_posted_to_foreground(self, foreground):
    worker = BackgroundWorker(foreground, CancelToken())
    received = []
    done = threading.Event()

    def on_done(value):
      received.append((value, threading.current_thread().name))
      done.set()

    worker.submit(lambda: 42, on_done=on_done)
    assert done.wait(2.0)
    assert received == [(42, "splash-foreground")]
    worker.shutdown()

  def test_error_posted_to_foreground(self, foreground):
    worker = BackgroundWorker(foreground, CancelToken())
    errors = []
    done = threading.Event()

    def boom():
      raise ValueError("bad")

    def on_error(e):
      errors.append(e)
      done.set()

    worker.submit(boom, on_error=on_error)
    assert done.wait(2.0)
    assert isinstance(errors[0], ValueError)
    worker.shutdown()

  def test_runs_in_submission_order(self, foreground):
    worker = BackgroundWorker(foreground, CancelToken())
    order = []
    futures = [worker.submit(lambda i=i: order.append(i)) for i in range(5)]
    for future in futures:
      future.result(timeout=2.0)
    assert order == [0, 1, 2, 3, 4]
    worker.shutdown()

  def test_cancelled_results_are_dropped(self, foreground):
    token = CancelToken()
    worker = BackgroundWorker(foreground, token)
    release = threading.Event()
    received = []

    future = worker.submit(lambda: release.wait(2.0), on_done=received.append)
    token.cancel()
    release.set()
    future.result(timeout=2.0)
    run_on(foreground, lambda: None)

    assert received == []
    assert worker.submit(lambda: 1) is None

  def test_submit_after_shutdown(self, foreground):
    worker = BackgroundWorker(foreground, CancelToken())
    worker.shutdown()
    assert worker.submit(lambda: 1) is None
