"""pywebview implementations of the splash host and dialogs.

Shared by the Linux and Android builds; platform differences (store links,
storage, connectivity) come in through the OSImplementations bundle.
"""

from __future__ import annotations

import base64
import logging
import threading
from html import escape
from pathlib import Path
from typing import Callable, Optional

import webview

from splash_gate.config import GateConfig
from splash_gate.models import DialogRequest, DialogResult

from .base import DialogPresenter, SplashHost

logger = logging.getLogger(__name__)

_SPLASH_HTML = """<!DOCTYPE html>
<html><head><meta charset="utf-8"><style>
html, body {{ margin: 0; height: 100%; background: #000; }}
img {{ width: 100%; height: 100%; object-fit: cover; }}
</style></head><body>{content}</body></html>"""


def render_splash_html(image_path: Optional[Path]) -> str:
  """Inline the image as a data URI so no file:// access is needed"""
  if image_path is None:
    return _SPLASH_HTML.format(content="")
  try:
    encoded = base64.b64encode(Path(image_path).read_bytes()).decode("ascii")
  except OSError as e:
    logger.error(f"Failed to read splash image {image_path}: {e}")
    return _SPLASH_HTML.format(content="")
  src = escape(f"data:image/jpeg;base64,{encoded}")
  return _SPLASH_HTML.format(content=f'<img src="{src}" alt="">')


class HostBridge:
  """Exposed to the page as window.pywebview.api"""

  def __init__(self):
    self.device_token: Optional[str] = None

  def get_device_token(self) -> Optional[str]:
    return self.device_token


class WebviewSplashHost(SplashHost):
  """Splash window on top; the main window loads hidden behind it"""

  def __init__(self, config: GateConfig, open_external_url: Callable[[str], None]):
    self._config = config
    self._open_external_url = open_external_url
    self._bridge = HostBridge()
    self._main_window = None
    self.splash_window = webview.create_window(
      title=config.APP_NAME,
      html=render_splash_html(None),
      fullscreen=False,
      frameless=True,
    )

  def show_splash_image(self, image_path: Optional[Path]) -> None:
    self.splash_window.load_html(render_splash_html(image_path))

  def proceed(self, deep_link: Optional[str], token: Optional[str]) -> None:
    if self._main_window is not None:
      logger.warning("Main window already created")
      return
    self._bridge.device_token = token
    url = deep_link or self._config.WEBSITE_URL
    logger.info(f"Loading main view: {url}")
    self._main_window = webview.create_window(
      title=self._config.APP_NAME,
      url=url,
      hidden=True,
      js_api=self._bridge,
    )

  def remove_splash(self) -> None:
    if self._main_window is not None:
      self._main_window.show()
    self.splash_window.destroy()

  def open_store(self, url: str) -> None:
    logger.info(f"Opening store page: {url}")
    self._open_external_url(url)

  def exit_app(self) -> None:
    logger.info("Exiting app")
    for window in list(webview.windows):
      window.destroy()


class WebviewDialogPresenter(DialogPresenter):
  """Confirmation dialogs on the splash window.

  pywebview offers OK/Cancel only: OK maps to the first button, Cancel to
  the second one, or to a dismissal when there is a single button.
  """

  def __init__(self, window_getter: Callable[[], object]):
    self._window_getter = window_getter

  def present(
    self, request: DialogRequest, on_result: Callable[[DialogResult], None]
  ) -> None:
    def run():
      try:
        confirmed = self._window_getter().create_confirmation_dialog(
          request.title, request.body
        )
      except Exception:
        logger.exception("Dialog failed; treating as dismissed")
        confirmed = False
      on_result(self.map_result(request, bool(confirmed)))

    threading.Thread(target=run, name="splash-dialog", daemon=True).start()

  @staticmethod
  def map_result(request: DialogRequest, confirmed: bool) -> DialogResult:
    ids = request.button_ids()
    if confirmed and ids:
      return DialogResult(ids[0])
    if not confirmed and len(ids) > 1:
      return DialogResult(ids[1])
    return DialogResult(None)
