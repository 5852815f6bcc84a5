"""
Splash flow orchestration

Keeps the fetch -> parse -> decide -> act sequence in one place, decoupled
from the platform through the ports in os_interfaces.base.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from os_interfaces.base import DialogPresenter, NetworkMonitor, SplashHost, TokenProvider

from .cancel_token import CancelToken
from .config import GateConfig
from .decision import Decision, DecisionEngine, SplashState
from .exceptions import GateError
from .fetcher import ConfigFetcher
from .image_cache import ImageCacheSync
from .models import ConfigDocument, DialogResult, LaunchContext
from .parser import parse_config
from .scheduling import BackgroundWorker, Foreground
from .token_registrar import TokenRegistrar

logger = logging.getLogger(__name__)


class SplashController:
  """Drives one launch from splash start to proceed/exit"""

  def __init__(
    self,
    config: GateConfig,
    host: SplashHost,
    dialogs: DialogPresenter,
    network: NetworkMonitor,
    token_provider: TokenProvider,
    fetcher: ConfigFetcher,
    image_cache: ImageCacheSync,
    registrar: TokenRegistrar,
    foreground: Foreground,
    engine: Optional[DecisionEngine] = None,
    clock: Callable[[], float] = time.monotonic,
  ):
    self._config = config
    self._host = host
    self._dialogs = dialogs
    self._network = network
    self._token_provider = token_provider
    self._fetcher = fetcher
    self._image_cache = image_cache
    self._registrar = registrar
    self._foreground = foreground
    self._engine = engine or DecisionEngine(config)
    self._clock = clock
    self._cancel_token = CancelToken()
    self._worker = BackgroundWorker(foreground, self._cancel_token)
    self._started_at: Optional[float] = None
    self._context = LaunchContext()
    self._token: Optional[str] = None
    self._domain = ""
    self._splash_visible = False

  @property
  def state(self) -> SplashState:
    return self._engine.state

  @property
  def splash_visible(self) -> bool:
    return self._splash_visible

  def start(self, context: LaunchContext) -> None:
    """Begin the splash flow; only the first call per launch has effect"""
    if self._started_at is not None:
      logger.warning("Splash flow already started; ignoring")
      return
    self._started_at = self._clock()
    self._context = context
    self._token = context.registration_token
    self._splash_visible = True

    # Seeding goes first on the worker queue, before any network activity
    self._worker.submit(self._image_cache.seed_if_first_launch)
    self._host.show_splash_image(self._image_cache.display_path())

    if not context.network_available or not self._network.is_available():
      logger.warning("No network connection at launch")
      self._apply(self._engine.offline())
      return

    self._domain = self._config.website_domain()
    if not self._domain:
      logger.error("Could not determine website domain")
      self._engine.begin()
      self._apply(self._engine.decide(None, self._context))
      return

    self._engine.begin()
    self._worker.submit(
      self._load_document,
      on_done=self._on_document,
      on_error=self._on_load_error,
    )

  def close(self) -> None:
    """Tie-in for the owning screen's destruction; drops pending callbacks"""
    self._cancel_token.cancel()
    self._worker.shutdown()
    self._splash_visible = False

  # ---- background ----
  def _load_document(self) -> Optional[ConfigDocument]:
    if self._token is None:
      try:
        self._token = self._token_provider.get_token()
      except Exception as e:
        logger.warning(f"Token provider failed; continuing without token: {e}")
        self._token = None

    try:
      raw = self._fetcher.fetch_raw_config(self._domain, self._token)
      return parse_config(raw)
    except GateError as e:
      logger.warning(f"Config unavailable ({e.source}/{e.name}); using defaults: {e}")
      return None

  # ---- foreground ----
  def _on_load_error(self, error: Exception) -> None:
    logger.error(f"Config sync failed unexpectedly: {error}")
    self._on_document(None)

  def _on_document(self, document: Optional[ConfigDocument]) -> None:
    if document is not None:
      logger.info(
        f"Config received: delay={document.delay_ms}, usable={document.app_usable}"
      )
      if self._token:
        self._worker.submit(lambda: self._registrar.register(self._domain, self._token))
      if document.app_usable and document.has_background_image:
        self._worker.submit(
          lambda: self._image_cache.sync(document, self._domain),
          on_done=self._on_image_synced,
        )
    else:
      logger.warning("Proceeding without remote config")

    self._apply(self._engine.decide(document, self._context))

  def _on_image_synced(self, changed: bool) -> None:
    if changed and self._splash_visible:
      self._host.show_splash_image(self._image_cache.display_path())

  def _on_dialog_result(self, result: DialogResult) -> None:
    self._apply(self._engine.resolve(result))

  def _present(self, decision: Decision, on_result: Callable[[DialogResult], None]) -> None:
    def handle(result: DialogResult) -> None:
      if not self._cancel_token.cancelled:
        on_result(result)

    def deliver(result: DialogResult) -> None:
      if not self._cancel_token.cancelled:
        self._foreground.post(lambda: handle(result))

    self._dialogs.present(decision.dialog, deliver)

  def _apply(self, decision: Decision) -> None:
    logger.info(f"Splash decision: {decision.state.name}")
    match decision.state:
      case SplashState.PROCEEDING:
        self._navigate(decision.delay_ms)
      case SplashState.UPDATE_PROMPT | SplashState.NOTICE_PROMPT:
        self._present(decision, self._on_dialog_result)
      case SplashState.BLOCKED:
        if decision.store_url:
          self._host.open_store(decision.store_url)
        if decision.dialog is not None:
          self._present(decision, lambda _result: self._exit())
        else:
          self._exit()
      case SplashState.OFFLINE:
        self._present(decision, lambda _result: self._exit())
      case _:
        logger.error(f"Unexpected decision state: {decision.state}")

  def _navigate(self, delay_ms: Optional[int]) -> None:
    """Start the main view now; drop the overlay once the minimum time passed"""
    delay_ms = self._config.DEFAULT_SPLASH_DELAY_MS if delay_ms is None else delay_ms
    now = self._clock()
    started_at = now if self._started_at is None else self._started_at
    elapsed_ms = (now - started_at) * 1000
    remaining_s = max(0.0, (delay_ms - elapsed_ms) / 1000.0)

    self._host.proceed(self._context.deep_link, self._token)
    logger.info(f"Main view started; removing splash in {remaining_s:.2f}s")
    self._foreground.post_delayed(remaining_s, self._remove_splash)

  def _remove_splash(self) -> None:
    if self._cancel_token.cancelled or not self._splash_visible:
      return
    self._splash_visible = False
    self._host.remove_splash()

  def _exit(self) -> None:
    self._splash_visible = False
    self._host.exit_app()
