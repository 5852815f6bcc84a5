"""Platform-agnostic pywebview splash bootstrap.

The platform-specific entrypoints (Linux/Android) should import this module and
provide the correct OS-interface implementations.

Contract:
- Inputs: an os-interface bundle `os_impl` and the launch context.
- Behavior: opens the splash window, runs the splash gate, then hands over to
  the main web view (or exits).
"""

from __future__ import annotations

import logging
import os

import webview

from os_interfaces.base import OSImplementations
from os_interfaces.webview_host import WebviewDialogPresenter, WebviewSplashHost
from splash_gate.config import GateConfig
from splash_gate.config import config as default_config
from splash_gate.controller import SplashController
from splash_gate.fetcher import ConfigFetcher
from splash_gate.image_cache import ImageCacheSync
from splash_gate.models import LaunchContext
from splash_gate.scheduling import SerialForeground
from splash_gate.token_registrar import TokenRegistrar

WEBVIEW_DEBUG = os.getenv("SPLASH_GATE_WEBVIEW_DEBUG", "").strip().lower() in {"1", "true"}

logger = logging.getLogger(__name__)


def _configure_logging(config: GateConfig) -> None:
  level = logging.DEBUG if WEBVIEW_DEBUG else getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
  logging.basicConfig(
    level=level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
  )


def build_controller(
  *, os_impl: OSImplementations, config: GateConfig, foreground: SerialForeground
) -> SplashController:
  host = WebviewSplashHost(config, os_impl.open_external_url)
  dialogs = WebviewDialogPresenter(lambda: host.splash_window)
  image_cache = ImageCacheSync(
    config,
    cache_dir=os_impl.cache_dir,
    storage=os_impl.config_storage(),
  )
  return SplashController(
    config,
    host=host,
    dialogs=dialogs,
    network=os_impl.network_monitor(),
    token_provider=os_impl.token_provider(),
    fetcher=ConfigFetcher(config),
    image_cache=image_cache,
    registrar=TokenRegistrar(config),
    foreground=foreground,
  )


def run_splash_app(
  *,
  os_impl: OSImplementations,
  context: LaunchContext,
  config: GateConfig = default_config,
) -> None:
  _configure_logging(config)
  logger.info(f"Starting {config.APP_NAME} {config.APP_VERSION}...")

  foreground = SerialForeground()
  controller = build_controller(os_impl=os_impl, config=config, foreground=foreground)

  logger.info("Starting pywebview...")
  webview.start(func=controller.start, args=(context,), debug=WEBVIEW_DEBUG)

  logger.info("Windows closed. Exiting...")
  controller.close()
  foreground.stop()
  os._exit(0)
