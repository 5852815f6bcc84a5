"""
Configuration module for the splash gate
Constants are baked at build time; every value can be overridden from the
environment (or a .env file) with the SPLASH_GATE_ prefix.
"""

import logging
import os
from pathlib import Path
from urllib.parse import urlparse

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()

ENV_PREFIX = "SPLASH_GATE_"


def _env(name: str, default: str) -> str:
  return os.getenv(f"{ENV_PREFIX}{name}", default)


def _env_int(name: str, default: int) -> int:
  raw = os.getenv(f"{ENV_PREFIX}{name}")
  if raw is None or not raw.strip():
    return default
  try:
    return int(raw)
  except ValueError:
    logger.warning(f"Ignoring non-integer {ENV_PREFIX}{name}={raw!r}")
    return default


class GateConfig:
  """Splash gate settings"""

  # Website and server
  WEBSITE_URL = _env("WEBSITE_URL", "https://codejaka01.cafe24.com/mb_test/")
  APP_INFO_PATH = _env("APP_INFO_PATH", "modules/appmgmt/libs/appInfo.php")
  DEVICE_TOKEN_PATH = _env("DEVICE_TOKEN_PATH", "modules/appmgmt/libs/deviceToken.php")

  # Splash screen
  DEFAULT_SPLASH_DELAY_MS = _env_int("DEFAULT_SPLASH_DELAY_MS", 3000)
  PUSH_SPLASH_DELAY_MS = _env_int("PUSH_SPLASH_DELAY_MS", 500)
  SPLASH_IMAGE_NAME = _env("SPLASH_IMAGE_NAME", "splash_bg.jpg")
  BUNDLED_SPLASH_IMAGE = Path(
    _env("BUNDLED_SPLASH_IMAGE", str(Path(__file__).parent / "assets" / "loading_image.jpg"))
  )

  # App version and store
  APP_NAME = _env("APP_NAME", "splash-gate")
  APP_VERSION = _env("APP_VERSION", "1.4.1")
  APP_PACKAGE_NAME = _env("APP_PACKAGE_NAME", "hello.mobile")
  STORE_URL_TEMPLATE = _env("STORE_URL_TEMPLATE", "market://details?id={package}")
  APPLE_STORE_URL_TEMPLATE = "https://apps.apple.com/app/id{app_id}"

  # Network
  HTTP_CONNECT_TIMEOUT_MS = _env_int("HTTP_CONNECT_TIMEOUT_MS", 10000)
  HTTP_READ_TIMEOUT_MS = _env_int("HTTP_READ_TIMEOUT_MS", 10000)
  HTTP_USER_AGENT = _env("HTTP_USER_AGENT", "Android-App")

  # Dialog copy
  NOTICE_TITLE = _env("NOTICE_TITLE", "Notice")
  APP_DISABLED_MESSAGE = _env(
    "APP_DISABLED_MESSAGE", "This app has been disabled.|@|The app will now close."
  )
  NO_CONNECTION_MESSAGE = _env(
    "NO_CONNECTION_MESSAGE",
    "No internet connection.|@|Check your settings and try again.",
  )
  LABEL_UPDATE = _env("LABEL_UPDATE", "Update")
  LABEL_KEEP_USING = _env("LABEL_KEEP_USING", "Continue using")
  LABEL_CONTINUE = _env("LABEL_CONTINUE", "Continue")
  LABEL_EXIT = _env("LABEL_EXIT", "Exit")

  # Logging
  LOG_LEVEL = _env("LOG_LEVEL", "INFO")

  def website_domain(self) -> str:
    """Host part of WEBSITE_URL, or "" when it cannot be parsed"""
    try:
      return urlparse(self.WEBSITE_URL).hostname or ""
    except ValueError:
      return ""

  def app_info_url(self, domain: str) -> str:
    return f"https://{domain}/{self.APP_INFO_PATH.lstrip('/')}" if domain else ""

  def device_token_url(self, domain: str) -> str:
    return f"https://{domain}/{self.DEVICE_TOKEN_PATH.lstrip('/')}" if domain else ""

  def background_image_url(self, domain: str, image_path: str) -> str:
    path = image_path.strip()
    if not domain or not path or path == "-99":
      return ""
    return f"https://{domain}/{path.lstrip('/')}"

  def store_url(self, store_app_id: str = "-99") -> str:
    """Store page for this app; an App Store id from the server wins"""
    if store_app_id and store_app_id != "-99":
      return self.APPLE_STORE_URL_TEMPLATE.format(app_id=store_app_id)
    return self.STORE_URL_TEMPLATE.format(package=self.APP_PACKAGE_NAME)

  @property
  def connect_timeout(self) -> float:
    return self.HTTP_CONNECT_TIMEOUT_MS / 1000.0

  @property
  def read_timeout(self) -> float:
    return self.HTTP_READ_TIMEOUT_MS / 1000.0


config = GateConfig()
