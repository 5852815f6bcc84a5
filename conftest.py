"""Shared pytest fixtures"""

import io

import pytest
from PIL import Image

from splash_gate.config import GateConfig


@pytest.fixture
def gate_config(tmp_path):
  """GateConfig with deterministic values regardless of the environment"""
  cfg = GateConfig()
  cfg.WEBSITE_URL = "https://example.com/mb/"
  cfg.APP_INFO_PATH = "modules/appmgmt/libs/appInfo.php"
  cfg.DEVICE_TOKEN_PATH = "modules/appmgmt/libs/deviceToken.php"
  cfg.DEFAULT_SPLASH_DELAY_MS = 3000
  cfg.PUSH_SPLASH_DELAY_MS = 500
  cfg.SPLASH_IMAGE_NAME = "splash_bg.jpg"
  cfg.BUNDLED_SPLASH_IMAGE = tmp_path / "assets" / "loading_image.jpg"
  cfg.APP_NAME = "splash-gate-test"
  cfg.APP_VERSION = "1.4.1"
  cfg.APP_PACKAGE_NAME = "hello.mobile"
  cfg.STORE_URL_TEMPLATE = "market://details?id={package}"
  cfg.HTTP_CONNECT_TIMEOUT_MS = 10000
  cfg.HTTP_READ_TIMEOUT_MS = 10000
  cfg.HTTP_USER_AGENT = "Android-App"
  return cfg


def _image_bytes(fmt: str, color: tuple, size: tuple = (4, 4)) -> bytes:
  buffer = io.BytesIO()
  Image.new("RGB", size, color).save(buffer, format=fmt)
  return buffer.getvalue()


@pytest.fixture
def make_image():
  """Factory for small in-memory images: make_image("PNG", (255, 0, 0))"""
  return _image_bytes
