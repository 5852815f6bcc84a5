"""Tests for the splash image cache slot"""

import io
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
from PIL import Image

from os_interfaces.base import InMemoryConfigStorage
from splash_gate.image_cache import FIRST_LAUNCH_KEY, ImageCacheSync
from splash_gate.models import ConfigDocument


@pytest.fixture
def asset(gate_config, make_image):
  data = make_image("JPEG", (0, 0, 255))
  gate_config.BUNDLED_SPLASH_IMAGE.parent.mkdir(parents=True, exist_ok=True)
  gate_config.BUNDLED_SPLASH_IMAGE.write_bytes(data)
  return data


@pytest.fixture
def served():
  """Mutable server state: what the image endpoint returns"""
  state = {"status": 200, "body": b"", "requests": []}

  def handler(request: httpx.Request) -> httpx.Response:
    state["requests"].append(request)
    return httpx.Response(state["status"], content=state["body"])

  state["transport"] = httpx.MockTransport(handler)
  return state


@pytest.fixture
def storage():
  return InMemoryConfigStorage()


@pytest.fixture
def cache(gate_config, tmp_path, storage, served):
  return ImageCacheSync(
    gate_config,
    cache_dir=tmp_path / "cache",
    storage=storage,
    transport=served["transport"],
  )


DOC = ConfigDocument(background_image_path="/files/splash/bg.jpg", background_image_name="bg.jpg")


class TestSeeding:
  def test_first_launch_copies_asset(self, cache, asset, storage):
    assert cache.seed_if_first_launch() is True
    assert cache.slot_path.read_bytes() == asset
    assert storage.get(FIRST_LAUNCH_KEY) is True

  def test_only_once(self, cache, asset):
    cache.seed_if_first_launch()
    cache.slot_path.unlink()
    assert cache.seed_if_first_launch() is False
    assert not cache.slot_path.exists()

  def test_missing_asset(self, cache, storage, caplog):
    assert cache.seed_if_first_launch() is False
    assert storage.get(FIRST_LAUNCH_KEY) is True
    assert "Failed to read bundled splash image" in caplog.text

  def test_download_wins_over_seed(self, cache, asset, served, make_image):
    downloaded = make_image("JPEG", (255, 0, 0))
    served["body"] = downloaded
    assert cache.sync(DOC, "example.com") is True

    assert cache.seed_if_first_launch() is False
    assert cache.slot_path.read_bytes() == downloaded


class TestSync:
  def test_jpeg_stored_verbatim(self, cache, served, make_image):
    served["body"] = make_image("JPEG", (10, 20, 30))
    assert cache.sync(DOC, "example.com") is True
    assert cache.slot_path.read_bytes() == served["body"]
    assert str(served["requests"][0].url) == "https://example.com/files/splash/bg.jpg"

  def test_png_reencoded_as_jpeg(self, cache, served, make_image):
    served["body"] = make_image("PNG", (10, 20, 30))
    assert cache.sync(DOC, "example.com") is True
    with Image.open(io.BytesIO(cache.slot_path.read_bytes())) as img:
      assert img.format == "JPEG"
      assert img.size == (4, 4)

  def test_unchanged_image_is_idempotent(self, cache, served, make_image):
    served["body"] = make_image("JPEG", (1, 2, 3))
    assert cache.sync(DOC, "example.com") is True
    first = cache.slot_path.read_bytes()

    assert cache.sync(DOC, "example.com") is False
    assert cache.slot_path.read_bytes() == first

  def test_changed_image_overwrites(self, cache, served, make_image):
    served["body"] = make_image("JPEG", (1, 2, 3))
    cache.sync(DOC, "example.com")
    served["body"] = make_image("JPEG", (200, 100, 0))
    assert cache.sync(DOC, "example.com") is True
    assert cache.slot_path.read_bytes() == served["body"]

  def test_decode_failure_is_ignored(self, cache, served):
    served["body"] = b"<html>not an image</html>"
    assert cache.sync(DOC, "example.com") is False
    assert not cache.slot_path.exists()

  def test_http_error_is_ignored(self, cache, served, make_image):
    served["status"] = 404
    served["body"] = make_image("JPEG", (1, 2, 3))
    assert cache.sync(DOC, "example.com") is False
    assert not cache.slot_path.exists()

  def test_no_image_configured(self, cache, served):
    assert cache.sync(ConfigDocument(), "example.com") is False
    assert served["requests"] == []

  def test_unwritable_slot_is_ignored(self, cache, served, make_image, caplog):
    served["body"] = make_image("JPEG", (1, 2, 3))
    with patch("splash_gate.image_cache.os.replace", side_effect=PermissionError("denied")):
      assert cache.sync(DOC, "example.com") is False
    assert "Failed to store splash image" in caplog.text
    assert list(cache.slot_path.parent.iterdir()) == []

  def test_unreadable_slot_is_ignored(self, cache, served, make_image, caplog):
    served["body"] = make_image("JPEG", (1, 2, 3))
    assert cache.sync(DOC, "example.com") is True
    served["body"] = make_image("JPEG", (200, 100, 0))
    with patch.object(Path, "read_bytes", side_effect=PermissionError("denied")):
      assert cache.sync(DOC, "example.com") is False
    assert "Failed to store splash image" in caplog.text

  def test_no_temp_files_left(self, cache, served, make_image):
    served["body"] = make_image("JPEG", (1, 2, 3))
    cache.sync(DOC, "example.com")
    assert [p.name for p in cache.slot_path.parent.iterdir()] == ["splash_bg.jpg"]


class TestDisplayPath:
  def test_prefers_slot(self, cache, asset):
    cache.seed_if_first_launch()
    assert cache.display_path() == cache.slot_path

  def test_falls_back_to_asset(self, cache, asset, gate_config):
    assert cache.display_path() == gate_config.BUNDLED_SPLASH_IMAGE

  def test_nothing_available(self, cache):
    assert cache.display_path() is None
