"""
Splash background image cache

One fixed cache slot holds the image shown on the splash screen. It is
seeded from the bundled asset on first launch and refreshed from the server
in the background. A download always wins over seeding, and every write
goes through a temp file plus os.replace so readers never see a partial
image.
"""

import contextlib
import io
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional

import httpx
from PIL import Image

from os_interfaces.base import ConfigStorage

from .config import GateConfig
from .exceptions import DecodeFailure, PermissionDenied, TransportFailure
from .fetcher import open_client
from .models import ConfigDocument

logger = logging.getLogger(__name__)

FIRST_LAUNCH_KEY = "first_launch_seeded"


class ImageCacheSync:
  """Keeps the splash image slot up to date"""

  def __init__(
    self,
    config: GateConfig,
    cache_dir: Path,
    storage: ConfigStorage,
    transport: Optional[httpx.BaseTransport] = None,
  ):
    """
    Args:
      config: Gate configuration (image names, timeouts)
      cache_dir: Directory holding the cache slot
      storage: Persisted key/value store for the first-launch flag
      transport: Optional httpx transport (tests)
    """
    self._config = config
    self._storage = storage
    self._transport = transport
    self._slot = Path(cache_dir) / config.SPLASH_IMAGE_NAME
    self._asset = Path(config.BUNDLED_SPLASH_IMAGE)
    self._lock = threading.Lock()
    self._downloaded = False

  @property
  def slot_path(self) -> Path:
    return self._slot

  def display_path(self) -> Optional[Path]:
    """Image to show right now: cache slot, else the bundled asset"""
    if self._slot.exists():
      return self._slot
    if self._asset.exists():
      logger.warning("Splash cache empty; using bundled asset")
      return self._asset
    logger.error("No splash image available")
    return None

  def seed_if_first_launch(self) -> bool:
    """Copy the bundled asset into the slot once per install"""
    if self._storage.get(FIRST_LAUNCH_KEY, False):
      return False
    self._storage.set(FIRST_LAUNCH_KEY, True)

    try:
      data = self._asset.read_bytes()
    except OSError as e:
      logger.error(f"Failed to read bundled splash image {self._asset}: {e}")
      return False

    with self._lock:
      if self._downloaded:
        logger.debug("Skipping seed; a downloaded image is already in place")
        return False
      try:
        self._write_atomic(data)
      except (OSError, PermissionDenied) as e:
        logger.error(f"Failed to seed splash image: {e}")
        return False

    logger.info(f"Seeded splash image: {self._slot}")
    return True

  def sync(self, document: ConfigDocument, domain: str) -> bool:
    """
    Download the configured background image into the slot

    Returns:
      True when the slot content changed (the splash should re-render)
    """
    if not document.has_background_image:
      return False
    url = self._config.background_image_url(domain, document.background_image_path)
    if not url:
      return False

    logger.info(f"Downloading splash image: {url} (as {document.background_image_name})")
    try:
      image_bytes = self._as_jpeg(self._download(url))
    except (TransportFailure, DecodeFailure) as e:
      logger.error(f"Splash image sync failed (ignored): {e}")
      return False

    with self._lock:
      self._downloaded = True
      try:
        if self._slot.exists() and self._slot.read_bytes() == image_bytes:
          logger.debug("Splash image unchanged")
          return False
        self._write_atomic(image_bytes)
      except (OSError, PermissionDenied) as e:
        logger.error(f"Failed to store splash image: {e}")
        return False

    logger.info(f"Splash image stored: {self._slot}")
    return True

  def _download(self, url: str) -> bytes:
    try:
      with open_client(self._config, self._transport) as client:
        response = client.get(url)
    except httpx.HTTPError as e:
      raise TransportFailure.from_exception(e, "IMAGE_DOWNLOAD", f"Failed to fetch {url}")
    if response.status_code != 200:
      raise TransportFailure(
        f"Unexpected status {response.status_code} from {url}", name="HTTP_STATUS"
      )
    return response.content

  @staticmethod
  def _as_jpeg(data: bytes) -> bytes:
    """Validate image bytes; JPEG is kept verbatim, other formats re-encoded"""
    try:
      with Image.open(io.BytesIO(data)) as img:
        img.verify()
      with Image.open(io.BytesIO(data)) as img:
        if img.format == "JPEG":
          return data
        buffer = io.BytesIO()
        img.convert("RGB").save(buffer, format="JPEG", quality=100)
        return buffer.getvalue()
    except Exception as e:
      raise DecodeFailure.from_exception(e, "IMAGE_DECODE", "Downloaded file is not an image")

  def _write_atomic(self, data: bytes) -> None:
    self._slot.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
      dir=self._slot.parent, prefix=".splash-", suffix=".tmp"
    )
    try:
      with os.fdopen(fd, "wb") as f:
        f.write(data)
        f.flush()
        os.fsync(f.fileno())
      os.replace(tmp_name, self._slot)
    except PermissionError as e:
      with contextlib.suppress(OSError):
        os.unlink(tmp_name)
      raise PermissionDenied.from_exception(e, "CACHE_NOT_WRITABLE", str(self._slot))
    except BaseException:
      with contextlib.suppress(OSError):
        os.unlink(tmp_name)
      raise
