"""Push registration token upload (fire-and-forget)."""

import logging
from typing import Optional

import httpx

from .config import GateConfig
from .fetcher import open_client

logger = logging.getLogger(__name__)


class TokenRegistrar:
  def __init__(self, config: GateConfig, transport: Optional[httpx.BaseTransport] = None):
    self._config = config
    self._transport = transport

  def register(self, domain: str, token: str) -> bool:
    """POST the token; never raises, returns whether the server accepted it"""
    url = self._config.device_token_url(domain)
    if not url or not token:
      logger.debug("Skipping token registration (no domain or token)")
      return False

    logger.info(f"Sending device token: {url}")
    try:
      with open_client(self._config, self._transport) as client:
        response = client.post(
          url,
          content=f"device_token={token}".encode(),
          headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
    except Exception as e:
      logger.warning(f"Device token upload failed (ignored): {e}")
      return False

    if response.status_code != 200:
      logger.warning(f"Device token upload rejected: {response.status_code}")
      return False

    logger.info("Device token sent")
    return True
