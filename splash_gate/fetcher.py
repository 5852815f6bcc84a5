"""
HTTP access to the app management endpoints
"""

import logging
from typing import Optional

import httpx

from .config import GateConfig
from .exceptions import TransportFailure

logger = logging.getLogger(__name__)


def build_timeout(config: GateConfig) -> httpx.Timeout:
  """Connect/read limits from config; write and pool share the read limit"""
  return httpx.Timeout(
    connect=config.connect_timeout,
    read=config.read_timeout,
    write=config.read_timeout,
    pool=config.connect_timeout,
  )


def open_client(
  config: GateConfig, transport: Optional[httpx.BaseTransport] = None
) -> httpx.Client:
  return httpx.Client(
    headers={"User-Agent": config.HTTP_USER_AGENT},
    timeout=build_timeout(config),
    transport=transport,
    follow_redirects=True,
  )


class ConfigFetcher:
  """Fetches the raw appInfo document"""

  def __init__(self, config: GateConfig, transport: Optional[httpx.BaseTransport] = None):
    self._config = config
    self._transport = transport

  def fetch_raw_config(self, domain: str, token: Optional[str] = None) -> bytes:
    """
    GET the appInfo document for a domain

    Args:
      domain: Website host (e.g. example.com)
      token: Push registration token, if any; only logged

    Returns:
      Raw response body on HTTP 200

    Raises:
      TransportFailure: Timeout, connection error or non-200 status
    """
    url = self._config.app_info_url(domain)
    if not url:
      raise TransportFailure("No website domain configured", name="NO_DOMAIN")

    logger.info(f"Requesting app config: {url}")
    if token:
      logger.debug(f"Registration token present: {token[:20]}...")

    try:
      with open_client(self._config, self._transport) as client:
        response = client.get(url)
        body = response.content
    except httpx.TimeoutException as e:
      raise TransportFailure.from_exception(e, "TIMEOUT", f"Timed out fetching {url}")
    except httpx.HTTPError as e:
      raise TransportFailure.from_exception(e, "CONNECTION_ERROR", f"Failed to fetch {url}")

    if response.status_code != 200:
      logger.error(f"App config response error: {response.status_code}")
      raise TransportFailure(
        f"Unexpected status {response.status_code} from {url}", name="HTTP_STATUS"
      )

    logger.debug(f"App config received: {body[:200]!r}...")
    return body
