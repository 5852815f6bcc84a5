"""Linux-specific implementations of OS interfaces"""

import logging
import os
import socket
import subprocess
from pathlib import Path
from typing import Any

import yaml
from platformdirs import user_cache_dir, user_config_dir

from .base import ConfigStorage, NetworkMonitor, StaticTokenProvider, TokenProvider

logger = logging.getLogger(__name__)

TOKEN_ENV = "SPLASH_GATE_DEVICE_TOKEN"


class LinuxConfigStorage(ConfigStorage):
  """Linux configuration storage using YAML files in user config directory"""

  def __init__(self, app_name: str, config_name: str):
    self.config_dir = Path(user_config_dir(app_name, ensure_exists=True))
    self.config_file = self.config_dir / f"{config_name}.yaml"
    self._config: dict = {}
    self._load_config()

  def _load_config(self) -> None:
    """Load configuration from disk"""
    if self.config_file.exists():
      try:
        with open(self.config_file, "r") as f:
          self._config = yaml.safe_load(f) or {}
        logger.debug(f"Loaded config from {self.config_file}")
      except Exception as e:
        logger.error(f"Failed to load config: {e}")
        self._config = {}
    else:
      self._config = {}

  def load(self) -> dict:
    """Load configuration from storage"""
    self._load_config()
    return self._config.copy()

  def save(self, config: dict) -> None:
    """Save configuration to storage"""
    self._config = config.copy()
    try:
      self.config_dir.mkdir(parents=True, exist_ok=True)
      tmp_file = self.config_file.with_suffix(".yaml.tmp")
      with open(tmp_file, "w") as f:
        yaml.safe_dump(self._config, f, default_flow_style=False)
      os.replace(tmp_file, self.config_file)
      logger.debug(f"Saved config to {self.config_file}")
    except Exception as e:
      logger.error(f"Failed to save config: {e}")

  def get(self, key: str, default: Any = None) -> Any:
    """Get a configuration value by key"""
    return self._config.get(key, default)

  def set(self, key: str, value: Any) -> None:
    """Set a configuration value"""
    self._config[key] = value
    self.save(self._config)


class LinuxNetworkMonitor(NetworkMonitor):
  """Connectivity probe: can we open a TCP connection to a well-known host?"""

  def __init__(self, host: str = "1.1.1.1", port: int = 53, timeout: float = 1.5):
    self.host = host
    self.port = port
    self.timeout = timeout

  def is_available(self) -> bool:
    try:
      with socket.create_connection((self.host, self.port), timeout=self.timeout):
        return True
    except OSError as e:
      logger.debug(f"Network probe failed: {e}")
      return False


def env_token_provider() -> TokenProvider:
  """Desktop builds have no push service; a token may be injected for testing"""
  return StaticTokenProvider(os.getenv(TOKEN_ENV))


def linux_cache_dir(app_name: str) -> Path:
  return Path(user_cache_dir(app_name, ensure_exists=True))


def open_external_url(url: str) -> None:
  """Open a URL with the desktop's default handler"""
  try:
    subprocess.Popen(
      ["xdg-open", url],
      stdout=subprocess.DEVNULL,
      stderr=subprocess.DEVNULL,
    )
    logger.info(f"Opened {url}")
  except Exception as e:
    logger.error(f"Failed to open {url}: {e}")
