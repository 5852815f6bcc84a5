"""Abstract base classes for OS-specific interfaces"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from splash_gate.models import DialogRequest, DialogResult


class ConfigStorage(ABC):
  """Abstract base class for persisted key/value storage"""

  @abstractmethod
  def load(self) -> dict:
    """Load configuration from storage"""
    raise NotImplementedError

  @abstractmethod
  def save(self, config: dict) -> None:
    """Save configuration to storage"""
    raise NotImplementedError

  @abstractmethod
  def get(self, key: str, default: Any = None) -> Any:
    """Get a configuration value by key"""
    raise NotImplementedError

  @abstractmethod
  def set(self, key: str, value: Any) -> None:
    """Set a configuration value"""
    raise NotImplementedError


class SplashHost(ABC):
  """The screen that owns the splash overlay and the main web view"""

  @abstractmethod
  def show_splash_image(self, image_path: Optional[Path]) -> None:
    """Render (or re-render) the splash background

    Args:
      image_path: Image file to show, or None for a blank splash
    """
    raise NotImplementedError

  @abstractmethod
  def proceed(self, deep_link: Optional[str], token: Optional[str]) -> None:
    """Start loading the main view behind the splash overlay

    Args:
      deep_link: URL from a push notification to open instead of the home page
      token: Push registration token to hand to the main view
    """
    raise NotImplementedError

  @abstractmethod
  def remove_splash(self) -> None:
    """Remove the splash overlay, revealing the main view"""
    raise NotImplementedError

  @abstractmethod
  def open_store(self, url: str) -> None:
    """Open the app's store page"""
    raise NotImplementedError

  @abstractmethod
  def exit_app(self) -> None:
    """Terminate the app"""
    raise NotImplementedError


class DialogPresenter(ABC):
  """Shows modal dialogs and reports the outcome"""

  @abstractmethod
  def present(
    self, request: DialogRequest, on_result: Callable[[DialogResult], None]
  ) -> None:
    """Show a dialog; on_result is called exactly once, from any thread

    A dismissal (outside tap, system back) is reported as
    DialogResult(button_id=None).
    """
    raise NotImplementedError


class NetworkMonitor(ABC):
  """Connectivity probe used once at launch"""

  @abstractmethod
  def is_available(self) -> bool:
    raise NotImplementedError


class TokenProvider(ABC):
  """Push registration token source, chosen once at startup"""

  @abstractmethod
  def get_token(self) -> Optional[str]:
    """Return the registration token, or None when there is none"""
    raise NotImplementedError


class NullTokenProvider(TokenProvider):
  """Used when no push library is available"""

  def get_token(self) -> Optional[str]:
    return None


class StaticTokenProvider(TokenProvider):
  def __init__(self, token: Optional[str]):
    self._token = token or None

  def get_token(self) -> Optional[str]:
    return self._token


class InMemoryConfigStorage(ConfigStorage):
  """Non-persistent storage, for tests and throwaway runs"""

  def __init__(self, initial: Optional[dict] = None):
    self._config: dict = dict(initial or {})

  def load(self) -> dict:
    return self._config.copy()

  def save(self, config: dict) -> None:
    self._config = config.copy()

  def get(self, key: str, default: Any = None) -> Any:
    return self._config.get(key, default)

  def set(self, key: str, value: Any) -> None:
    self._config[key] = value


@dataclass
class OSImplementations:
  """Platform bundle injected into the shared bootstrap"""

  config_storage_cls: type[ConfigStorage]
  network_monitor_cls: type[NetworkMonitor]
  token_provider_factory: Callable[[], TokenProvider]
  open_external_url: Callable[[str], None]
  cache_dir: Path
  storage_kwargs: dict = field(default_factory=dict)

  def config_storage(self) -> ConfigStorage:
    return self.config_storage_cls(**self.storage_kwargs)

  def network_monitor(self) -> NetworkMonitor:
    return self.network_monitor_cls()

  def token_provider(self) -> TokenProvider:
    return self.token_provider_factory()
