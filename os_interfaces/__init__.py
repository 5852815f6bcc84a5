"""OS interface module - platform-specific implementations

Since we build separate executables for each platform,
import the appropriate implementation directly in the entry points:
- splash_app_linux.py will import from os_interfaces.linux
- splash_app_android.py will import from os_interfaces.android
"""

from .base import (
  ConfigStorage,
  DialogPresenter,
  NetworkMonitor,
  OSImplementations,
  SplashHost,
  TokenProvider,
)

__all__ = [
  "ConfigStorage",
  "DialogPresenter",
  "NetworkMonitor",
  "OSImplementations",
  "SplashHost",
  "TokenProvider",
]
