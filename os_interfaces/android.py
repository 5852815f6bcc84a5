"""Android-specific implementations of OS interfaces."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from jnius import JavaException, autoclass  # type: ignore

from .base import ConfigStorage, NetworkMonitor, NullTokenProvider, TokenProvider

logger = logging.getLogger(__name__)


# --- PyJNIus handles ---
PythonActivity = autoclass("org.kivy.android.PythonActivity")
Intent = autoclass("android.content.Intent")
Uri = autoclass("android.net.Uri")
Context = autoclass("android.content.Context")
BuildVersion = autoclass("android.os.Build$VERSION")
NetworkCapabilities = autoclass("android.net.NetworkCapabilities")
TimeUnit = autoclass("java.util.concurrent.TimeUnit")

TOKEN_TIMEOUT_S = 10


def _activity():
  return PythonActivity.mActivity


def _context():
  return _activity().getApplicationContext()


class AndroidConfigStorage(ConfigStorage):
  """SharedPreferences-backed storage; values are stored as JSON strings"""

  def __init__(self, prefs_name: str = "splash_gate"):
    self.prefs = _context().getSharedPreferences(prefs_name, Context.MODE_PRIVATE)

  def load(self) -> dict:
    result = {}
    for key in self.prefs.getAll().keySet().toArray():
      result[key] = self.get(key)
    return result

  def save(self, config: dict) -> None:
    editor = self.prefs.edit()
    editor.clear()
    for key, value in config.items():
      editor.putString(key, json.dumps(value))
    editor.apply()

  def get(self, key: str, default: Any = None) -> Any:
    raw = self.prefs.getString(key, None)
    if raw is None:
      return default
    try:
      return json.loads(raw)
    except ValueError:
      logger.warning("Corrupt preference %s; using default", key)
      return default

  def set(self, key: str, value: Any) -> None:
    editor = self.prefs.edit()
    editor.putString(key, json.dumps(value))
    editor.apply()


class AndroidNetworkMonitor(NetworkMonitor):
  """Wi-Fi or cellular transport on the active network"""

  def is_available(self) -> bool:
    manager = _context().getSystemService(Context.CONNECTIVITY_SERVICE)
    if BuildVersion.SDK_INT >= 23:
      network = manager.getActiveNetwork()
      if network is None:
        return False
      capabilities = manager.getNetworkCapabilities(network)
      if capabilities is None:
        return False
      return capabilities.hasTransport(
        NetworkCapabilities.TRANSPORT_WIFI
      ) or capabilities.hasTransport(NetworkCapabilities.TRANSPORT_CELLULAR)
    info = manager.getActiveNetworkInfo()
    return info is not None and info.isConnected()


class FirebaseTokenProvider(TokenProvider):
  """FCM registration token; blocks the calling (worker) thread"""

  def __init__(self, messaging_cls, tasks_cls):
    self._messaging = messaging_cls.getInstance()
    self._tasks = tasks_cls

  def get_token(self) -> Optional[str]:
    try:
      task = self._messaging.getToken()
      # Tasks.await is a Python keyword
      token = getattr(self._tasks, "await")(task, TOKEN_TIMEOUT_S, TimeUnit.SECONDS)
    except JavaException as e:
      logger.warning("FCM token unavailable: %s", e)
      return None
    if token:
      logger.info("FCM token: %s...", token[:20])
    return token or None


def resolve_token_provider() -> TokenProvider:
  """Decide once at startup whether Firebase Messaging is bundled"""
  try:
    messaging_cls = autoclass("com.google.firebase.messaging.FirebaseMessaging")
    tasks_cls = autoclass("com.google.android.gms.tasks.Tasks")
    return FirebaseTokenProvider(messaging_cls, tasks_cls)
  except JavaException:
    logger.info("Firebase Messaging not bundled; running without push token")
    return NullTokenProvider()


def android_cache_dir() -> Path:
  return Path(_context().getCacheDir().getAbsolutePath())


def open_external_url(url: str) -> None:
  """Open a URL (market://, https://) with an ACTION_VIEW intent"""
  try:
    intent = Intent(Intent.ACTION_VIEW, Uri.parse(url))
    intent.addFlags(Intent.FLAG_ACTIVITY_NEW_TASK)
    _activity().startActivity(intent)
  except JavaException:
    logger.exception("Failed to open %s", url)


def launch_deep_link() -> Optional[str]:
  """Push payload URL the activity was started with, if any"""
  intent = _activity().getIntent()
  if intent is None:
    return None
  url = intent.getStringExtra("url")
  return url or None
