"""Android entrypoint for the splash-gated web app.

Injects Android OS interfaces into the shared pywebview bootstrap.
"""

from __future__ import annotations

from entrypoints.splash_app_core import run_splash_app
from os_interfaces.android import (
  AndroidConfigStorage,
  AndroidNetworkMonitor,
  android_cache_dir,
  launch_deep_link,
  open_external_url,
  resolve_token_provider,
)
from os_interfaces.base import OSImplementations
from splash_gate.config import config
from splash_gate.models import LaunchContext


def main() -> None:
  os_impl = OSImplementations(
    config_storage_cls=AndroidConfigStorage,
    network_monitor_cls=AndroidNetworkMonitor,
    token_provider_factory=resolve_token_provider,
    open_external_url=open_external_url,
    cache_dir=android_cache_dir(),
  )
  run_splash_app(
    os_impl=os_impl,
    context=LaunchContext(deep_link=launch_deep_link()),
    config=config,
  )


if __name__ == "__main__":
  main()
